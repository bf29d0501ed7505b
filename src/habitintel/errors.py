"""Error kinds raised by the tracker core and its persistence adapters."""

from __future__ import annotations

from typing import Optional, Sequence


class HabitIntelError(Exception):
    """Base class for caller-visible failures.

    Carries the failing ``operation`` and the ``record_id`` it referenced so
    callers can retry or build a user-facing message.
    """

    def __init__(self, message: str, *, operation: str = "", record_id: Optional[str] = None):
        super().__init__(message)
        self.operation = operation
        self.record_id = record_id

    def context(self) -> dict[str, Optional[str]]:
        return {"operation": self.operation, "record_id": self.record_id}


class NotFoundError(HabitIntelError, LookupError):
    """An operation referenced a slot, segment, entry or device that does not exist."""

    def __init__(self, kind: str, record_id: str, *, operation: str = ""):
        super().__init__(f"{kind} {record_id!r} not found", operation=operation, record_id=record_id)
        self.kind = kind


class InvalidRangeError(HabitIntelError, ValueError):
    """A timeline operation would break the slot's non-overlap invariant."""


class AdapterUnavailableError(HabitIntelError):
    """The persistence collaborator failed; no fallback is attempted by the core."""


class PartialCascadeError(AdapterUnavailableError):
    """A cascading delete stopped part way; the removed records are not restored."""

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        record_id: str,
        completed: Sequence[str],
        pending: Sequence[str],
    ):
        super().__init__(message, operation=operation, record_id=record_id)
        self.completed = list(completed)
        self.pending = list(pending)


class RecordShapeError(ValueError):
    """A wire record did not match the expected shape for its type."""


__all__ = [
    "AdapterUnavailableError",
    "HabitIntelError",
    "InvalidRangeError",
    "NotFoundError",
    "PartialCascadeError",
    "RecordShapeError",
]
