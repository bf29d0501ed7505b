"""Habit entry repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ...models.habit import HabitEntry, HabitSegment


class EntryRepository(Protocol):
    """Repository for daily completion entries."""

    def load_entries(
        self, device_id: str, month_range: Optional[tuple[date, date]] = None
    ) -> list[HabitEntry]:
        """List a device's entries, optionally only those inside a range."""
        ...

    def load_segment_entries(self, segment_id: str, *, completed_only: bool = False) -> list[HabitEntry]:
        """List every entry of one segment, oldest first."""
        ...

    def upsert_entry(
        self, segment_id: str, occurred_on: date, completed: bool, *, device_id: str
    ) -> HabitEntry:
        """Insert or update the single entry for ``(segment_id, occurred_on)``."""
        ...

    def save_toggle(
        self, segment: HabitSegment, occurred_on: date, completed: bool
    ) -> tuple[HabitEntry, HabitSegment]:
        """Upsert the day's entry and store ``segment``'s cached streak in one write."""
        ...

    def delete_entries(self, segment_id: str) -> int:
        """Delete all entries of a segment and return how many were removed."""
        ...
