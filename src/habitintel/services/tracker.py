"""Command and query API over the tracker's records.

``HabitTracker`` validates timeline changes, keeps each segment's cached
streak in step with its entries, and assembles month snapshots for
analytics. All I/O goes through the injected ``TrackerRepository``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Optional, Sequence

from ..constants import DEFAULT_COLOR
from ..domain.repositories import TrackerRepository
from ..errors import AdapterUnavailableError, NotFoundError, PartialCascadeError
from ..models.device import Device
from ..models.habit import HabitEntry, HabitSegment
from ..models.slot import Slot
from . import jobs
from .analytics import AnalyticsSnapshot, compute_analytics
from .dates import default_segment_start, month_bounds, parse_month
from .streaks import StreakState, compute_streak, effective_streak, next_milestone
from .timeline import active_segment_on, plan_succession, row_segment_for_month

logger = logging.getLogger("habitintel.tracker")

Clock = Callable[[], date]


@dataclass(frozen=True)
class ToggleResult:
    """Outcome of a toggle: the stored entry plus the recomputed streak."""

    entry: HabitEntry
    streak: int
    last_completed_date: Optional[date]


@dataclass
class MonthSnapshot:
    """Records of one device scoped to a month."""

    month: date
    slots: list[Slot] = field(default_factory=list)
    segments: list[HabitSegment] = field(default_factory=list)
    entries: list[HabitEntry] = field(default_factory=list)


@dataclass(frozen=True)
class SlotRow:
    """What a slot row shows for a month: its habit and live streak."""

    slot: Slot
    segment: Optional[HabitSegment]
    live_streak: int
    next_milestone: int


class HabitTracker:
    """Single-writer command/query facade for one device's data."""

    def __init__(self, repository: TrackerRepository, *, clock: Clock = date.today):
        self.repository = repository
        self.clock = clock

    # Devices -------------------------------------------------------------

    def register_device(self, device_id: str, username: str) -> Device:
        """Return the device, creating it on first use."""

        device = self.repository.get_device(device_id)
        if device is not None:
            return device
        device = self.repository.save_device(Device(device_id=device_id, username=username))
        logger.info("Device registered", extra={"device_id": device_id})
        return device

    def get_device(self, device_id: str) -> Optional[Device]:
        return self.repository.get_device(device_id)

    # Slots ---------------------------------------------------------------

    def list_slots(self, device_id: str) -> list[Slot]:
        return self.repository.load_slots(device_id)

    def create_slot(self, device_id: str, time: str, order: Optional[int] = None) -> Slot:
        """Append a slot; without an explicit ``order`` it goes last."""

        if order is None:
            order = len(self.repository.load_slots(device_id))
        slot = self.repository.save_slot(Slot(device_id=device_id, time=time, order=order))
        logger.info("Slot created", extra={"slot_id": slot.id, "device_id": device_id})
        return slot

    def _require_slot(self, slot_id: str, operation: str) -> Slot:
        slot = self.repository.get_slot(slot_id)
        if slot is None:
            raise NotFoundError("Slot", slot_id, operation=operation)
        return slot

    def reorder_slots(self, device_id: str, ordered_ids: Sequence[str]) -> None:
        """Rewrite slot ranks so ``ordered_ids[i]`` gets ``order = i``."""

        known = {slot.id for slot in self.repository.load_slots(device_id)}
        for slot_id in ordered_ids:
            if slot_id not in known:
                raise NotFoundError("Slot", slot_id, operation="reorder_slots")
        self.repository.reorder_slots(device_id, list(ordered_ids))

    def reorder_slots_async(
        self,
        device_id: str,
        ordered_ids: Sequence[str],
        *,
        on_error: Optional[jobs.ErrorHandler] = None,
    ) -> jobs.Job:
        """Queue a reorder without waiting for it.

        The returned job reports the outcome; failures are also logged and
        passed to ``on_error``.
        """

        return jobs.enqueue(
            "reorder_slots",
            self.reorder_slots,
            metadata={"device_id": device_id, "slot_count": len(ordered_ids)},
            on_error=on_error,
            device_id=device_id,
            ordered_ids=list(ordered_ids),
        )

    def delete_slot(self, slot_id: str) -> None:
        """Delete a slot, then each of its segments together with their entries.

        Steps run in order and are not rolled back. If one fails, a
        ``PartialCascadeError`` names what was removed and what is left.
        """

        slot = self._require_slot(slot_id, "delete_slot")
        segments = [
            seg for seg in self.repository.load_segments(slot.device_id) if seg.slot_id == slot_id
        ]
        steps: list[tuple[str, Callable[[], object]]] = [
            (f"slot:{slot_id}", lambda: self.repository.delete_slot(slot_id))
        ]
        for seg in segments:
            steps.extend(self._segment_cascade_steps(seg.id))
        self._run_cascade("delete_slot", slot_id, steps)
        logger.info(
            "Slot deleted",
            extra={"slot_id": slot_id, "segments_removed": len(segments)},
        )

    # Segments ------------------------------------------------------------

    def _require_segment(self, segment_id: str, operation: str) -> HabitSegment:
        segment = self.repository.get_segment(segment_id)
        if segment is None:
            raise NotFoundError("Segment", segment_id, operation=operation)
        return segment

    def create_segment(
        self,
        slot_id: str,
        name: str,
        color: str = DEFAULT_COLOR,
        start_date: Optional[date] = None,
        *,
        viewed_month: Optional[date] = None,
    ) -> HabitSegment:
        """Start a new habit on a slot, closing the slot's open habit.

        Without ``start_date`` the habit starts today, or on the first day of
        ``viewed_month`` when that month is already over.
        """

        slot = self._require_slot(slot_id, "create_segment")
        today = self.clock()
        if start_date is None:
            start_date = default_segment_start(parse_month(viewed_month or today), today=today)

        existing = self.repository.load_segments(slot.device_id)
        closed = plan_succession(existing, slot_id, start_date)
        segment = HabitSegment(
            device_id=slot.device_id,
            slot_id=slot_id,
            name=name,
            color=color,
            start_date=start_date,
            end_date=None,
        )
        batch = [closed, segment] if closed is not None else [segment]
        saved = self.repository.save_segments(batch)
        if closed is not None:
            logger.info(
                "Segment closed by successor",
                extra={"segment_id": closed.id, "end_date": closed.end_date, "successor_id": segment.id},
            )
        logger.info("Segment created", extra={"segment_id": segment.id, "slot_id": slot_id})
        return saved[-1]

    def rename_segment(self, segment_id: str, name: str, color: Optional[str] = None) -> HabitSegment:
        """Change a segment's display name and colour; range, streak and entries stay."""

        segment = self._require_segment(segment_id, "rename_segment")
        segment.name = name
        if color is not None:
            segment.color = color
        return self.repository.save_segment(segment)

    def delete_segment(self, segment_id: str) -> None:
        """Delete a segment and its entries; the timeline is left with a gap."""

        self._require_segment(segment_id, "delete_segment")
        self._run_cascade("delete_segment", segment_id, self._segment_cascade_steps(segment_id))
        logger.info("Segment deleted", extra={"segment_id": segment_id})

    def active_segment_on(self, slot_id: str, day: date) -> Optional[HabitSegment]:
        slot = self._require_slot(slot_id, "active_segment_on")
        segments = self.repository.load_segments(slot.device_id, (day, day))
        return active_segment_on(segments, slot_id, day)

    def segments_overlapping(
        self,
        device_id: str,
        range_start: date,
        range_end: date,
        *,
        slot_id: Optional[str] = None,
    ) -> list[HabitSegment]:
        segments = self.repository.load_segments(device_id, (range_start, range_end))
        if slot_id is not None:
            segments = [seg for seg in segments if seg.slot_id == slot_id]
        return segments

    # Entries -------------------------------------------------------------

    def toggle_entry(self, segment_id: str, day: date, completed: bool) -> ToggleResult:
        """Set one day's completion and rebuild the segment's streak from scratch.

        The entry and the segment's cached streak are written together, so a
        failed write leaves neither changed.
        """

        segment = self._require_segment(segment_id, "toggle_entry")
        history = [
            entry for entry in self.repository.load_segment_entries(segment_id) if entry.occurred_on != day
        ]
        if completed:
            history.append(
                HabitEntry(device_id=segment.device_id, segment_id=segment_id, occurred_on=day, completed=True)
            )
        state = compute_streak(history)
        segment.streak = state.streak
        segment.last_completed_date = state.last_completed_date
        entry, _ = self.repository.save_toggle(segment, day, completed)
        logger.debug(
            "Entry toggled",
            extra={"segment_id": segment_id, "day": day, "completed": completed, "streak": state.streak},
        )
        return ToggleResult(entry=entry, streak=state.streak, last_completed_date=state.last_completed_date)

    def recompute_streak(self, segment: HabitSegment) -> StreakState:
        """Refresh the cached ``streak``/``last_completed_date`` of ``segment``.

        Repairs a cache that drifted from its entries, for example after an
        interrupted import.
        """

        state = compute_streak(self.repository.load_segment_entries(segment.id, completed_only=True))
        segment.streak = state.streak
        segment.last_completed_date = state.last_completed_date
        self.repository.save_segment(segment)
        logger.debug(
            "Streak recomputed",
            extra={"segment_id": segment.id, "streak": state.streak},
        )
        return state

    def live_streak(self, segment: HabitSegment) -> int:
        return effective_streak(segment.streak, segment.last_completed_date, today=self.clock())

    # Month views ---------------------------------------------------------

    def load_month(self, device_id: str, month: date | str) -> MonthSnapshot:
        """Load the slots plus the segments and entries touching ``month``."""

        anchor = parse_month(month)
        bounds = month_bounds(anchor)
        return MonthSnapshot(
            month=anchor,
            slots=self.repository.load_slots(device_id),
            segments=self.repository.load_segments(device_id, bounds),
            entries=self.repository.load_entries(device_id, bounds),
        )

    def month_rows(self, snapshot: MonthSnapshot) -> list[SlotRow]:
        rows = []
        for slot in snapshot.slots:
            segment = row_segment_for_month(snapshot.segments, slot.id, snapshot.month)
            live = self.live_streak(segment) if segment is not None else 0
            rows.append(
                SlotRow(slot=slot, segment=segment, live_streak=live, next_milestone=next_milestone(live))
            )
        return rows

    def analytics(self, device_id: str, month: date | str) -> AnalyticsSnapshot:
        snapshot = self.load_month(device_id, month)
        return compute_analytics(
            snapshot.month, snapshot.segments, snapshot.entries, slots=snapshot.slots
        )

    # Cascades ------------------------------------------------------------

    def _segment_cascade_steps(self, segment_id: str) -> list[tuple[str, Callable[[], object]]]:
        return [
            (f"segment:{segment_id}", lambda: self.repository.delete_segment(segment_id)),
            (f"entries:{segment_id}", lambda: self.repository.delete_entries(segment_id)),
        ]

    def _run_cascade(
        self,
        operation: str,
        record_id: str,
        steps: Sequence[tuple[str, Callable[[], object]]],
    ) -> None:
        completed: list[str] = []
        for index, (label, step) in enumerate(steps):
            try:
                step()
            except AdapterUnavailableError as exc:
                pending = [name for name, _ in steps[index:]]
                logger.error(
                    "Cascade stopped part way; repair needed",
                    extra={
                        "operation": operation,
                        "record_id": record_id,
                        "completed_steps": completed,
                        "pending_steps": pending,
                    },
                )
                if not completed:
                    raise
                raise PartialCascadeError(
                    f"{operation} {record_id!r} stopped at {label}: {exc}",
                    operation=operation,
                    record_id=record_id,
                    completed=completed,
                    pending=pending,
                ) from exc
            completed.append(label)


__all__ = ["HabitTracker", "MonthSnapshot", "SlotRow", "ToggleResult"]
