"""In-memory persistence adapter.

Reference implementation of ``TrackerRepository`` used by tests and as a
scratch backend. Records are copied on the way in and out, so callers never
alias stored state.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence, TypeVar

from sqlmodel import SQLModel

from ...errors import AdapterUnavailableError
from ...models.device import Device
from ...models.habit import HabitEntry, HabitSegment
from ...models.slot import Slot
from ...services.timeline import overlaps_range

_R = TypeVar("_R", bound=SQLModel)


def _clone(record: _R) -> _R:
    return type(record)(**record.model_dump())


class InMemoryTrackerRepository:
    """Dictionary-backed tracker repository.

    ``fail_on`` holds operation names that raise ``AdapterUnavailableError``
    when called, to exercise the caller's failure handling.
    """

    def __init__(self, *, fail_on: Iterable[str] = ()):
        self.devices: dict[str, Device] = {}
        self.slots: dict[str, Slot] = {}
        self.segments: dict[str, HabitSegment] = {}
        self.entries: dict[str, HabitEntry] = {}
        self.fail_on: set[str] = set(fail_on)
        self.calls: list[str] = []

    def _enter(self, operation: str, record_id: Optional[str] = None) -> None:
        self.calls.append(operation)
        if operation in self.fail_on:
            raise AdapterUnavailableError(
                f"{operation} failed: storage offline", operation=operation, record_id=record_id
            )

    # Devices -------------------------------------------------------------

    def get_device(self, device_id: str) -> Optional[Device]:
        self._enter("get_device", device_id)
        device = self.devices.get(device_id)
        return _clone(device) if device else None

    def save_device(self, device: Device) -> Device:
        self._enter("save_device", device.device_id)
        self.devices[device.device_id] = _clone(device)
        return _clone(device)

    # Slots ---------------------------------------------------------------

    def load_slots(self, device_id: str) -> list[Slot]:
        self._enter("load_slots", device_id)
        rows = [slot for slot in self.slots.values() if slot.device_id == device_id]
        return [_clone(slot) for slot in sorted(rows, key=lambda slot: slot.order)]

    def get_slot(self, slot_id: str) -> Optional[Slot]:
        self._enter("get_slot", slot_id)
        slot = self.slots.get(slot_id)
        return _clone(slot) if slot else None

    def save_slot(self, slot: Slot) -> Slot:
        self._enter("save_slot", slot.id)
        self.slots[slot.id] = _clone(slot)
        return _clone(slot)

    def reorder_slots(self, device_id: str, ordered_ids: Sequence[str]) -> None:
        self._enter("reorder_slots", device_id)
        for index, slot_id in enumerate(ordered_ids):
            slot = self.slots.get(slot_id)
            if slot is not None and slot.device_id == device_id:
                slot.order = index

    def delete_slot(self, slot_id: str) -> None:
        self._enter("delete_slot", slot_id)
        self.slots.pop(slot_id, None)

    # Segments ------------------------------------------------------------

    def load_segments(
        self, device_id: str, month_range: Optional[tuple[date, date]] = None
    ) -> list[HabitSegment]:
        self._enter("load_segments", device_id)
        rows = [seg for seg in self.segments.values() if seg.device_id == device_id]
        if month_range is not None:
            rows = [seg for seg in rows if overlaps_range(seg, *month_range)]
        return [_clone(seg) for seg in sorted(rows, key=lambda seg: seg.start_date)]

    def get_segment(self, segment_id: str) -> Optional[HabitSegment]:
        self._enter("get_segment", segment_id)
        segment = self.segments.get(segment_id)
        return _clone(segment) if segment else None

    def save_segment(self, segment: HabitSegment) -> HabitSegment:
        self._enter("save_segment", segment.id)
        self.segments[segment.id] = _clone(segment)
        return _clone(segment)

    def save_segments(self, segments: Sequence[HabitSegment]) -> list[HabitSegment]:
        self._enter("save_segments")
        for segment in segments:
            self.segments[segment.id] = _clone(segment)
        return [_clone(segment) for segment in segments]

    def delete_segment(self, segment_id: str) -> None:
        self._enter("delete_segment", segment_id)
        self.segments.pop(segment_id, None)

    # Entries -------------------------------------------------------------

    def load_entries(
        self, device_id: str, month_range: Optional[tuple[date, date]] = None
    ) -> list[HabitEntry]:
        self._enter("load_entries", device_id)
        rows = [entry for entry in self.entries.values() if entry.device_id == device_id]
        if month_range is not None:
            range_start, range_end = month_range
            rows = [entry for entry in rows if range_start <= entry.occurred_on <= range_end]
        return [_clone(entry) for entry in sorted(rows, key=lambda entry: entry.occurred_on)]

    def load_segment_entries(self, segment_id: str, *, completed_only: bool = False) -> list[HabitEntry]:
        self._enter("load_segment_entries", segment_id)
        rows = [
            entry
            for entry in self.entries.values()
            if entry.segment_id == segment_id and (entry.completed or not completed_only)
        ]
        return [_clone(entry) for entry in sorted(rows, key=lambda entry: entry.occurred_on)]

    def upsert_entry(
        self, segment_id: str, occurred_on: date, completed: bool, *, device_id: str
    ) -> HabitEntry:
        self._enter("upsert_entry", segment_id)
        return self._upsert(segment_id, occurred_on, completed, device_id)

    def save_toggle(
        self, segment: HabitSegment, occurred_on: date, completed: bool
    ) -> tuple[HabitEntry, HabitSegment]:
        self._enter("save_toggle", segment.id)
        entry = self._upsert(segment.id, occurred_on, completed, segment.device_id)
        self.segments[segment.id] = _clone(segment)
        return entry, _clone(segment)

    def _upsert(self, segment_id: str, occurred_on: date, completed: bool, device_id: str) -> HabitEntry:
        for entry in self.entries.values():
            if entry.segment_id == segment_id and entry.occurred_on == occurred_on:
                entry.completed = completed
                return _clone(entry)
        entry = HabitEntry(
            device_id=device_id,
            segment_id=segment_id,
            occurred_on=occurred_on,
            completed=completed,
        )
        self.entries[entry.id] = entry
        return _clone(entry)

    def delete_entries(self, segment_id: str) -> int:
        self._enter("delete_entries", segment_id)
        doomed = [key for key, entry in self.entries.items() if entry.segment_id == segment_id]
        for key in doomed:
            del self.entries[key]
        return len(doomed)


__all__ = ["InMemoryTrackerRepository"]
