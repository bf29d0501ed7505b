"""JSON export/import of a device's records in their stored wire shape."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from ..domain.repositories import TrackerRepository
from ..errors import NotFoundError, RecordShapeError
from ..models.device import Device
from ..models.habit import HabitEntry, HabitSegment
from ..models.slot import Slot
from ..models.wire import (
    device_from_wire,
    entry_from_wire,
    segment_from_wire,
    slot_from_wire,
    to_wire,
)
from .streaks import compute_streak
from .timeline import check_timeline

logger = logging.getLogger("habitintel.export")

EXPORT_VERSION = 1
_BUNDLE_KEYS = {"version", "device", "slots", "segments", "entries"}


@dataclass
class ExportBundle:
    """Every record owned by one device."""

    device: Device
    slots: list[Slot] = field(default_factory=list)
    segments: list[HabitSegment] = field(default_factory=list)
    entries: list[HabitEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": EXPORT_VERSION,
            "device": to_wire(self.device),
            "slots": [to_wire(slot) for slot in self.slots],
            "segments": [to_wire(seg) for seg in self.segments],
            "entries": [to_wire(entry) for entry in self.entries],
        }


def collect_bundle(repository: TrackerRepository, device_id: str) -> ExportBundle:
    device = repository.get_device(device_id)
    if device is None:
        raise NotFoundError("Device", device_id, operation="export")
    return ExportBundle(
        device=device,
        slots=repository.load_slots(device_id),
        segments=repository.load_segments(device_id),
        entries=repository.load_entries(device_id),
    )


def export_device_json(repository: TrackerRepository, device_id: str, output_path: Path) -> Path:
    """Write the device's records to ``output_path`` and return the path."""

    bundle = collect_bundle(repository, device_id)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as fh:
        json.dump(bundle.to_dict(), fh, indent=2)
    logger.info(
        "Export written",
        extra={
            "path": str(output_path),
            "slots": len(bundle.slots),
            "segments": len(bundle.segments),
            "entries": len(bundle.entries),
        },
    )
    return output_path


def _records(payload: dict[str, Any], key: str) -> list[Any]:
    value = payload[key]
    if not isinstance(value, list):
        raise RecordShapeError(f"{key} must be a list")
    return value


def parse_bundle(payload: Any) -> ExportBundle:
    """Decode an export payload, rejecting any record of the wrong shape."""

    if not isinstance(payload, dict) or set(payload) != _BUNDLE_KEYS:
        raise RecordShapeError(f"Export must be an object with keys {sorted(_BUNDLE_KEYS)}")
    if payload["version"] != EXPORT_VERSION:
        raise RecordShapeError(f"Unsupported export version {payload['version']!r}")

    bundle = ExportBundle(
        device=device_from_wire(payload["device"]),
        slots=[slot_from_wire(item) for item in _records(payload, "slots")],
        segments=[segment_from_wire(item) for item in _records(payload, "segments")],
        entries=[entry_from_wire(item) for item in _records(payload, "entries")],
    )
    owner = bundle.device.device_id
    for record in (*bundle.slots, *bundle.segments, *bundle.entries):
        if record.device_id != owner:
            raise RecordShapeError(f"Record {record.id!r} belongs to another device")
    _check_references(bundle)
    check_timeline(bundle.segments)
    return bundle


def _check_references(bundle: ExportBundle) -> None:
    slot_ids = {slot.id for slot in bundle.slots}
    for seg in bundle.segments:
        if seg.slot_id not in slot_ids:
            raise RecordShapeError(f"Segment {seg.id!r} refers to unknown slot {seg.slot_id!r}")

    segment_ids = {seg.id for seg in bundle.segments}
    seen: set[tuple[str, date]] = set()
    for entry in bundle.entries:
        if entry.segment_id not in segment_ids:
            raise RecordShapeError(
                f"Entry {entry.id!r} refers to unknown segment {entry.segment_id!r}"
            )
        key = (entry.segment_id, entry.occurred_on)
        if key in seen:
            raise RecordShapeError(f"Entry {entry.id!r} repeats a day already recorded for its segment")
        seen.add(key)


def _refresh_streaks(bundle: ExportBundle) -> None:
    # Cached streaks in the file are not trusted; rebuild them from its entries.
    by_segment: dict[str, list[HabitEntry]] = {}
    for entry in bundle.entries:
        by_segment.setdefault(entry.segment_id, []).append(entry)
    for seg in bundle.segments:
        state = compute_streak(by_segment.get(seg.id, []))
        seg.streak = state.streak
        seg.last_completed_date = state.last_completed_date


def import_device_json(repository: TrackerRepository, input_path: Path) -> ExportBundle:
    """Load an export file and write every record through ``repository``."""

    with input_path.open("r", encoding="utf-8") as fh:
        bundle = parse_bundle(json.load(fh))

    _refresh_streaks(bundle)
    repository.save_device(bundle.device)
    for slot in bundle.slots:
        repository.save_slot(slot)
    if bundle.segments:
        repository.save_segments(bundle.segments)
    for entry in bundle.entries:
        repository.upsert_entry(
            entry.segment_id, entry.occurred_on, entry.completed, device_id=entry.device_id
        )
    logger.info(
        "Import applied",
        extra={"path": str(input_path), "device_id": bundle.device.device_id},
    )
    return bundle


__all__ = [
    "EXPORT_VERSION",
    "ExportBundle",
    "collect_bundle",
    "export_device_json",
    "import_device_json",
    "parse_bundle",
]
