"""Tests for JSON export and import."""

from __future__ import annotations

import json
from datetime import date

import pytest

from habitintel.errors import InvalidRangeError, NotFoundError, RecordShapeError
from habitintel.infra.repositories import InMemoryTrackerRepository
from habitintel.services.export_json import (
    EXPORT_VERSION,
    export_device_json,
    import_device_json,
    parse_bundle,
)
from habitintel.services.tracker import HabitTracker

DEVICE_ID = "device-1"


@pytest.fixture
def populated(tracker, slot):
    read = tracker.create_segment(slot.id, "Read", start_date=date(2024, 3, 1))
    run = tracker.create_segment(slot.id, "Run", start_date=date(2024, 3, 10))
    tracker.toggle_entry(read.id, date(2024, 3, 2), True)
    tracker.toggle_entry(run.id, date(2024, 3, 11), True)
    tracker.toggle_entry(run.id, date(2024, 3, 12), True)
    return tracker, slot, read, run


def test_export_writes_wire_records(populated, tmp_path):
    tracker, slot, read, run = populated

    path = export_device_json(tracker.repository, DEVICE_ID, tmp_path / "out" / "export.json")
    payload = json.loads(path.read_text(encoding="utf-8"))

    assert payload["version"] == EXPORT_VERSION
    assert payload["device"]["deviceId"] == DEVICE_ID
    assert [item["_id"] for item in payload["slots"]] == [slot.id]
    segments = {item["_id"]: item for item in payload["segments"]}
    assert segments[read.id]["endDate"] == "2024-03-09"
    assert segments[run.id]["endDate"] is None
    assert segments[run.id]["streak"] == 2
    assert sorted(item["date"] for item in payload["entries"]) == [
        "2024-03-02",
        "2024-03-11",
        "2024-03-12",
    ]


def test_export_requires_known_device(memory_repo, tmp_path):
    with pytest.raises(NotFoundError):
        export_device_json(memory_repo, "nobody", tmp_path / "export.json")


def test_import_restores_into_empty_store(populated, tmp_path):
    tracker, slot, read, run = populated
    path = export_device_json(tracker.repository, DEVICE_ID, tmp_path / "export.json")

    target = InMemoryTrackerRepository()
    bundle = import_device_json(target, path)

    assert bundle.device.username == "tester"
    restored = HabitTracker(target, clock=lambda: date(2024, 3, 12))
    assert [s.id for s in restored.list_slots(DEVICE_ID)] == [slot.id]
    assert restored.active_segment_on(slot.id, date(2024, 3, 11)).id == run.id
    assert restored.repository.get_segment(run.id).streak == 2
    assert len(target.load_entries(DEVICE_ID)) == 3


def _bundle(**overrides):
    payload = {
        "version": EXPORT_VERSION,
        "device": {"deviceId": DEVICE_ID, "username": "ana", "createdAt": "2024-01-01T00:00:00+00:00"},
        "slots": [{"_id": "s1", "deviceId": DEVICE_ID, "time": "07:00", "order": 0}],
        "segments": [],
        "entries": [],
    }
    payload.update(overrides)
    return payload


def test_parse_bundle_accepts_minimal_payload():
    bundle = parse_bundle(_bundle())

    assert bundle.device.device_id == DEVICE_ID
    assert [slot.id for slot in bundle.slots] == ["s1"]


@pytest.mark.parametrize(
    "payload",
    [
        _bundle(version=2),
        _bundle(slots={"_id": "s1"}),
        _bundle(slots=[{"_id": "s1", "deviceId": "intruder", "time": "07:00", "order": 0}]),
        {"version": EXPORT_VERSION},
        "not a bundle",
    ],
)
def test_parse_bundle_rejects_bad_payloads(payload):
    with pytest.raises(RecordShapeError):
        parse_bundle(payload)


def _segment_wire(seg_id, start, end=None, *, slot_id="s1", **extra):
    record = {
        "_id": seg_id,
        "deviceId": DEVICE_ID,
        "slotId": slot_id,
        "name": "Read",
        "color": "#3B82F6",
        "startDate": start,
        "endDate": end,
    }
    record.update(extra)
    return record


def _entry_wire(entry_id, segment_id, day, completed=True):
    return {
        "_id": entry_id,
        "deviceId": DEVICE_ID,
        "segmentId": segment_id,
        "date": day,
        "completed": completed,
    }


def _write(tmp_path, payload):
    path = tmp_path / "import.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_import_rebuilds_streak_without_entries(tmp_path):
    payload = _bundle(segments=[_segment_wire("a", "2024-03-01", streak=99, lastCompletedDate="2024-03-05")])
    target = InMemoryTrackerRepository()

    import_device_json(target, _write(tmp_path, payload))

    stored = target.get_segment("a")
    assert (stored.streak, stored.last_completed_date) == (0, None)


def test_import_rebuilds_streak_from_entries(tmp_path):
    payload = _bundle(
        segments=[_segment_wire("a", "2024-03-01", streak=99)],
        entries=[
            _entry_wire("e1", "a", "2024-03-01"),
            _entry_wire("e2", "a", "2024-03-03"),
            _entry_wire("e3", "a", "2024-03-04"),
            _entry_wire("e4", "a", "2024-03-05", completed=False),
        ],
    )
    target = InMemoryTrackerRepository()

    import_device_json(target, _write(tmp_path, payload))

    stored = target.get_segment("a")
    assert (stored.streak, stored.last_completed_date) == (2, date(2024, 3, 4))


@pytest.mark.parametrize(
    "segments",
    [
        [_segment_wire("a", "2024-03-01"), _segment_wire("b", "2024-03-10")],
        [_segment_wire("a", "2024-03-01", "2024-03-10"), _segment_wire("b", "2024-03-10")],
    ],
)
def test_parse_bundle_rejects_overlapping_segments(segments):
    with pytest.raises(InvalidRangeError):
        parse_bundle(_bundle(segments=segments))


def test_parse_bundle_accepts_adjacent_segments():
    bundle = parse_bundle(
        _bundle(segments=[_segment_wire("a", "2024-03-01", "2024-03-09"), _segment_wire("b", "2024-03-10")])
    )

    assert [seg.id for seg in bundle.segments] == ["a", "b"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"segments": [_segment_wire("a", "2024-03-01", slot_id="gone")]},
        {
            "segments": [_segment_wire("a", "2024-03-01")],
            "entries": [_entry_wire("e1", "ghost", "2024-03-02")],
        },
        {
            "segments": [_segment_wire("a", "2024-03-01")],
            "entries": [_entry_wire("e1", "a", "2024-03-02"), _entry_wire("e2", "a", "2024-03-02")],
        },
    ],
)
def test_parse_bundle_rejects_dangling_or_repeated_records(overrides):
    with pytest.raises(RecordShapeError):
        parse_bundle(_bundle(**overrides))


def test_rejected_import_writes_nothing(tmp_path):
    payload = _bundle(
        segments=[_segment_wire("a", "2024-03-01")],
        entries=[_entry_wire("e1", "ghost", "2024-03-02")],
    )
    target = InMemoryTrackerRepository()

    with pytest.raises(RecordShapeError):
        import_device_json(target, _write(tmp_path, payload))

    assert target.calls == []
