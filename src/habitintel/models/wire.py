"""Wire/storage shape of tracker records.

Stored data uses camelCase field names, ``_id`` keys and ``YYYY-MM-DD``
strings. Decoding is strict: a payload must carry exactly the fields of its
record type, with the right value types, or it is rejected.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional, Union

from ..errors import RecordShapeError
from ..services.dates import format_date, parse_date
from .device import Device
from .habit import HabitEntry, HabitSegment
from .slot import Slot

Record = Union[Device, Slot, HabitSegment, HabitEntry]


def _check_keys(
    payload: Any, kind: str, required: set[str], optional: frozenset[str] = frozenset()
) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise RecordShapeError(f"{kind} record must be an object, got {type(payload).__name__}")
    keys = set(payload)
    missing = required - keys
    if missing:
        raise RecordShapeError(f"{kind} record is missing {sorted(missing)}")
    unknown = keys - required - optional
    if unknown:
        raise RecordShapeError(f"{kind} record has unknown fields {sorted(unknown)}")
    return payload


def _str(payload: Mapping[str, Any], key: str, kind: str) -> str:
    value = payload[key]
    if not isinstance(value, str) or not value:
        raise RecordShapeError(f"{kind}.{key} must be a non-empty string")
    return value


def _int(payload: Mapping[str, Any], key: str, kind: str) -> int:
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise RecordShapeError(f"{kind}.{key} must be an integer")
    return value


def _bool(payload: Mapping[str, Any], key: str, kind: str) -> bool:
    value = payload[key]
    if not isinstance(value, bool):
        raise RecordShapeError(f"{kind}.{key} must be a boolean")
    return value


def _date(payload: Mapping[str, Any], key: str, kind: str) -> date:
    try:
        return parse_date(payload[key])
    except (TypeError, ValueError) as exc:
        raise RecordShapeError(f"{kind}.{key}: {exc}") from exc


def _optional_date(payload: Mapping[str, Any], key: str, kind: str) -> Optional[date]:
    if payload.get(key) is None:
        return None
    return _date(payload, key, kind)


def _datetime(payload: Mapping[str, Any], key: str, kind: str) -> datetime:
    value = payload[key]
    if not isinstance(value, str):
        raise RecordShapeError(f"{kind}.{key} must be an ISO-8601 string")
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise RecordShapeError(f"{kind}.{key}: {exc}") from exc


def _optional_iso(value: Optional[date]) -> Optional[str]:
    return format_date(value) if value is not None else None


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def device_to_wire(device: Device) -> dict[str, Any]:
    return {
        "deviceId": device.device_id,
        "username": device.username,
        "createdAt": device.created_at.isoformat(),
    }


def slot_to_wire(slot: Slot) -> dict[str, Any]:
    return {"_id": slot.id, "deviceId": slot.device_id, "time": slot.time, "order": slot.order}


def segment_to_wire(segment: HabitSegment) -> dict[str, Any]:
    return {
        "_id": segment.id,
        "deviceId": segment.device_id,
        "slotId": segment.slot_id,
        "name": segment.name,
        "color": segment.color,
        "startDate": format_date(segment.start_date),
        "endDate": _optional_iso(segment.end_date),
        "streak": segment.streak,
        "lastCompletedDate": _optional_iso(segment.last_completed_date),
    }


def entry_to_wire(entry: HabitEntry) -> dict[str, Any]:
    return {
        "_id": entry.id,
        "deviceId": entry.device_id,
        "segmentId": entry.segment_id,
        "date": format_date(entry.occurred_on),
        "completed": entry.completed,
    }


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def device_from_wire(payload: Any) -> Device:
    data = _check_keys(payload, "device", {"deviceId", "username", "createdAt"})
    return Device(
        device_id=_str(data, "deviceId", "device"),
        username=_str(data, "username", "device"),
        created_at=_datetime(data, "createdAt", "device"),
    )


def slot_from_wire(payload: Any) -> Slot:
    data = _check_keys(payload, "slot", {"_id", "deviceId", "time", "order"})
    return Slot(
        id=_str(data, "_id", "slot"),
        device_id=_str(data, "deviceId", "slot"),
        time=_str(data, "time", "slot"),
        order=_int(data, "order", "slot"),
    )


def segment_from_wire(payload: Any) -> HabitSegment:
    kind = "segment"
    data = _check_keys(
        payload,
        kind,
        {"_id", "deviceId", "slotId", "name", "color", "startDate", "endDate"},
        frozenset({"streak", "lastCompletedDate"}),
    )
    start_date = _date(data, "startDate", kind)
    end_date = _optional_date(data, "endDate", kind)
    if end_date is not None and end_date < start_date:
        raise RecordShapeError(f"{kind}.endDate precedes startDate")
    return HabitSegment(
        id=_str(data, "_id", kind),
        device_id=_str(data, "deviceId", kind),
        slot_id=_str(data, "slotId", kind),
        name=_str(data, "name", kind),
        color=_str(data, "color", kind),
        start_date=start_date,
        end_date=end_date,
        streak=_int(data, "streak", kind) if "streak" in data else 0,
        last_completed_date=_optional_date(data, "lastCompletedDate", kind),
    )


def entry_from_wire(payload: Any) -> HabitEntry:
    kind = "entry"
    data = _check_keys(payload, kind, {"_id", "deviceId", "segmentId", "date", "completed"})
    return HabitEntry(
        id=_str(data, "_id", kind),
        device_id=_str(data, "deviceId", kind),
        segment_id=_str(data, "segmentId", kind),
        occurred_on=_date(data, "date", kind),
        completed=_bool(data, "completed", kind),
    )


_ENCODERS: dict[type, Callable[[Any], dict[str, Any]]] = {
    Device: device_to_wire,
    Slot: slot_to_wire,
    HabitSegment: segment_to_wire,
    HabitEntry: entry_to_wire,
}

DECODERS: dict[str, Callable[[Any], Record]] = {
    "device": device_from_wire,
    "slot": slot_from_wire,
    "segment": segment_from_wire,
    "entry": entry_from_wire,
}


def to_wire(record: Record) -> dict[str, Any]:
    """Encode any tracker record into its stored shape."""

    encoder = _ENCODERS.get(type(record))
    if encoder is None:
        raise TypeError(f"Not a tracker record: {type(record).__name__}")
    return encoder(record)


def from_wire(kind: str, payload: Any) -> Record:
    """Decode ``payload`` as a record of ``kind`` (device, slot, segment, entry)."""

    try:
        decoder = DECODERS[kind]
    except KeyError:
        raise RecordShapeError(f"Unknown record kind {kind!r}") from None
    return decoder(payload)


__all__ = [
    "DECODERS",
    "Record",
    "device_from_wire",
    "device_to_wire",
    "entry_from_wire",
    "entry_to_wire",
    "from_wire",
    "segment_from_wire",
    "segment_to_wire",
    "slot_from_wire",
    "slot_to_wire",
    "to_wire",
]
