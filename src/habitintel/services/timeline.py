"""Segment timeline rules for a slot.

A slot's segments form a timeline: at most one open segment, and no two
ranges overlapping. Replacing a habit closes the open segment the day before
its successor starts; history is never reordered.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from ..errors import InvalidRangeError
from ..models.habit import HabitSegment
from .dates import format_date, month_bounds, previous_day


def is_active_on(segment: HabitSegment, day: date) -> bool:
    """True when ``day`` falls inside the segment's inclusive range."""

    if day < segment.start_date:
        return False
    return segment.end_date is None or day <= segment.end_date


def overlaps_range(segment: HabitSegment, range_start: date, range_end: date) -> bool:
    """True when the segment's range intersects ``[range_start, range_end]``."""

    if segment.start_date > range_end:
        return False
    return segment.end_date is None or segment.end_date >= range_start


def _latest_start(candidates: Sequence[HabitSegment]) -> Optional[HabitSegment]:
    # max() keeps the first maximum; walk reversed so a later position wins ties.
    if not candidates:
        return None
    return max(reversed(candidates), key=lambda seg: seg.start_date)


def active_segment_on(
    segments: Iterable[HabitSegment], slot_id: str, day: date
) -> Optional[HabitSegment]:
    """Return the slot's segment covering ``day``.

    Under the timeline invariant at most one segment matches. If a bad write
    left overlapping segments, the one with the latest ``start_date`` wins.
    """

    candidates = [seg for seg in segments if seg.slot_id == slot_id and is_active_on(seg, day)]
    return _latest_start(candidates)


def segments_overlapping_range(
    segments: Iterable[HabitSegment],
    range_start: date,
    range_end: date,
    *,
    slot_id: Optional[str] = None,
) -> list[HabitSegment]:
    """Segments intersecting the range, optionally narrowed to one slot."""

    return [
        seg
        for seg in segments
        if (slot_id is None or seg.slot_id == slot_id) and overlaps_range(seg, range_start, range_end)
    ]


def row_segment_for_month(
    segments: Iterable[HabitSegment], slot_id: str, month_anchor: date
) -> Optional[HabitSegment]:
    """The segment a slot row is labelled with while viewing a month."""

    first, last = month_bounds(month_anchor)
    return _latest_start(segments_overlapping_range(segments, first, last, slot_id=slot_id))


def open_segment(segments: Iterable[HabitSegment], slot_id: str) -> Optional[HabitSegment]:
    return _latest_start([seg for seg in segments if seg.slot_id == slot_id and seg.is_open])


def plan_succession(
    segments: Sequence[HabitSegment], slot_id: str, start_date: date
) -> Optional[HabitSegment]:
    """Validate a new segment starting on ``start_date`` for ``slot_id``.

    Returns the currently open segment, closed in place at the day before
    ``start_date``, or ``None`` when nothing has to be closed. Raises
    ``InvalidRangeError`` when the new segment could not be appended to the
    end of the timeline without overlapping it.
    """

    slot_segments = [seg for seg in segments if seg.slot_id == slot_id]
    operation = "create_segment"

    later = [seg for seg in slot_segments if seg.start_date > start_date]
    if later:
        raise InvalidRangeError(
            f"Slot {slot_id!r} already has a segment starting after {format_date(start_date)}",
            operation=operation,
            record_id=later[0].id,
        )

    current = open_segment(slot_segments, slot_id)
    if current is not None and current.start_date >= start_date:
        # Closing it would leave an end date before its start; rename it instead.
        raise InvalidRangeError(
            f"Open segment {current.id!r} already starts on {format_date(current.start_date)}",
            operation=operation,
            record_id=current.id,
        )

    for seg in slot_segments:
        if seg.end_date is not None and seg.end_date >= start_date:
            raise InvalidRangeError(
                f"Segment {seg.id!r} still covers {format_date(start_date)}",
                operation=operation,
                record_id=seg.id,
            )

    if current is None:
        return None
    current.end_date = previous_day(start_date)
    return current


def check_timeline(segments: Iterable[HabitSegment]) -> None:
    """Raise ``InvalidRangeError`` if any slot holds overlapping segments.

    Two open segments on one slot always overlap, so this also enforces the
    single-open-segment rule.
    """

    by_slot: dict[str, list[HabitSegment]] = {}
    for seg in segments:
        by_slot.setdefault(seg.slot_id, []).append(seg)

    for slot_id, slot_segments in by_slot.items():
        ordered = sorted(slot_segments, key=lambda seg: seg.start_date)
        for before, after in zip(ordered, ordered[1:]):
            if before.end_date is None or before.end_date >= after.start_date:
                raise InvalidRangeError(
                    f"Segments {before.id!r} and {after.id!r} overlap on slot {slot_id!r}",
                    operation="check_timeline",
                    record_id=after.id,
                )


__all__ = [
    "active_segment_on",
    "check_timeline",
    "is_active_on",
    "open_segment",
    "overlaps_range",
    "plan_succession",
    "row_segment_for_month",
    "segments_overlapping_range",
]
