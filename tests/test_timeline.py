"""Tests for segment timeline rules."""

from __future__ import annotations

from datetime import date

import pytest

from habitintel.errors import InvalidRangeError
from habitintel.services.timeline import (
    active_segment_on,
    check_timeline,
    is_active_on,
    overlaps_range,
    plan_succession,
    row_segment_for_month,
    segments_overlapping_range,
)


class TestActivity:
    def test_closed_segment_is_inclusive_on_both_ends(self, segment_factory):
        seg = segment_factory(date(2024, 3, 5), date(2024, 3, 10))

        assert not is_active_on(seg, date(2024, 3, 4))
        assert is_active_on(seg, date(2024, 3, 5))
        assert is_active_on(seg, date(2024, 3, 10))
        assert not is_active_on(seg, date(2024, 3, 11))

    def test_open_segment_runs_forever(self, segment_factory):
        seg = segment_factory(date(2024, 3, 5))

        assert not is_active_on(seg, date(2024, 3, 4))
        assert is_active_on(seg, date(2030, 1, 1))

    def test_overlaps_range(self, segment_factory):
        seg = segment_factory(date(2024, 2, 20), date(2024, 3, 2))

        assert overlaps_range(seg, date(2024, 3, 1), date(2024, 3, 31))
        assert overlaps_range(seg, date(2024, 2, 1), date(2024, 2, 29))
        assert not overlaps_range(seg, date(2024, 4, 1), date(2024, 4, 30))
        assert not overlaps_range(seg, date(2024, 1, 1), date(2024, 1, 31))


class TestActiveSegmentOn:
    def test_picks_the_segment_covering_the_day(self, segment_factory):
        first = segment_factory(date(2024, 3, 1), date(2024, 3, 9))
        second = segment_factory(date(2024, 3, 10))
        other_slot = segment_factory(date(2024, 3, 1), slot_id="slot-b")
        segments = [first, second, other_slot]

        assert active_segment_on(segments, "slot-a", date(2024, 3, 9)) is first
        assert active_segment_on(segments, "slot-a", date(2024, 3, 10)) is second
        assert active_segment_on(segments, "slot-a", date(2024, 2, 28)) is None

    def test_overlap_prefers_latest_start(self, segment_factory):
        older = segment_factory(date(2024, 3, 1))
        newer = segment_factory(date(2024, 3, 5))

        assert active_segment_on([newer, older], "slot-a", date(2024, 3, 6)) is newer
        assert active_segment_on([older, newer], "slot-a", date(2024, 3, 6)) is newer

    def test_equal_starts_prefer_later_position(self, segment_factory):
        a = segment_factory(date(2024, 3, 1))
        b = segment_factory(date(2024, 3, 1))

        assert active_segment_on([a, b], "slot-a", date(2024, 3, 2)) is b


def test_segments_overlapping_range_scopes_by_slot(segment_factory):
    before = segment_factory(date(2024, 1, 1), date(2024, 1, 31))
    inside = segment_factory(date(2024, 2, 1), date(2024, 3, 3))
    open_seg = segment_factory(date(2024, 3, 4))
    elsewhere = segment_factory(date(2024, 3, 1), slot_id="slot-b")
    segments = [before, inside, open_seg, elsewhere]

    march = (date(2024, 3, 1), date(2024, 3, 31))
    assert segments_overlapping_range(segments, *march) == [inside, open_seg, elsewhere]
    assert segments_overlapping_range(segments, *march, slot_id="slot-a") == [inside, open_seg]


def test_row_segment_for_month_uses_latest_overlapping(segment_factory):
    first = segment_factory(date(2024, 3, 1), date(2024, 3, 14))
    second = segment_factory(date(2024, 3, 15))

    assert row_segment_for_month([first, second], "slot-a", date(2024, 3, 1)) is second
    assert row_segment_for_month([first, second], "slot-a", date(2024, 2, 1)) is None


class TestPlanSuccession:
    def test_closes_open_segment_day_before_successor(self, segment_factory):
        current = segment_factory(date(2024, 3, 1))

        closed = plan_succession([current], "slot-a", date(2024, 3, 1 + 9))

        assert closed is current
        assert current.end_date == date(2024, 3, 9)

    def test_closing_crosses_month_boundary(self, segment_factory):
        current = segment_factory(date(2024, 2, 10))

        plan_succession([current], "slot-a", date(2024, 3, 1))

        assert current.end_date == date(2024, 2, 29)

    def test_nothing_to_close_on_empty_slot(self, segment_factory):
        other = segment_factory(date(2024, 3, 1), slot_id="slot-b")

        assert plan_succession([other], "slot-a", date(2024, 3, 1)) is None
        assert other.end_date is None

    def test_rejects_insert_before_a_later_segment(self, segment_factory):
        closed = segment_factory(date(2024, 3, 1), date(2024, 3, 9))
        current = segment_factory(date(2024, 3, 10))

        with pytest.raises(InvalidRangeError) as excinfo:
            plan_succession([closed, current], "slot-a", date(2024, 3, 5))

        assert excinfo.value.record_id == current.id
        assert current.end_date is None

    def test_rejects_same_start_as_open_segment(self, segment_factory):
        current = segment_factory(date(2024, 3, 10))

        with pytest.raises(InvalidRangeError):
            plan_succession([current], "slot-a", date(2024, 3, 10))
        assert current.end_date is None

    def test_rejects_start_inside_closed_segment(self, segment_factory):
        # Open successor was deleted, leaving only a closed segment.
        closed = segment_factory(date(2024, 3, 1), date(2024, 3, 20))

        with pytest.raises(InvalidRangeError):
            plan_succession([closed], "slot-a", date(2024, 3, 20))

    def test_allows_start_after_gap(self, segment_factory):
        closed = segment_factory(date(2024, 3, 1), date(2024, 3, 10))

        assert plan_succession([closed], "slot-a", date(2024, 3, 15)) is None


class TestCheckTimeline:
    def test_accepts_back_to_back_segments_and_other_slots(self, segment_factory):
        segments = [
            segment_factory(date(2024, 3, 10)),
            segment_factory(date(2024, 3, 1), date(2024, 3, 9)),
            segment_factory(date(2024, 3, 5), slot_id="slot-b"),
        ]

        check_timeline(segments)

    def test_rejects_two_open_segments(self, segment_factory):
        first = segment_factory(date(2024, 3, 1))
        second = segment_factory(date(2024, 3, 20))

        with pytest.raises(InvalidRangeError) as excinfo:
            check_timeline([second, first])

        assert excinfo.value.record_id == second.id

    def test_rejects_shared_boundary_day(self, segment_factory):
        with pytest.raises(InvalidRangeError):
            check_timeline(
                [
                    segment_factory(date(2024, 3, 1), date(2024, 3, 10)),
                    segment_factory(date(2024, 3, 10), date(2024, 3, 12)),
                ]
            )
