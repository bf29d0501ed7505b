"""Tests for habit streak calculations.

Covers the from-scratch recomputation, the "live" display rule and the
milestone ladder, including:
- Consecutive days
- Gaps in completion
- Entries recorded as not completed
- Empty histories
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from habitintel.services.streaks import (
    StreakState,
    compute_streak,
    effective_streak,
    longest_streak,
    next_milestone,
)

D = date(2024, 3, 20)


def _days_back(*offsets: int) -> list[date]:
    return [D - timedelta(days=offset) for offset in offsets]


class TestComputeStreak:
    def test_no_entries(self, entry_factory):
        assert compute_streak([]) == StreakState(streak=0, last_completed_date=None)

    def test_only_incomplete_entries(self, entry_factory):
        entries = [entry_factory("s", day, completed=False) for day in _days_back(0, 1)]

        assert compute_streak(entries) == StreakState(streak=0, last_completed_date=None)

    def test_stops_at_first_gap(self, entry_factory):
        entries = [entry_factory("s", day) for day in _days_back(0, 1, 2, 4, 5)]

        assert compute_streak(entries) == StreakState(streak=3, last_completed_date=D)

    def test_runs_from_most_recent_completion_not_today(self, entry_factory):
        entries = [entry_factory("s", day) for day in _days_back(10, 11)]

        assert compute_streak(entries) == StreakState(streak=2, last_completed_date=D - timedelta(days=10))

    def test_incomplete_entry_breaks_the_run(self, entry_factory):
        entries = [
            entry_factory("s", D),
            entry_factory("s", D - timedelta(days=1), completed=False),
            entry_factory("s", D - timedelta(days=2)),
        ]

        assert compute_streak(entries).streak == 1

    def test_order_of_input_is_irrelevant(self, entry_factory):
        entries = [entry_factory("s", day) for day in _days_back(2, 0, 1)]

        assert compute_streak(entries).streak == 3

    def test_streak_crosses_month_boundary(self, entry_factory):
        days = [date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]

        assert compute_streak([entry_factory("s", day) for day in days]).streak == 3


class TestLongestStreak:
    def test_empty(self):
        assert longest_streak([]) == 0

    def test_returns_longest_run(self, entry_factory):
        days = [date(2024, 1, day) for day in (1, 2, 3, 10, 11, 12, 13, 14, 15, 16, 20)]

        assert longest_streak([entry_factory("s", day) for day in days]) == 7


class TestEffectiveStreak:
    @pytest.mark.parametrize(
        "last, expected",
        [
            (D, 5),
            (D - timedelta(days=1), 5),
            (D - timedelta(days=2), 0),
            (None, 0),
        ],
    )
    def test_live_only_through_yesterday(self, last, expected):
        assert effective_streak(5, last, today=D) == expected

    def test_yesterday_crosses_month_boundary(self):
        assert effective_streak(3, date(2024, 2, 29), today=date(2024, 3, 1)) == 3
        assert effective_streak(3, date(2024, 3, 2), today=date(2024, 3, 1)) == 0


@pytest.mark.parametrize(
    "streak, milestone",
    [
        (0, 7),
        (6, 7),
        (7, 14),
        (13, 14),
        (20, 21),
        (21, 30),
        (45, 60),
        (60, 90),
        (89, 90),
        (90, 100),
        (99, 100),
        (100, 200),
        (250, 300),
    ],
)
def test_next_milestone(streak, milestone):
    assert next_milestone(streak) == milestone
