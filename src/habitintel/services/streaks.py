"""Streak helpers derived from a segment's completion entries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from ..models.habit import HabitEntry
from .dates import is_today, previous_day

MILESTONES: tuple[int, ...] = (7, 14, 21, 30, 60, 90)


@dataclass(frozen=True)
class StreakState:
    """Streak length and the day it ends on (``None`` when nothing is completed)."""

    streak: int
    last_completed_date: Optional[date]


def completed_days(entries: Iterable[HabitEntry]) -> set[date]:
    """Days with a completed entry; ``completed=False`` rows count as absent."""

    return {entry.occurred_on for entry in entries if entry.completed}


def compute_streak(entries: Iterable[HabitEntry]) -> StreakState:
    """Recompute the streak from scratch.

    Completed days are walked newest first; the run continues while each day
    is exactly one calendar day before the previous and stops at the first gap.
    """

    days = sorted(completed_days(entries), reverse=True)
    if not days:
        return StreakState(streak=0, last_completed_date=None)

    streak = 1
    cursor = days[0]
    for day in days[1:]:
        if day != cursor - timedelta(days=1):
            break
        streak += 1
        cursor = day
    return StreakState(streak=streak, last_completed_date=days[0])


def longest_streak(entries: Iterable[HabitEntry]) -> int:
    """Longest run of consecutive completed days in the whole history."""

    longest = 0
    run = 0
    last_day: date | None = None
    for day in sorted(completed_days(entries)):
        if last_day is not None and day == last_day + timedelta(days=1):
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        last_day = day
    return longest


def effective_streak(
    streak: int, last_completed_date: Optional[date], *, today: date | None = None
) -> int:
    """Streak to display: the stored value while the last completion is today
    or yesterday, 0 once the run has lapsed."""

    if last_completed_date is None:
        return 0
    today = today or date.today()
    if is_today(last_completed_date, today=today) or is_today(
        last_completed_date, today=previous_day(today)
    ):
        return streak
    return 0


def next_milestone(streak: int) -> int:
    """Next streak threshold strictly above ``streak``."""

    for threshold in MILESTONES:
        if threshold > streak:
            return threshold
    return (streak // 100 + 1) * 100


__all__ = [
    "MILESTONES",
    "StreakState",
    "completed_days",
    "compute_streak",
    "effective_streak",
    "longest_streak",
    "next_milestone",
]
