"""Monthly completion analytics over a slot/segment/entry snapshot.

Everything here is a pure function of the records handed in; callers load
the month's records first (see ``HabitTracker.load_month``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Optional

from ..models.habit import HabitEntry, HabitSegment
from ..models.slot import Slot
from .dates import days_in_month, format_date, week_of_month
from .timeline import is_active_on

TOP_HABITS_LIMIT = 5


def _rate(completed: int, total: int) -> float:
    if total == 0:
        return 0.0
    return completed / total * 100


@dataclass(frozen=True)
class DailyPoint:
    day: date
    value: float


@dataclass(frozen=True)
class WeeklyPoint:
    week: int
    value: float


@dataclass(frozen=True)
class HabitRate:
    segment_id: str
    name: str
    color: str
    rate: float


@dataclass(frozen=True)
class AnalyticsSnapshot:
    """Display-ready statistics for one month."""

    month: date
    daily_completion: list[DailyPoint] = field(default_factory=list)
    overall_efficiency: float = 0.0
    weekly_progress: list[WeeklyPoint] = field(default_factory=list)
    top_habits: list[HabitRate] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "dailyCompletion": [
                {"date": format_date(point.day), "value": point.value} for point in self.daily_completion
            ],
            "overallEfficiency": self.overall_efficiency,
            "weeklyProgress": [{"week": point.week, "value": point.value} for point in self.weekly_progress],
            "topHabits": [{"name": habit.name, "rate": habit.rate} for habit in self.top_habits],
        }


def compute_analytics(
    month_anchor: date,
    segments: Iterable[HabitSegment],
    entries: Iterable[HabitEntry],
    *,
    slots: Optional[Iterable[Slot]] = None,
    top_n: int = TOP_HABITS_LIMIT,
) -> AnalyticsSnapshot:
    """Aggregate daily, weekly and per-habit completion rates for a month.

    A segment counts toward a day's denominator when it is active that day;
    a completion only counts on a day its segment is active. Empty
    denominators produce 0 rather than an error.
    """

    segments = list(segments)
    if slots is not None:
        slot_ids = {slot.id for slot in slots}
        segments = [seg for seg in segments if seg.slot_id in slot_ids]
    done = {(entry.segment_id, entry.occurred_on) for entry in entries if entry.completed}
    days = days_in_month(month_anchor)

    daily: list[DailyPoint] = []
    weekly_totals: dict[int, list[int]] = {}
    per_segment = {seg.id: [0, 0] for seg in segments}  # [completed, active]
    total_completed = 0
    total_active = 0

    for day in days:
        active = 0
        completed = 0
        for seg in segments:
            if not is_active_on(seg, day):
                continue
            active += 1
            per_segment[seg.id][1] += 1
            if (seg.id, day) in done:
                completed += 1
                per_segment[seg.id][0] += 1
        daily.append(DailyPoint(day=day, value=_rate(completed, active)))
        bucket = weekly_totals.setdefault(week_of_month(day), [0, 0])
        bucket[0] += completed
        bucket[1] += active
        total_completed += completed
        total_active += active

    weekly = [WeeklyPoint(week=week, value=_rate(*weekly_totals[week])) for week in sorted(weekly_totals)]

    habit_rates = [
        HabitRate(
            segment_id=seg.id,
            name=seg.name,
            color=seg.color,
            rate=_rate(*per_segment[seg.id]),
        )
        for seg in segments
    ]
    # sorted() is stable, so equal rates keep their input order.
    top = sorted(habit_rates, key=lambda habit: habit.rate, reverse=True)[:top_n]

    return AnalyticsSnapshot(
        month=days[0],
        daily_completion=daily,
        overall_efficiency=_rate(total_completed, total_active),
        weekly_progress=weekly,
        top_habits=top,
    )


__all__ = [
    "AnalyticsSnapshot",
    "DailyPoint",
    "HabitRate",
    "TOP_HABITS_LIMIT",
    "WeeklyPoint",
    "compute_analytics",
]
