"""Calendar helpers over naive ``YYYY-MM-DD`` dates."""

from __future__ import annotations

import re
from calendar import monthrange
from datetime import date, datetime, timedelta
from typing import Union

DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_MONTH_RE = re.compile(r"^\d{4}-\d{2}$")

DateLike = Union[date, str]


def parse_date(value: DateLike) -> date:
    """Return a ``date`` from a canonical ``YYYY-MM-DD`` string (or a date)."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise ValueError(f"Expected a YYYY-MM-DD date, got {value!r}")
    return date.fromisoformat(value)


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def parse_month(value: DateLike) -> date:
    """Return the first day of the month named by ``YYYY-MM`` or any date in it."""

    if isinstance(value, date):
        return parse_date(value).replace(day=1)
    if isinstance(value, str) and _MONTH_RE.match(value):
        year, month = (int(part) for part in value.split("-"))
        return date(year, month, 1)
    return parse_date(value).replace(day=1)


def format_month(value: date) -> str:
    return value.strftime(MONTH_FORMAT)


def month_bounds(anchor: date) -> tuple[date, date]:
    """Return the first and last calendar day of ``anchor``'s month."""

    _, last_day = monthrange(anchor.year, anchor.month)
    return anchor.replace(day=1), anchor.replace(day=last_day)


def days_in_month(anchor: date) -> list[date]:
    """Every day of ``anchor``'s month, ascending from the 1st."""

    first, last = month_bounds(anchor)
    return [first + timedelta(days=offset) for offset in range(last.day)]


def previous_day(value: date) -> date:
    return value - timedelta(days=1)


def is_today(value: date, *, today: date | None = None) -> bool:
    """Compare ``value`` against the wall-clock date (or an injected ``today``)."""

    return value == (today or date.today())


def week_of_month(value: date) -> int:
    """Seven-day bucket counted from the 1st (1..5), not the ISO week."""

    return (value.day - 1) // 7 + 1


def default_segment_start(month_anchor: date, *, today: date | None = None) -> date:
    """Start date offered for a new habit while viewing ``month_anchor``.

    Today, unless the viewed month is already over, in which case the habit
    starts on that month's first day.
    """

    today = today or date.today()
    first, last = month_bounds(month_anchor)
    if today > last:
        return first
    return today


__all__ = [
    "DATE_FORMAT",
    "MONTH_FORMAT",
    "days_in_month",
    "default_segment_start",
    "format_date",
    "format_month",
    "is_today",
    "month_bounds",
    "parse_date",
    "parse_month",
    "previous_day",
    "week_of_month",
]
