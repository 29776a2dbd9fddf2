"""Calendar helpers for monthly rostering."""

from __future__ import annotations

from datetime import date, timedelta
from typing import FrozenSet, Iterable, List, Optional, Tuple

import holidays as holiday_calendars
import pandas as pd


def month_days(year: int, month: int) -> List[date]:
    """All calendar days of the month, in order."""
    start = pd.Timestamp(year=year, month=month, day=1)
    return [d.date() for d in pd.date_range(start, periods=start.days_in_month, freq="D")]


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    days = month_days(year, month)
    return days[0], days[-1]


def previous_month(year: int, month: int) -> Tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def tail_window(year: int, month: int, tail_days: int) -> Tuple[date, date]:
    """First and last day of the previous month's trailing ``tail_days`` days."""
    first, _ = month_bounds(year, month)
    return first - timedelta(days=tail_days), first - timedelta(days=1)


def locale_holidays(years: Iterable[int], country: Optional[str] = "JP", extra: Iterable[date] = ()) -> FrozenSet[date]:
    """
    Public holidays of ``country`` for ``years``, merged with ``extra`` dates.

    ``country`` is an ISO 3166 code understood by the holidays package;
    ``None`` leaves only the extra dates.
    """
    found = set(extra)
    if country:
        found.update(holiday_calendars.country_holidays(country, years=list(years)).keys())
    return frozenset(found)


def is_weekend_or_holiday(day: date, holidays: Iterable[date] = ()) -> bool:
    # Saturday=5, Sunday=6
    return day.weekday() >= 5 or day in set(holidays)


def to_date(value) -> date:
    """Coerce a date, datetime, Timestamp or ISO string to a ``date``."""
    if isinstance(value, date) and not isinstance(value, pd.Timestamp):
        return value if type(value) is date else value.date()
    return pd.Timestamp(value).date()
