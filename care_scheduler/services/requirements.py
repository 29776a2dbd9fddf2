"""Daily headcount requirements per shift category."""

from __future__ import annotations

from datetime import date
from typing import Dict

import pandas as pd

from care_scheduler.catalog import ShiftCategory

from .calendar import month_days

DailyRequirements = Dict[date, Dict[ShiftCategory, int]]


def build_requirements_for_day(date_str: str, cfg) -> Dict[ShiftCategory, int]:
    """
    Build category requirements for a specific day.

    Args:
        date_str: Date string in YYYY-MM-DD format
        cfg: SchedulerConfig with default_requirements, weekend_requirements, overrides

    Returns:
        Dict of ShiftCategory -> headcount required for this day
    """
    req = dict(cfg.default_requirements)

    # Weekend values replace the defaults they name
    day_name = pd.Timestamp(date_str).day_name()
    if day_name in ["Saturday", "Sunday"]:
        for category, count in getattr(cfg, "weekend_requirements", {}).items():
            req[category] = count

    # Date-specific overrides take precedence
    if date_str in cfg.overrides:
        for category, count in cfg.overrides[date_str].items():
            req[category] = count

    return {ShiftCategory(category): int(count) for category, count in req.items()}


def build_month_requirements(year: int, month: int, cfg) -> DailyRequirements:
    return {
        day: build_requirements_for_day(day.strftime("%Y-%m-%d"), cfg)
        for day in month_days(year, month)
    }
