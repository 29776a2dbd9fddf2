"""Configuration loading for the care scheduler (YAML, with built-in defaults)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, FrozenSet, List

import yaml

from .catalog import SHIFT_CATALOG, ShiftCategory
from .domain.entities import NightPattern
from .services.calendar import locale_holidays, to_date


# Categories whose daily headcount the generator fills, in phase order
PHASE_ORDER: List[ShiftCategory] = [
    ShiftCategory.NIGHT,
    ShiftCategory.LATE_SECONDARY,
    ShiftCategory.LATE_PRIMARY,
    ShiftCategory.EARLY,
]


def _default_requirements() -> Dict[str, int]:
    return {"early": 2, "late_secondary": 1, "late_primary": 1, "night": 1}


def _default_phase_codes() -> Dict[str, str]:
    return {"night": "N1", "late_secondary": "B5", "late_primary": "B3", "early": "A2"}


@dataclass
class CPSatSettings:
    max_time_in_seconds: float = 30.0
    random_seed: int = 0
    work_balance_weight: int = 1
    night_balance_weight: int = 2


@dataclass
class SchedulerConfig:
    max_consecutive_work_days: int = 6
    night_pattern: NightPattern = NightPattern.SINGLE
    max_attempts: int = 100
    # Days of the previous month handed to the engines for lookback
    tail_days: int = 10
    default_requirements: Dict[str, int] = field(default_factory=_default_requirements)
    weekend_requirements: Dict[str, int] = field(default_factory=dict)
    overrides: Dict[str, Dict[str, int]] = field(default_factory=dict)
    phase_codes: Dict[str, str] = field(default_factory=_default_phase_codes)
    committee_shift_codes: List[str] = field(default_factory=lambda: ["D3", "A2"])
    # Locale calendar for weekend-and-holiday-off staff; None disables it
    holiday_country: str | None = "JP"
    # Facility-specific closure days on top of the locale calendar
    public_holidays: List[date] = field(default_factory=list)
    seed: int | None = None
    debug: bool = False
    cp_sat: CPSatSettings = field(default_factory=CPSatSettings)

    def phase_code(self, category: ShiftCategory) -> str:
        return self.phase_codes[category.value]

    def holiday_dates(self, year: int) -> FrozenSet[date]:
        return locale_holidays([year], self.holiday_country, self.public_holidays)


def _parse_category_counts(raw: Dict, where: str) -> Dict[str, int]:
    out: Dict[str, int] = {}
    for key, value in (raw or {}).items():
        try:
            category = ShiftCategory(str(key).lower())
        except ValueError:
            raise ValueError(f"Unknown shift category '{key}' in {where}") from None
        if category not in PHASE_ORDER:
            raise ValueError(f"No headcount can be required for '{key}' shifts in {where}")
        if int(value) < 0:
            raise ValueError(f"Negative headcount for '{key}' in {where}")
        out[category.value] = int(value)
    return out


def _validate(cfg: SchedulerConfig) -> SchedulerConfig:
    if cfg.max_consecutive_work_days < 1:
        raise ValueError("max_consecutive_work_days must be at least 1")
    if cfg.max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    for category in PHASE_ORDER:
        code = cfg.phase_codes.get(category.value)
        if code is None:
            raise ValueError(f"phase_codes is missing an entry for '{category.value}'")
        entry = SHIFT_CATALOG.get(code)
        if entry is None or entry.category != category:
            raise ValueError(f"phase code '{code}' is not a {category.value} shift")
    if cfg.holiday_country:
        try:
            locale_holidays([2000], cfg.holiday_country)
        except NotImplementedError:
            raise ValueError(f"Unsupported holiday_country '{cfg.holiday_country}'") from None
    if not cfg.committee_shift_codes:
        raise ValueError("committee_shift_codes must not be empty")
    for code in cfg.committee_shift_codes:
        if code not in SHIFT_CATALOG:
            raise ValueError(f"Unknown committee shift code '{code}'")
    return cfg


def load_config(path: str | Path | None = None) -> SchedulerConfig:
    """Load a SchedulerConfig from YAML; ``None`` returns the defaults."""
    if path is None:
        return _validate(SchedulerConfig())

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    cfg = SchedulerConfig()
    rules = raw.get("rules", {})
    if "max_consecutive_work_days" in rules:
        cfg.max_consecutive_work_days = int(rules["max_consecutive_work_days"])
    if "night_pattern" in rules:
        try:
            cfg.night_pattern = NightPattern(str(rules["night_pattern"]).lower())
        except ValueError:
            raise ValueError(f"Unknown night_pattern '{rules['night_pattern']}'") from None

    generation = raw.get("generation", {})
    cfg.max_attempts = int(generation.get("max_attempts", cfg.max_attempts))
    cfg.tail_days = int(generation.get("tail_days", cfg.tail_days))
    cfg.seed = generation.get("seed", cfg.seed)
    cfg.debug = bool(generation.get("debug", cfg.debug))

    requirements = raw.get("requirements", {})
    if "default" in requirements:
        cfg.default_requirements = _parse_category_counts(requirements["default"], "requirements.default")
    if "weekend" in requirements:
        cfg.weekend_requirements = _parse_category_counts(requirements["weekend"], "requirements.weekend")
    for day, counts in (requirements.get("overrides") or {}).items():
        date_str = to_date(day).strftime("%Y-%m-%d")
        cfg.overrides[date_str] = _parse_category_counts(counts, f"requirements.overrides[{date_str}]")

    if "phase_codes" in raw:
        cfg.phase_codes.update({str(k).lower(): str(v) for k, v in raw["phase_codes"].items()})
    if "committee_shift_codes" in raw:
        cfg.committee_shift_codes = [str(c) for c in raw["committee_shift_codes"]]

    if "holiday_country" in raw:
        country = raw["holiday_country"]
        cfg.holiday_country = str(country).upper() if country else None
    cfg.public_holidays = [to_date(d) for d in raw.get("public_holidays") or []]

    cp_sat = raw.get("cp_sat", {})
    for key, value in cp_sat.items():
        if not hasattr(cfg.cp_sat, key):
            raise ValueError(f"Unknown cp_sat setting '{key}'")
        setattr(cfg.cp_sat, key, type(getattr(cfg.cp_sat, key))(value))

    return _validate(cfg)
