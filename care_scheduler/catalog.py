"""Static shift catalog: maps a shift code to its category, hours and flags."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional


class ShiftCategory(str, Enum):
    EARLY = "early"
    DAY = "day"
    LATE_SECONDARY = "late_secondary"
    LATE_PRIMARY = "late_primary"
    NIGHT = "night"
    OFF = "off"
    OTHER = "other"


@dataclass(frozen=True)
class ShiftCatalogEntry:
    code: str
    name: str
    category: ShiftCategory
    start_time: str = ""  # advisory only
    end_time: str = ""
    is_night_shift: bool = False
    is_off: bool = False
    restricts_next_early: bool = False  # next day may not be an EARLY shift


# Load tiers used by the scoring heuristic (lowest to highest)
LOAD_TIERS: Dict[ShiftCategory, int] = {
    ShiftCategory.OFF: 0,
    ShiftCategory.EARLY: 1,
    ShiftCategory.DAY: 2,
    ShiftCategory.LATE_PRIMARY: 3,
    ShiftCategory.LATE_SECONDARY: 3,
    ShiftCategory.NIGHT: 4,
    ShiftCategory.OTHER: 2,
}

GENERIC_OFF_CODE = "公"
REQUESTED_OFF_CODE = "希"
COMMITTEE_CODES = frozenset({"委", "研"})


def _entry(code, name, category, start="", end="", **flags) -> ShiftCatalogEntry:
    return ShiftCatalogEntry(code, name, category, start, end, **flags)


SHIFT_CATALOG: Dict[str, ShiftCatalogEntry] = {
    e.code: e
    for e in [
        # Early
        _entry("A2", "Early", ShiftCategory.EARLY, "06:30", "15:30"),
        _entry("A3", "Early", ShiftCategory.EARLY, "07:00", "16:00"),
        # Day
        _entry("D1", "Day", ShiftCategory.DAY, "08:30", "17:30"),
        _entry("D2", "Day", ShiftCategory.DAY, "09:00", "18:00"),
        _entry("D3", "Day", ShiftCategory.DAY, "09:30", "18:30"),
        # Short hours (childcare)
        _entry("S2", "Short hours", ShiftCategory.OTHER, "09:00", "16:00"),
        _entry("S3", "Short hours", ShiftCategory.OTHER, "09:30", "16:30"),
        # Late
        _entry("B1", "Late 1", ShiftCategory.LATE_PRIMARY, "10:00", "19:00"),
        _entry("B3", "Late 3", ShiftCategory.LATE_PRIMARY, "11:00", "20:00"),
        _entry("B5", "Late 5", ShiftCategory.LATE_SECONDARY, "13:00", "22:00", restricts_next_early=True),
        # Night
        _entry("N1", "Night", ShiftCategory.NIGHT, "22:00", "07:00", is_night_shift=True),
        # Days off
        _entry("公", "Public holiday off", ShiftCategory.OFF, is_off=True),
        _entry("年", "Annual leave", ShiftCategory.OFF, is_off=True),
        _entry("産", "Maternity leave", ShiftCategory.OFF, is_off=True),
        _entry("育", "Childcare leave", ShiftCategory.OFF, is_off=True),
        _entry("希", "Requested day off", ShiftCategory.OFF, is_off=True),
        # Part-time
        _entry("P1", "Part-time", ShiftCategory.OTHER, "09:00", "16:00"),
        _entry("P7", "Part-time", ShiftCategory.OTHER, "13:00", "17:00"),
        _entry("P8", "Part-time", ShiftCategory.OTHER, "09:00", "16:30"),
        # Committee / training
        _entry("委", "Committee", ShiftCategory.OTHER, "13:00", "14:00"),
        _entry("研", "Training", ShiftCategory.OTHER, "10:00", "16:00"),
    ]
}


def lookup(code: Optional[str]) -> Optional[ShiftCatalogEntry]:
    """Return the catalog entry for ``code`` or None for unknown codes."""
    if code is None:
        return None
    return SHIFT_CATALOG.get(code)


def category_of(code: Optional[str]) -> Optional[ShiftCategory]:
    entry = lookup(code)
    return entry.category if entry else None


def is_off_code(code: Optional[str]) -> bool:
    entry = lookup(code)
    return bool(entry and entry.is_off)


def is_night_code(code: Optional[str]) -> bool:
    entry = lookup(code)
    return bool(entry and entry.is_night_shift)


def is_early_code(code: Optional[str]) -> bool:
    return category_of(code) == ShiftCategory.EARLY


def restricts_next_early(code: Optional[str]) -> bool:
    entry = lookup(code)
    return bool(entry and entry.restricts_next_early)


def shift_load(code: Optional[str]) -> int:
    """Load tier of a code; unknown codes (and no code) count as 0."""
    entry = lookup(code)
    if entry is None:
        return 0
    return LOAD_TIERS.get(entry.category, 2)


def codes_in_category(category: ShiftCategory) -> List[str]:
    return [code for code, entry in SHIFT_CATALOG.items() if entry.category == category]
