"""Plain data records passed to and returned from the generation engines."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Tuple


class EmploymentType(str, Enum):
    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    SHORT_TIME = "short_time"  # reduced hours


class NightPattern(str, Enum):
    """How many nights a staff member works before the two mandated rest days."""

    SINGLE = "single"  # N1 -> off -> off
    DOUBLE = "double"  # N1 -> N1 -> off -> off


@dataclass(frozen=True)
class StaffMember:
    """A member of the care staff roster (read-only during a generation run)."""

    id: str
    name: str
    employment_type: EmploymentType = EmploymentType.FULL_TIME
    can_work_nights: bool = False
    can_lead: bool = False
    allowed_shift_codes: Tuple[str, ...] = field(default_factory=tuple)  # empty = unrestricted
    weekend_and_holiday_off: bool = False


@dataclass(frozen=True)
class ShiftAssignment:
    date: date
    staff_id: str
    shift_code: str

    @property
    def key(self) -> Tuple[date, str]:
        return (self.date, self.staff_id)
