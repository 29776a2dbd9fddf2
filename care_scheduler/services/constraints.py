"""Rule validation for single shift assignments and candidate eligibility."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Dict, Iterable, Optional, Tuple, Union

from care_scheduler.catalog import (
    ShiftCategory,
    category_of,
    is_night_code,
    lookup,
    restricts_next_early,
)
from care_scheduler.domain.entities import NightPattern, ShiftAssignment, StaffMember

from .calendar import is_weekend_or_holiday

# Longest backward walk; the previous-month tail is only ~10 days anyway
MAX_LOOKBACK_DAYS = 31


@dataclass(frozen=True)
class RuleSet:
    max_consecutive_work_days: int = 6
    night_pattern: NightPattern = NightPattern.SINGLE

    @classmethod
    def from_config(cls, cfg) -> "RuleSet":
        return cls(cfg.max_consecutive_work_days, cfg.night_pattern)


DEFAULT_RULES = RuleSet()


class AssignmentIndex:
    """(date, staff_id) -> shift code map for O(1) lookback."""

    def __init__(self, assignments: Iterable[ShiftAssignment] = ()):
        self._codes: Dict[Tuple[date, str], str] = {}
        self._by_staff: Dict[str, Dict[date, str]] = {}
        for a in assignments:
            self.add(a)

    def add(self, assignment: ShiftAssignment) -> None:
        self._codes[assignment.key] = assignment.shift_code
        self._by_staff.setdefault(assignment.staff_id, {})[assignment.date] = assignment.shift_code

    def get(self, day: date, staff_id: str) -> Optional[str]:
        return self._codes.get((day, staff_id))

    def count(self, staff_id: str, predicate: Callable[[str], bool]) -> int:
        return sum(1 for code in self._by_staff.get(staff_id, {}).values() if predicate(code))

    def __contains__(self, key) -> bool:
        return key in self._codes

    def __len__(self) -> int:
        return len(self._codes)


Assignments = Union[AssignmentIndex, Iterable[ShiftAssignment]]


def as_index(assignments: Assignments) -> AssignmentIndex:
    if isinstance(assignments, AssignmentIndex):
        return assignments
    return AssignmentIndex(assignments)


def shift_code_on(day: date, staff_id: str, committed: Assignments, previous_tail: Assignments = ()) -> Optional[str]:
    """Code assigned on ``day``: committed month first, previous-month tail second."""
    code = as_index(committed).get(day, staff_id)
    if code is None:
        code = as_index(previous_tail).get(day, staff_id)
    return code


def previous_shift_code(day: date, staff_id: str, committed: Assignments, previous_tail: Assignments = ()) -> Optional[str]:
    return shift_code_on(day - timedelta(days=1), staff_id, committed, previous_tail)


def consecutive_working_days(
    day: date,
    staff_id: str,
    committed: Assignments,
    previous_tail: Assignments = (),
) -> int:
    """
    Count back-to-back working days ending the day before ``day``.

    Walks backward through the committed assignments, falling back to the
    previous month's tail, and stops at the first gap or day off.
    """
    committed = as_index(committed)
    previous_tail = as_index(previous_tail)
    count = 0
    check = day - timedelta(days=1)
    for _ in range(MAX_LOOKBACK_DAYS):
        code = shift_code_on(check, staff_id, committed, previous_tail)
        entry = lookup(code)
        if entry is None or entry.is_off:
            break
        count += 1
        check -= timedelta(days=1)
    return count


def following_working_days(day: date, staff_id: str, committed: Assignments) -> int:
    """Count back-to-back working days already committed starting the day after ``day``."""
    committed = as_index(committed)
    count = 0
    check = day + timedelta(days=1)
    for _ in range(MAX_LOOKBACK_DAYS):
        entry = lookup(committed.get(check, staff_id))
        if entry is None or entry.is_off:
            break
        count += 1
        check += timedelta(days=1)
    return count


def validate_shift(
    candidate: ShiftAssignment,
    committed: Assignments,
    previous_tail: Assignments = (),
    rules: RuleSet = DEFAULT_RULES,
) -> Optional[str]:
    """
    Check whether a single proposed assignment is legal.

    Returns:
        An error message suitable for display, or None when the assignment is legal
    """
    entry = lookup(candidate.shift_code)
    if entry is None:
        return f"Invalid shift code: {candidate.shift_code}"

    # Days off reset the run and cannot break any rule
    if entry.is_off:
        return None

    committed = as_index(committed)
    previous_tail = as_index(previous_tail)

    run = consecutive_working_days(candidate.date, candidate.staff_id, committed, previous_tail)
    if run >= rules.max_consecutive_work_days:
        return (
            f"Consecutive work limit ({rules.max_consecutive_work_days} days) would be exceeded "
            f"(currently {run} days in a row)"
        )

    prev_code = previous_shift_code(candidate.date, candidate.staff_id, committed, previous_tail)
    if is_night_code(prev_code):
        if rules.night_pattern == NightPattern.DOUBLE and entry.is_night_shift:
            before = previous_shift_code(
                candidate.date - timedelta(days=1), candidate.staff_id, committed, previous_tail
            )
            if not is_night_code(before):
                return None
        return "The day after a night shift must be a day off"

    return None


def is_eligible(
    staff: StaffMember,
    shift_code: str,
    day: date,
    committed: Assignments,
    previous_tail: Assignments = (),
    holidays: Iterable[date] = (),
) -> bool:
    """Hard pre-filter applied before scoring: excluded candidates are never considered."""
    if staff.allowed_shift_codes and shift_code not in staff.allowed_shift_codes:
        return False
    if staff.weekend_and_holiday_off and is_weekend_or_holiday(day, holidays):
        return False
    if is_night_code(shift_code) and not staff.can_work_nights:
        return False
    if category_of(shift_code) == ShiftCategory.EARLY:
        if restricts_next_early(previous_shift_code(day, staff.id, committed, previous_tail)):
            return False
    return True
