"""Per-attempt working state of a generation run."""

from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Dict, Iterable, List, Sequence, Set, Tuple

from care_scheduler.catalog import ShiftCategory, category_of
from care_scheduler.domain.entities import ShiftAssignment, StaffMember
from care_scheduler.services.calendar import month_days
from care_scheduler.services.constraints import AssignmentIndex, RuleSet


class GenerationContext:
    """
    Committed assignments, taken slots and lookback indexes for one attempt.

    Built fresh for every attempt and thrown away afterwards; nothing in here
    outlives a single pass through the phases.
    """

    def __init__(
        self,
        year: int,
        month: int,
        staff: Sequence[StaffMember],
        previous_tail: Iterable[ShiftAssignment],
        rules: RuleSet,
        holidays: Iterable[date] = (),
    ):
        self.year = year
        self.month = month
        self.days: List[date] = month_days(year, month)
        self.staff: List[StaffMember] = list(staff)
        self.staff_by_id: Dict[str, StaffMember] = {s.id: s for s in self.staff}
        self.rules = rules
        self.holidays = frozenset(holidays)
        self.tail = AssignmentIndex(previous_tail)

        self.committed: List[ShiftAssignment] = []
        self.index = AssignmentIndex()
        self.taken: Set[Tuple[date, str]] = set()
        self._category_counts: Counter = Counter()

    def in_month(self, day: date) -> bool:
        return day.year == self.year and day.month == self.month

    def is_taken(self, day: date, staff_id: str) -> bool:
        return (day, staff_id) in self.taken

    def commit(self, day: date, staff_id: str, shift_code: str) -> ShiftAssignment:
        key = (day, staff_id)
        if key in self.taken:
            raise ValueError(f"Slot already taken: {staff_id} on {day.isoformat()}")
        assignment = ShiftAssignment(day, staff_id, shift_code)
        self.committed.append(assignment)
        self.index.add(assignment)
        self.taken.add(key)
        self._category_counts[(day, category_of(shift_code))] += 1
        return assignment

    def count_on(self, day: date, category: ShiftCategory) -> int:
        return self._category_counts[(day, category)]

    def ordered(self) -> List[ShiftAssignment]:
        """Committed assignments sorted by date, then roster order."""
        order = {s.id: i for i, s in enumerate(self.staff)}
        return sorted(self.committed, key=lambda a: (a.date, order.get(a.staff_id, len(order))))
