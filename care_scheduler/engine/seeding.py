"""Fixed pre-seeding: requested days off, committee/training days, manual entries."""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Sequence, Set, Tuple

from care_scheduler.catalog import COMMITTEE_CODES, GENERIC_OFF_CODE, REQUESTED_OFF_CODE, lookup
from care_scheduler.domain.entities import ShiftAssignment
from care_scheduler.services.constraints import validate_shift

from .context import GenerationContext


def _commit_committee(ctx: GenerationContext, day: date, staff_id: str, preferred_codes: Sequence[str]) -> str:
    for code in preferred_codes:
        candidate = ShiftAssignment(day, staff_id, code)
        if validate_shift(candidate, ctx.index, ctx.tail, ctx.rules) is None:
            ctx.commit(day, staff_id, code)
            return code
    # Administratively fixed: forced even when every preferred code breaks a rule
    ctx.commit(day, staff_id, preferred_codes[0])
    return preferred_codes[0]


def seed_fixed_assignments(
    ctx: GenerationContext,
    manual_assignments: Iterable[ShiftAssignment],
    committee_assignments: Iterable[Tuple[date, str]],
    committee_shift_codes: Sequence[str],
) -> List[str]:
    """
    Commit assignments decided outside the scoring algorithm.

    Manual entries are processed in date order:
    - requested day off becomes the generic day off
    - committee/training markers become the first committee shift code that
      validates, falling back to forcing the first one
    - any other known code is kept when it validates

    The legacy committee list is layered afterwards, skipping taken slots.

    Returns:
        Warning messages for manual entries that were dropped
    """
    warnings: List[str] = []

    for entry in sorted(manual_assignments, key=lambda a: (a.date, a.staff_id)):
        if not ctx.in_month(entry.date) or entry.staff_id not in ctx.staff_by_id:
            continue
        if ctx.is_taken(entry.date, entry.staff_id):
            continue
        code = entry.shift_code
        if code == REQUESTED_OFF_CODE:
            ctx.commit(entry.date, entry.staff_id, GENERIC_OFF_CODE)
        elif code in COMMITTEE_CODES:
            _commit_committee(ctx, entry.date, entry.staff_id, committee_shift_codes)
        elif lookup(code) is None:
            warnings.append(f"Unknown shift code '{code}' for {entry.staff_id} on {entry.date.isoformat()}")
        else:
            error = validate_shift(entry, ctx.index, ctx.tail, ctx.rules)
            if error is None:
                ctx.commit(entry.date, entry.staff_id, code)
            else:
                warnings.append(f"Manual {code} for {entry.staff_id} on {entry.date.isoformat()} dropped: {error}")

    for day, staff_id in committee_assignments:
        if not ctx.in_month(day) or staff_id not in ctx.staff_by_id:
            continue
        if ctx.is_taken(day, staff_id):
            continue
        _commit_committee(ctx, day, staff_id, committee_shift_codes)

    return warnings


def committee_slots(
    manual_assignments: Iterable[ShiftAssignment],
    committee_assignments: Iterable[Tuple[date, str]] = (),
) -> Set[Tuple[date, str]]:
    """Slots whose committee/training code is forced regardless of rule checks."""
    slots = {a.key for a in manual_assignments if a.shift_code in COMMITTEE_CODES}
    slots.update((day, staff_id) for day, staff_id in committee_assignments)
    return slots
