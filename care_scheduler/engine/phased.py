"""Phased greedy generator with whole-month retry."""

from __future__ import annotations

import random
from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple

from care_scheduler.catalog import GENERIC_OFF_CODE, ShiftCategory, is_early_code, is_night_code, lookup
from care_scheduler.config import PHASE_ORDER, SchedulerConfig
from care_scheduler.domain.entities import NightPattern, ShiftAssignment, StaffMember
from care_scheduler.services.constraints import (
    RuleSet,
    consecutive_working_days,
    following_working_days,
    is_eligible,
    previous_shift_code,
    validate_shift,
)
from care_scheduler.services.requirements import DailyRequirements
from care_scheduler.services.scoring import score_candidate

from .base import BaseGenerator, GenerationExhaustedError, GenerationRequest, PhaseExhaustedError
from .context import GenerationContext
from .seeding import seed_fixed_assignments


class PhasedGenerator(BaseGenerator):
    """
    Greedy month builder.

    One attempt runs the phases in order over a clean context:
    fixed pre-seeding -> night -> secondary late -> primary late -> early ->
    residual days off. A phase that cannot fill a required slot aborts the
    attempt and the whole month is rebuilt from scratch, up to
    ``max_attempts`` times. Jitter from the injected ``rng`` is the only
    source of variation between attempts.
    """

    name = "greedy"

    def __init__(self, cfg: SchedulerConfig | None = None, rng: random.Random | None = None):
        super().__init__(cfg)
        self.rng = rng if rng is not None else random.Random(self.cfg.seed)

    def generate(self, request: GenerationRequest) -> List[ShiftAssignment]:
        request = request.resolved(self.cfg)
        rules = RuleSet(self.cfg.max_consecutive_work_days, request.night_pattern)
        holidays = self.cfg.holiday_dates(request.year)

        last_error: Optional[PhaseExhaustedError] = None
        for attempt in range(1, request.max_attempts + 1):
            ctx = GenerationContext(
                request.year,
                request.month,
                request.staff,
                request.previous_tail,
                rules,
                holidays=holidays,
            )
            try:
                self._run_attempt(ctx, request)
            except PhaseExhaustedError as e:
                last_error = e
                self._log(f"attempt {attempt}/{request.max_attempts} failed: {e}")
                continue
            self._log(f"succeeded on attempt {attempt}")
            return ctx.ordered()

        raise GenerationExhaustedError(request.max_attempts, last_error)

    def _run_attempt(self, ctx: GenerationContext, request: GenerationRequest) -> None:
        warnings = seed_fixed_assignments(
            ctx,
            request.manual_assignments,
            request.committee_assignments,
            self.cfg.committee_shift_codes,
        )
        for message in warnings:
            self._log(message)

        for category in PHASE_ORDER:
            self._fill_phase(ctx, category, request.requirements)

        self._fill_residual(ctx)

    def _fill_phase(self, ctx: GenerationContext, category, requirements: DailyRequirements) -> None:
        code = self.cfg.phase_code(category)
        for day in ctx.days:
            required = requirements.get(day, {}).get(category, 0)
            while ctx.count_on(day, category) < required:
                staff = self._pick_candidate(ctx, code, day)
                if staff is None:
                    raise PhaseExhaustedError(code, day)
                ctx.commit(day, staff.id, code)
                if is_night_code(code):
                    self._commit_night_recovery(ctx, staff, day, requirements)

    def _pick_candidate(self, ctx: GenerationContext, code: str, day: date) -> Optional[StaffMember]:
        candidates = [
            s
            for s in ctx.staff
            if not ctx.is_taken(day, s.id)
            and is_eligible(s, code, day, ctx.index, ctx.tail, ctx.holidays)
            and not self._conflicts_ahead(ctx, s, code, day)
        ]
        scores = {
            s.id: score_candidate(s, code, day, ctx.index, ctx.tail, ctx.rules.night_pattern, self.rng)
            for s in candidates
        }
        candidates.sort(key=lambda s: scores[s.id])

        for staff in candidates:
            if validate_shift(ShiftAssignment(day, staff.id, code), ctx.index, ctx.tail, ctx.rules) is None:
                return staff
        return None

    def _conflicts_ahead(self, ctx: GenerationContext, staff: StaffMember, code: str, day: date) -> bool:
        """
        Check the candidate against days already committed after ``day``.

        Phases fill the month out of day order, so a later day may already be
        fixed; the backward-looking validator cannot see those.
        """
        entry = lookup(code)
        if entry is None or entry.is_off:
            return False

        before = consecutive_working_days(day, staff.id, ctx.index, ctx.tail)
        after = following_working_days(day, staff.id, ctx.index)
        if before + 1 + after > ctx.rules.max_consecutive_work_days:
            return True

        tomorrow = ctx.index.get(day + timedelta(days=1), staff.id)
        if entry.restricts_next_early and is_early_code(tomorrow):
            return True

        if entry.is_night_shift:
            first_of_pair = self._is_first_of_pair(ctx, staff, day)
            for offset in (1,) if first_of_pair else (1, 2):
                following = lookup(ctx.index.get(day + timedelta(days=offset), staff.id))
                if following is None or following.is_off:
                    continue
                if first_of_pair and following.is_night_shift:
                    continue
                return True
        return False

    @staticmethod
    def _is_first_of_pair(ctx: GenerationContext, staff: StaffMember, day: date) -> bool:
        """A night on ``day`` opens a pair that tomorrow's night may complete."""
        if ctx.rules.night_pattern != NightPattern.DOUBLE:
            return False
        return not is_night_code(previous_shift_code(day, staff.id, ctx.index, ctx.tail))

    def _commit_night_recovery(
        self, ctx: GenerationContext, staff: StaffMember, day: date, requirements: DailyRequirements
    ) -> None:
        if not self._is_first_of_pair(ctx, staff, day):
            # Single pattern, or the second night of a pair
            self._force_off(ctx, staff.id, day, (1, 2))
            return

        tomorrow = day + timedelta(days=1)
        if not ctx.in_month(tomorrow) or ctx.is_taken(tomorrow, staff.id):
            return
        nights_needed = requirements.get(tomorrow, {}).get(ShiftCategory.NIGHT, 0)
        if ctx.count_on(tomorrow, ShiftCategory.NIGHT) >= nights_needed:
            return
        code = ctx.index.get(day, staff.id)
        if not is_eligible(staff, code, tomorrow, ctx.index, ctx.tail, ctx.holidays):
            return
        if self._conflicts_ahead(ctx, staff, code, tomorrow):
            return
        if validate_shift(ShiftAssignment(tomorrow, staff.id, code), ctx.index, ctx.tail, ctx.rules) is not None:
            # Pattern does not complete; scoring nudges a later pairing
            return
        ctx.commit(tomorrow, staff.id, code)
        self._force_off(ctx, staff.id, tomorrow, (1, 2))

    @staticmethod
    def _force_off(ctx: GenerationContext, staff_id: str, day: date, offsets: Iterable[int]) -> None:
        for offset in offsets:
            rest_day = day + timedelta(days=offset)
            if ctx.in_month(rest_day) and not ctx.is_taken(rest_day, staff_id):
                ctx.commit(rest_day, staff_id, GENERIC_OFF_CODE)

    @staticmethod
    def _fill_residual(ctx: GenerationContext) -> None:
        for day in ctx.days:
            for staff in ctx.staff:
                if not ctx.is_taken(day, staff.id):
                    ctx.commit(day, staff.id, GENERIC_OFF_CODE)


def generate_monthly_shift(
    year: int,
    month: int,
    staff: Sequence[StaffMember],
    requirements: DailyRequirements | None = None,
    previous_tail: Sequence[ShiftAssignment] = (),
    manual_assignments: Sequence[ShiftAssignment] = (),
    committee_assignments: Sequence[Tuple[date, str]] = (),
    night_pattern: NightPattern | None = None,
    max_attempts: int = 100,
    rng: random.Random | None = None,
    cfg: SchedulerConfig | None = None,
) -> List[ShiftAssignment]:
    """
    Generate a full month of assignments with the phased greedy engine.

    Args:
        year, month: Target calendar month
        staff: Roster for the run
        requirements: Per-date headcount per category (defaults from config)
        previous_tail: Last days of the previous month, for lookback
        manual_assignments: Entries already present for the month
        committee_assignments: Legacy (date, staff_id) committee days
        night_pattern: Night recovery pattern (defaults from config)
        max_attempts: Whole-month retries before giving up
        rng: Seedable random source for scoring jitter
        cfg: SchedulerConfig

    Returns:
        One assignment per staff member per day, sorted by date

    Raises:
        GenerationExhaustedError: If every attempt failed
    """
    generator = PhasedGenerator(cfg, rng)
    request = GenerationRequest(
        year=year,
        month=month,
        staff=list(staff),
        requirements=requirements,
        previous_tail=list(previous_tail),
        manual_assignments=list(manual_assignments),
        committee_assignments=list(committee_assignments),
        night_pattern=night_pattern,
        max_attempts=max_attempts,
    )
    return generator.generate(request)
