"""CP-SAT constraint-based generator for a full month of shifts."""

from __future__ import annotations

from datetime import timedelta
from typing import Callable, Dict, List, Sequence, Tuple, Union

from ortools.sat.python import cp_model

from care_scheduler.catalog import (
    GENERIC_OFF_CODE,
    is_early_code,
    is_night_code,
    lookup,
    restricts_next_early,
)
from care_scheduler.config import PHASE_ORDER
from care_scheduler.domain.entities import NightPattern, ShiftAssignment
from care_scheduler.engine.base import (
    BaseGenerator,
    GenerationExhaustedError,
    GenerationRequest,
    ScheduleGenerationError,
)
from care_scheduler.engine.context import GenerationContext
from care_scheduler.engine.seeding import seed_fixed_assignments
from care_scheduler.services.constraints import RuleSet, is_eligible

Term = Union[int, cp_model.IntVar]


def _is_working(code: str | None) -> bool:
    entry = lookup(code)
    return entry is not None and not entry.is_off


class CPSatGenerator(BaseGenerator):
    """
    CP-SAT based generator enforcing the same rules as the phased engine.

    Fixed assignments are seeded exactly as in the greedy engine; every other
    (staff, day) slot picks one of the phase codes or the generic day off.
    The model enforces:
    - exact daily headcount per tracked category
    - eligibility (whitelist, weekend/holiday off, night capability)
    - consecutive working-day cap across the previous month's tail
    - night recovery for the active pattern
    - no early shift after a restricted-recovery late shift

    The objective evens out working days and night shifts across staff.
    """

    name = "cp_sat"

    def generate(self, request: GenerationRequest) -> List[ShiftAssignment]:
        request = request.resolved(self.cfg)
        rules = RuleSet(self.cfg.max_consecutive_work_days, request.night_pattern)
        ctx = GenerationContext(
            request.year,
            request.month,
            request.staff,
            request.previous_tail,
            rules,
            holidays=self.cfg.holiday_dates(request.year),
        )
        for message in seed_fixed_assignments(
            ctx, request.manual_assignments, request.committee_assignments, self.cfg.committee_shift_codes
        ):
            self._log(message)

        self._ctx = ctx
        self._codes = [self.cfg.phase_code(c) for c in PHASE_ORDER] + [GENERIC_OFF_CODE]

        model = cp_model.CpModel()
        self._create_variables(model)
        self._add_coverage_constraints(model, request.requirements)
        self._add_consecutive_constraints(model)
        self._add_night_constraints(model)
        self._add_interval_constraints(model)
        self._build_objective(model)

        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = float(self.cfg.cp_sat.max_time_in_seconds)
        solver.parameters.random_seed = int(self.cfg.cp_sat.random_seed)
        solver.parameters.num_workers = 1  # deterministic for a fixed seed

        self._log("solving CP-SAT model")
        status = solver.Solve(model)
        if status in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            self._log(f"solution found (status: {self._status_name(status)})")
            return self._extract_solution(solver)
        raise GenerationExhaustedError(
            1, ScheduleGenerationError(f"CP-SAT solver found no schedule (status: {self._status_name(status)})")
        )

    def _create_variables(self, model: cp_model.CpModel) -> None:
        """One BoolVar per (staff, day, code) for every slot not fixed by seeding."""
        ctx = self._ctx
        self._x: Dict[Tuple[str, int, str], cp_model.IntVar] = {}
        for i, day in enumerate(ctx.days):
            for staff in ctx.staff:
                if ctx.is_taken(day, staff.id):
                    continue
                slot_vars = []
                for code in self._codes:
                    var = model.NewBoolVar(f"x_{staff.id}_{i}_{code}")
                    self._x[(staff.id, i, code)] = var
                    slot_vars.append(var)
                    if code != GENERIC_OFF_CODE and not is_eligible(
                        staff, code, day, ctx.index, ctx.tail, ctx.holidays
                    ):
                        model.Add(var == 0)
                model.AddExactlyOne(slot_vars)

    def _terms(self, staff_id: str, i: int, predicate: Callable[[str], bool]) -> List[Term]:
        """Indicator terms for ``predicate`` on day index ``i`` (negative = previous month)."""
        ctx = self._ctx
        if i >= len(ctx.days):
            return []
        day = ctx.days[0] + timedelta(days=i)
        if i < 0:
            code = ctx.tail.get(day, staff_id)
            return [1 if code is not None and predicate(code) else 0]
        if ctx.is_taken(day, staff_id):
            return [1 if predicate(ctx.index.get(day, staff_id)) else 0]
        return [self._x[(staff_id, i, code)] for code in self._codes if predicate(code)]

    @staticmethod
    def _add_le(model: cp_model.CpModel, terms: Sequence[Term], bound: int) -> None:
        constant = sum(t for t in terms if isinstance(t, int))
        variables = [t for t in terms if not isinstance(t, int)]
        if variables:
            model.Add(sum(variables) <= bound - constant)

    def _add_coverage_constraints(self, model: cp_model.CpModel, requirements) -> None:
        ctx = self._ctx
        for i, day in enumerate(ctx.days):
            for category in PHASE_ORDER:
                code = self.cfg.phase_code(category)
                required = requirements.get(day, {}).get(category, 0)
                missing = max(0, required - ctx.count_on(day, category))
                free = [self._x[(s.id, i, code)] for s in ctx.staff if (s.id, i, code) in self._x]
                if missing > len(free):
                    raise GenerationExhaustedError(
                        1, ScheduleGenerationError(f"Not enough free staff for {code} on {day.isoformat()}")
                    )
                if free:
                    model.Add(sum(free) == missing)

    def _add_consecutive_constraints(self, model: cp_model.CpModel) -> None:
        """Every window of cap+1 days holds at most cap working days."""
        ctx = self._ctx
        cap = ctx.rules.max_consecutive_work_days
        n = len(ctx.days)
        for staff in ctx.staff:
            for start in range(-cap, n - cap):
                terms: List[Term] = []
                for i in range(start, start + cap + 1):
                    terms.extend(self._terms(staff.id, i, _is_working))
                self._add_le(model, terms, cap)

    def _add_night_constraints(self, model: cp_model.CpModel) -> None:
        ctx = self._ctx

        def day_work(sid, i):
            return self._terms(sid, i, lambda c: _is_working(c) and not is_night_code(c))

        def night(sid, i):
            return self._terms(sid, i, is_night_code)

        def work(sid, i):
            return self._terms(sid, i, _is_working)

        for staff in ctx.staff:
            sid = staff.id
            for i in range(len(ctx.days)):
                if ctx.rules.night_pattern == NightPattern.SINGLE:
                    # N1 -> off -> off
                    self._add_le(model, night(sid, i - 1) + work(sid, i), 1)
                    if i >= 2:
                        self._add_le(model, night(sid, i - 2) + work(sid, i), 1)
                    continue

                # N1 -> N1 -> off -> off; only a night may follow a first night
                self._add_le(model, night(sid, i - 1) + day_work(sid, i), 1)
                self._add_le(model, night(sid, i - 2) + night(sid, i - 1) + night(sid, i), 2)
                if i >= 3:
                    self._add_le(model, night(sid, i - 3) + night(sid, i - 2) + work(sid, i), 2)

    def _add_interval_constraints(self, model: cp_model.CpModel) -> None:
        ctx = self._ctx
        for staff in ctx.staff:
            for i in range(len(ctx.days)):
                terms = self._terms(staff.id, i - 1, restricts_next_early) + self._terms(
                    staff.id, i, is_early_code
                )
                self._add_le(model, terms, 1)

    def _build_objective(self, model: cp_model.CpModel) -> None:
        """Minimise the spread (max - min) of working days and of night shifts."""
        ctx = self._ctx
        n = len(ctx.days)
        settings = self.cfg.cp_sat
        objective_terms = []

        def total(sid, predicate, name):
            terms: List[Term] = []
            for i in range(n):
                terms.extend(self._terms(sid, i, predicate))
            var = model.NewIntVar(0, n, name)
            model.Add(var == sum(terms))
            return var

        work_totals = [total(s.id, _is_working, f"work_{s.id}") for s in ctx.staff]
        if len(work_totals) >= 2:
            max_work = model.NewIntVar(0, n, "max_work")
            min_work = model.NewIntVar(0, n, "min_work")
            model.AddMaxEquality(max_work, work_totals)
            model.AddMinEquality(min_work, work_totals)
            objective_terms.append((max_work - min_work) * int(settings.work_balance_weight))

        night_totals = [total(s.id, is_night_code, f"nights_{s.id}") for s in ctx.staff if s.can_work_nights]
        if len(night_totals) >= 2:
            max_night = model.NewIntVar(0, n, "max_night")
            min_night = model.NewIntVar(0, n, "min_night")
            model.AddMaxEquality(max_night, night_totals)
            model.AddMinEquality(min_night, night_totals)
            objective_terms.append((max_night - min_night) * int(settings.night_balance_weight))

        if objective_terms:
            model.Minimize(sum(objective_terms))

    def _extract_solution(self, solver: cp_model.CpSolver) -> List[ShiftAssignment]:
        ctx = self._ctx
        for (staff_id, i, code), var in self._x.items():
            if solver.Value(var) == 1:
                ctx.commit(ctx.days[i], staff_id, code)
        return ctx.ordered()

    def _status_name(self, status: int) -> str:
        status_map = {
            cp_model.OPTIMAL: "OPTIMAL",
            cp_model.FEASIBLE: "FEASIBLE",
            cp_model.INFEASIBLE: "INFEASIBLE",
            cp_model.MODEL_INVALID: "MODEL_INVALID",
            cp_model.UNKNOWN: "UNKNOWN",
        }
        return status_map.get(status, f"UNKNOWN({status})")
