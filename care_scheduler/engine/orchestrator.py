"""Orchestrator - loads a month's inputs, runs an engine, validates and persists the result."""

from __future__ import annotations

import random
from typing import List

from sqlalchemy.orm import Session

from care_scheduler.config import SchedulerConfig
from care_scheduler.domain.entities import ShiftAssignment
from care_scheduler.domain.models import SOURCE_GENERATED, SOURCE_MANUAL
from care_scheduler.domain.repositories import AssignmentRepository, StaffRepository
from care_scheduler.services.calendar import month_bounds, tail_window
from care_scheduler.services.constraints import RuleSet
from care_scheduler.services.requirements import build_month_requirements
from care_scheduler.validator import ERROR, WARNING, alerts_by_severity, collect_alerts, validate_schedule

from .base import BaseGenerator, GenerationRequest
from .phased import PhasedGenerator
from .seeding import committee_slots

ENGINES = ("greedy", "cp_sat")


def get_generator(name: str, cfg: SchedulerConfig, rng: random.Random | None = None) -> BaseGenerator:
    """Create the generator registered under ``name``."""
    if name == "greedy":
        return PhasedGenerator(cfg, rng)
    if name == "cp_sat":
        # Imported here; the CP-SAT module depends on this package
        from care_scheduler.ai.cp_sat_scheduler import CPSatGenerator

        return CPSatGenerator(cfg)
    raise ValueError(f"Unknown engine '{name}' (expected one of: {', '.join(ENGINES)})")


class MonthOrchestrator:
    """
    Coordinates one month's generation against the database.
    
    Reads the roster, the previous month's trailing days and the month's manual
    entries, hands them to the selected engine as a GenerationRequest, then
    checks the complete month before anything is written back.
    """
    
    def __init__(self, engine: str = "greedy", rng: random.Random | None = None):
        self.engine = engine
        self.rng = rng
    
    def load_request(self, session: Session, year: int, month: int, cfg: SchedulerConfig) -> GenerationRequest:
        staff = StaffRepository.get_roster(session)
        if not staff:
            raise RuntimeError("No staff in the database; import a roster first")
        
        tail_start, tail_end = tail_window(year, month, cfg.tail_days)
        previous_tail = AssignmentRepository.get_schedule_or_manual(session, tail_start, tail_end)
        
        start, end = month_bounds(year, month)
        manual = AssignmentRepository.get_entities(session, start, end, SOURCE_MANUAL)
        
        print(f"[INFO] Roster: {len(staff)} staff, previous-month tail: {len(previous_tail)} entries, "
              f"manual entries: {len(manual)}")
        return GenerationRequest(
            year=year,
            month=month,
            staff=staff,
            requirements=build_month_requirements(year, month, cfg),
            previous_tail=previous_tail,
            manual_assignments=manual,
        )
    
    def build_schedule(self, session: Session, year: int, month: int, cfg: SchedulerConfig) -> List[ShiftAssignment]:
        """
        Build and validate the complete schedule for a month.
        
        Returns:
            One assignment per staff member per day
        
        Raises:
            GenerationExhaustedError: If the engine could not build the month
            ValueError: If the built month breaks an invariant
        """
        print(f"[INFO] Orchestrator: Building schedule for {year}-{month:02d} ({self.engine} engine)")
        request = self.load_request(session, year, month, cfg)
        generator = get_generator(self.engine, cfg, self.rng)
        
        try:
            assignments = generator.generate(request)
        except RuntimeError as e:
            print(f"[ERROR] {generator.get_name()} engine failed: {e}")
            raise
        
        print(f"\n[INFO] Validating complete schedule...")
        rules = RuleSet(cfg.max_consecutive_work_days, request.night_pattern or cfg.night_pattern)
        fixed = committee_slots(request.manual_assignments, request.committee_assignments)
        alerts = collect_alerts(
            assignments, request.staff, year, month, request.requirements, request.previous_tail, rules, fixed
        )
        for alert in alerts:
            print(f"[WARN] {alert.message}")
        if alerts:
            tally = alerts_by_severity(alerts)
            print(f"[INFO] Alerts: {tally[ERROR]} error(s), {tally[WARNING]} warning(s)")
        validate_schedule(
            assignments, request.staff, year, month, request.requirements, request.previous_tail, rules, fixed
        )
        
        print(f"[OK] Orchestrator: Generated {len(assignments)} total assignments")
        return assignments


def build_month_schedule(
    session: Session,
    year: int,
    month: int,
    cfg: SchedulerConfig,
    engine: str = "greedy",
    persist: bool = True,
    rng: random.Random | None = None,
) -> List[ShiftAssignment]:
    """
    Convenience function to build a month schedule using the orchestrator.
    
    Args:
        session: Database session
        year, month: Target month
        cfg: SchedulerConfig
        engine: "greedy" (phased heuristic) or "cp_sat"
        persist: If True, replace the month's generated assignments in the database
        rng: Optional seeded random source for the greedy engine
    
    Returns:
        List of assignments
    """
    orchestrator = MonthOrchestrator(engine, rng)
    assignments = orchestrator.build_schedule(session, year, month, cfg)
    
    if persist:
        start, end = month_bounds(year, month)
        count = AssignmentRepository.replace_range(session, start, end, assignments, SOURCE_GENERATED)
        print(f"[INFO] Persisted {count} assignments to database")
    
    return assignments
