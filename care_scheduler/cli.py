"""Command-line interface for the care scheduler."""

from __future__ import annotations

import argparse
import random

from care_scheduler.config import load_config
from care_scheduler.domain.db import DEFAULT_DB_URL, get_session, init_database, reset_database
from care_scheduler.domain.models import SOURCE_GENERATED, SOURCE_MANUAL
from care_scheduler.domain.repositories import AssignmentRepository, StaffRepository
from care_scheduler.engine.orchestrator import ENGINES, build_month_schedule
from care_scheduler.engine.seeding import committee_slots
from care_scheduler.io.export_csv import export_assignments_csv
from care_scheduler.io.import_csv import import_assignments_csv, import_staff_csv
from care_scheduler.services.calendar import month_bounds, tail_window
from care_scheduler.services.constraints import RuleSet
from care_scheduler.services.requirements import build_month_requirements
from care_scheduler.validator import (
    ERROR,
    WARNING,
    alerts_by_severity,
    collect_alerts,
    summarize_schedule,
    validate_schedule,
)


def _cmd_init_db(args: argparse.Namespace) -> None:
    """Initialize the database."""
    db_url = args.db or DEFAULT_DB_URL
    if args.reset:
        reset_database(db_url)
    else:
        init_database(db_url)
    print(f"[OK] Database initialized: {db_url}")


def _cmd_import_csv(args: argparse.Namespace) -> None:
    """Import CSV data into database."""
    db_url = args.db or DEFAULT_DB_URL
    session = get_session(db_url)
    
    try:
        if args.staff:
            count = import_staff_csv(session, args.staff)
            print(f"[OK] Imported {count} staff")
        
        if args.manual:
            count = import_assignments_csv(session, args.manual, SOURCE_MANUAL)
            print(f"[OK] Imported {count} manual entries")
        
        if args.history:
            count = import_assignments_csv(session, args.history, SOURCE_GENERATED)
            print(f"[OK] Imported {count} past assignments")
        
        session.close()
        print("[OK] CSV import complete")
        
    except Exception as e:
        session.rollback()
        session.close()
        print(f"[ERROR] Import failed: {e}")
        raise


def _cmd_generate(args: argparse.Namespace) -> None:
    """Generate the schedule for a month."""
    db_url = args.db or DEFAULT_DB_URL
    session = get_session(db_url)
    
    try:
        cfg = load_config(args.config)
        if args.seed is not None:
            cfg.seed = args.seed
        rng = random.Random(cfg.seed)
        
        assignments = build_month_schedule(
            session, args.year, args.month, cfg, engine=args.engine, persist=True, rng=rng
        )
        
        # Export to CSV if requested
        if args.out:
            export_assignments_csv(session, args.year, args.month, args.out)
        
        session.close()
        print(f"[OK] Generated {len(assignments)} assignments for {args.year}-{args.month:02d}")
        
    except Exception as e:
        session.rollback()
        session.close()
        print(f"[ERROR] Generation failed: {e}")
        raise


def _cmd_export(args: argparse.Namespace) -> None:
    """Export a stored month to CSV."""
    db_url = args.db or DEFAULT_DB_URL
    session = get_session(db_url)
    
    try:
        count = export_assignments_csv(session, args.year, args.month, args.out)
        session.close()
        print(f"[OK] Exported {count} assignments to {args.out}")
        
    except Exception as e:
        session.close()
        print(f"[ERROR] Export failed: {e}")
        raise


def _cmd_validate(args: argparse.Namespace) -> None:
    """Validate a stored month."""
    db_url = args.db or DEFAULT_DB_URL
    session = get_session(db_url)
    
    try:
        cfg = load_config(args.config)
        
        staff = StaffRepository.get_roster(session)
        start, end = month_bounds(args.year, args.month)
        assignments = AssignmentRepository.get_entities(session, start, end)
        tail_start, tail_end = tail_window(args.year, args.month, cfg.tail_days)
        previous_tail = AssignmentRepository.get_schedule_or_manual(session, tail_start, tail_end)
        requirements = build_month_requirements(args.year, args.month, cfg)
        rules = RuleSet.from_config(cfg)
        fixed = committee_slots(AssignmentRepository.get_entities(session, start, end, SOURCE_MANUAL))
        
        alerts = collect_alerts(assignments, staff, args.year, args.month, requirements, previous_tail, rules, fixed)
        for alert in alerts:
            print(f"[{alert.severity.upper()}] {alert.message}")
        tally = alerts_by_severity(alerts)
        print(f"[INFO] Alerts: {tally[ERROR]} error(s), {tally[WARNING]} warning(s)")
        validate_schedule(assignments, staff, args.year, args.month, requirements, previous_tail, rules, fixed)
        
        session.close()
        print(f"[OK] Validation passed for {args.year}-{args.month:02d}")
        
    except Exception as e:
        session.close()
        print(f"[ERROR] Validation failed: {e}")
        raise


def _cmd_summarize(args: argparse.Namespace) -> None:
    """Print coverage and workload summary for a stored month."""
    db_url = args.db or DEFAULT_DB_URL
    session = get_session(db_url)
    
    try:
        start, end = month_bounds(args.year, args.month)
        print(summarize_schedule(AssignmentRepository.get_entities(session, start, end)))
        session.close()
        
    except Exception as e:
        session.close()
        print(f"[ERROR] Summary failed: {e}")
        raise


def _add_month_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--year", type=int, required=True, help="Target year (e.g., 2025)")
    parser.add_argument("--month", type=int, required=True, help="Target month (1-12)")


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="care-scheduler",
        description="Monthly shift scheduler for care facilities"
    )
    
    # Global options
    parser.add_argument("--db", help=f"Database URL (default: {DEFAULT_DB_URL})")
    
    sub = parser.add_subparsers(dest="command", required=True)
    
    # init-db command
    init = sub.add_parser("init-db", help="Initialize database")
    init.add_argument("--reset", action="store_true", help="Drop and recreate all tables")
    init.set_defaults(func=_cmd_init_db)
    
    # import-csv command
    imp = sub.add_parser("import-csv", help="Import CSV data into database")
    imp.add_argument("--staff", help="Path to staff roster CSV")
    imp.add_argument("--manual", help="Path to manual entries CSV (requests, committee days)")
    imp.add_argument("--history", help="Path to a past month's assignments CSV")
    imp.set_defaults(func=_cmd_import_csv)
    
    # generate command
    gen = sub.add_parser("generate", help="Generate schedule for a month")
    _add_month_args(gen)
    gen.add_argument("--config", help="Path to config YAML (default: built-in settings)")
    gen.add_argument("--engine", choices=ENGINES, default="greedy", help="Generation engine")
    gen.add_argument("--seed", type=int, help="Random seed for reproducible output")
    gen.add_argument("--out", help="Optional: export assignments to CSV")
    gen.set_defaults(func=_cmd_generate)
    
    # validate command
    val = sub.add_parser("validate", help="Validate a stored month")
    _add_month_args(val)
    val.add_argument("--config", help="Path to config YAML (default: built-in settings)")
    val.set_defaults(func=_cmd_validate)
    
    # summarize command
    summ = sub.add_parser("summarize", help="Print coverage and workload for a stored month")
    _add_month_args(summ)
    summ.set_defaults(func=_cmd_summarize)
    
    # export command
    exp = sub.add_parser("export", help="Export a stored month to CSV")
    _add_month_args(exp)
    exp.add_argument("--out", required=True, help="Path to export assignments CSV")
    exp.set_defaults(func=_cmd_export)
    
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
