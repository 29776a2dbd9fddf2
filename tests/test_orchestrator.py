"""Tests for month orchestration against the database."""

import datetime as dt
import random

import pytest

from care_scheduler.domain.entities import ShiftAssignment
from care_scheduler.domain.models import SOURCE_MANUAL
from care_scheduler.domain.repositories import AssignmentRepository, StaffRepository
from care_scheduler.engine.orchestrator import MonthOrchestrator, build_month_schedule
from care_scheduler.services.calendar import tail_window
from care_scheduler.validator import validate_schedule

FEB_START, FEB_END = dt.date(2025, 2, 1), dt.date(2025, 2, 28)


@pytest.fixture
def seeded_db(db_session, roster):
    StaffRepository.bulk_upsert(db_session, roster)
    return db_session


def test_build_month_schedule_persists(seeded_db, cfg):
    assignments = build_month_schedule(seeded_db, 2025, 2, cfg, rng=random.Random(1))
    assert len(assignments) == 280

    stored = AssignmentRepository.get_entities(seeded_db, FEB_START, FEB_END)
    assert sorted(stored, key=lambda a: a.key) == sorted(assignments, key=lambda a: a.key)


def test_regenerating_replaces_month(seeded_db, cfg):
    build_month_schedule(seeded_db, 2025, 2, cfg, rng=random.Random(1))
    build_month_schedule(seeded_db, 2025, 2, cfg, rng=random.Random(2))
    assert len(AssignmentRepository.get_range(seeded_db, FEB_START, FEB_END)) == 280


def test_persist_false_leaves_database_untouched(seeded_db, cfg):
    build_month_schedule(seeded_db, 2025, 2, cfg, persist=False, rng=random.Random(1))
    assert AssignmentRepository.get_range(seeded_db, FEB_START, FEB_END) == []


def test_manual_entries_loaded(seeded_db, cfg):
    AssignmentRepository.bulk_create(
        seeded_db,
        [
            ShiftAssignment(dt.date(2025, 2, 6), "s05", "委"),
            ShiftAssignment(dt.date(2025, 2, 7), "s02", "希"),
        ],
        SOURCE_MANUAL,
    )
    assignments = build_month_schedule(seeded_db, 2025, 2, cfg, rng=random.Random(3))
    slots = {a.key: a.shift_code for a in assignments}
    assert slots[(dt.date(2025, 2, 6), "s05")] in {"D3", "A2"}
    assert slots[(dt.date(2025, 2, 7), "s02")] == "公"

    # Manual entries are kept alongside the generated month
    assert len(AssignmentRepository.get_range(seeded_db, FEB_START, FEB_END, SOURCE_MANUAL)) == 2


def test_next_month_uses_previous_tail(seeded_db, roster, cfg):
    build_month_schedule(seeded_db, 2025, 2, cfg, rng=random.Random(4))
    march = build_month_schedule(seeded_db, 2025, 3, cfg, rng=random.Random(5))

    tail_start, tail_end = tail_window(2025, 3, cfg.tail_days)
    tail = AssignmentRepository.get_entities(seeded_db, tail_start, tail_end)
    assert len(tail) == cfg.tail_days * len(roster)
    validate_schedule(march, roster, 2025, 3, previous_tail=tail)


def test_load_request(seeded_db, cfg):
    request = MonthOrchestrator().load_request(seeded_db, 2025, 2, cfg)
    assert [s.id for s in request.staff] == [f"s{i:02d}" for i in range(1, 11)]
    assert len(request.requirements) == 28
    assert request.previous_tail == []


def test_empty_roster_rejected(db_session, cfg):
    with pytest.raises(RuntimeError, match="No staff"):
        build_month_schedule(db_session, 2025, 2, cfg)


def test_unknown_engine_rejected(seeded_db, cfg):
    with pytest.raises(ValueError, match="Unknown engine"):
        build_month_schedule(seeded_db, 2025, 2, cfg, engine="magic")


def test_committee_day_after_tail_night_is_kept(seeded_db, cfg):
    AssignmentRepository.bulk_create(seeded_db, [ShiftAssignment(dt.date(2025, 1, 31), "s05", "N1")])
    AssignmentRepository.bulk_create(
        seeded_db, [ShiftAssignment(dt.date(2025, 2, 1), "s05", "委")], SOURCE_MANUAL
    )

    assignments = build_month_schedule(seeded_db, 2025, 2, cfg, rng=random.Random(6))
    slots = {a.key: a.shift_code for a in assignments}
    assert slots[(dt.date(2025, 2, 1), "s05")] in {"D3", "A2"}
    assert len(AssignmentRepository.get_range(seeded_db, FEB_START, FEB_END)) == 280
