"""Tests for the CP-SAT generator."""

import datetime as dt
from collections import Counter

import pytest

from care_scheduler.ai.cp_sat_scheduler import CPSatGenerator
from care_scheduler.catalog import ShiftCategory, category_of, is_night_code
from care_scheduler.config import CPSatSettings, SchedulerConfig
from care_scheduler.domain.entities import NightPattern, StaffMember
from care_scheduler.engine.base import GenerationExhaustedError, GenerationRequest
from care_scheduler.services.constraints import RuleSet
from care_scheduler.services.requirements import build_month_requirements
from care_scheduler.validator import validate_schedule

from conftest import run_of

pytestmark = pytest.mark.slow


def make_cfg(**kwargs):
    return SchedulerConfig(cp_sat=CPSatSettings(max_time_in_seconds=10.0), **kwargs)


def test_cp_sat_meets_requirements_and_rules(roster):
    cfg = make_cfg()
    assignments = CPSatGenerator(cfg).generate(GenerationRequest(2025, 2, roster))

    assert len(assignments) == 280
    counts = Counter((a.date, category_of(a.shift_code)) for a in assignments)
    for day in range(1, 29):
        date = dt.date(2025, 2, day)
        assert counts[(date, ShiftCategory.NIGHT)] == 1
        assert counts[(date, ShiftCategory.EARLY)] == 2
        assert counts[(date, ShiftCategory.LATE_SECONDARY)] == 1
        assert counts[(date, ShiftCategory.LATE_PRIMARY)] == 1

    validate_schedule(assignments, roster, 2025, 2, build_month_requirements(2025, 2, cfg))


def test_cp_sat_spreads_nights(roster):
    assignments = CPSatGenerator(make_cfg()).generate(GenerationRequest(2025, 2, roster))
    nights = Counter(a.staff_id for a in assignments if is_night_code(a.shift_code))
    assert set(nights) <= {"s01", "s02", "s03", "s04"}
    assert max(nights.values()) - min(nights.values()) <= 2


def test_cp_sat_honours_tail_and_committee(roster):
    tail = run_of("s05", ["D1"] * 6, dt.date(2025, 1, 26))
    request = GenerationRequest(
        2025, 2, roster, previous_tail=tail, committee_assignments=[(dt.date(2025, 2, 6), "s06")]
    )
    assignments = CPSatGenerator(make_cfg()).generate(request)
    slots = {a.key: a.shift_code for a in assignments}
    assert slots[(dt.date(2025, 2, 1), "s05")] == "公"
    assert slots[(dt.date(2025, 2, 6), "s06")] in {"D3", "A2"}
    validate_schedule(assignments, roster, 2025, 2, previous_tail=tail)


def test_cp_sat_double_pattern(roster):
    cfg = make_cfg(night_pattern=NightPattern.DOUBLE)
    assignments = CPSatGenerator(cfg).generate(GenerationRequest(2025, 2, roster))
    validate_schedule(
        assignments, roster, 2025, 2, build_month_requirements(2025, 2, cfg), rules=RuleSet.from_config(cfg)
    )


def test_cp_sat_infeasible_raises():
    staff = [StaffMember(id="n", name="Only night", can_work_nights=True)] + [
        StaffMember(id=f"d{i}", name=f"Day {i}") for i in range(8)
    ]
    with pytest.raises(GenerationExhaustedError):
        CPSatGenerator(make_cfg()).generate(GenerationRequest(2025, 2, staff))
