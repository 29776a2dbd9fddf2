import datetime as dt

from care_scheduler.config import SchedulerConfig
from care_scheduler.domain.entities import NightPattern, ShiftAssignment, StaffMember
from care_scheduler.services.constraints import (
    AssignmentIndex,
    RuleSet,
    consecutive_working_days,
    following_working_days,
    is_eligible,
    validate_shift,
)

from conftest import run_of

FEB1 = dt.date(2025, 2, 1)
DOUBLE = RuleSet(night_pattern=NightPattern.DOUBLE)


def test_consecutive_zero_after_day_off():
    committed = run_of("a", ["A2", "D1", "公"], FEB1)
    assert consecutive_working_days(dt.date(2025, 2, 4), "a", committed) == 0


def test_consecutive_within_month():
    committed = run_of("a", ["公", "A2", "D1", "B3"], FEB1)
    assert consecutive_working_days(dt.date(2025, 2, 5), "a", committed) == 3


def test_consecutive_spans_previous_month():
    tail = run_of("a", ["公", "A2", "D1", "B3"], dt.date(2025, 1, 28))
    committed = run_of("a", ["D1", "A2"], FEB1)
    assert consecutive_working_days(dt.date(2025, 2, 3), "a", committed, tail) == 5


def test_consecutive_stops_at_gap_and_other_staff():
    committed = run_of("a", ["A2", "D1"], FEB1) + run_of("b", ["A2", "A2", "A2"], FEB1)
    # Gap on Feb 3 for "a"
    assert consecutive_working_days(dt.date(2025, 2, 4), "a", committed) == 0
    assert consecutive_working_days(dt.date(2025, 2, 4), "b", committed) == 3


def test_following_working_days():
    committed = run_of("a", ["公", "公", "A2", "D1", "公"], FEB1)
    assert following_working_days(dt.date(2025, 2, 2), "a", committed) == 2
    assert following_working_days(dt.date(2025, 2, 4), "a", committed) == 0


def test_sixth_day_allowed_seventh_rejected():
    five = run_of("a", ["A2", "D1", "B3", "A2", "D1"], FEB1)
    assert validate_shift(ShiftAssignment(dt.date(2025, 2, 6), "a", "A2"), five) is None

    six = run_of("a", ["A2", "D1", "B3", "A2", "D1", "B3"], FEB1)
    error = validate_shift(ShiftAssignment(dt.date(2025, 2, 7), "a", "A2"), six)
    assert error is not None
    assert "6 days" in error


def test_cap_follows_rules():
    three = run_of("a", ["A2", "D1", "B3"], FEB1)
    error = validate_shift(ShiftAssignment(dt.date(2025, 2, 4), "a", "D1"), three, rules=RuleSet(3))
    assert "(3 days)" in error


def test_seventh_day_across_month_boundary():
    tail = run_of("a", ["D1", "D1", "D1", "D1"], dt.date(2025, 1, 28))
    committed = run_of("a", ["A2", "A2"], FEB1)
    assert validate_shift(ShiftAssignment(dt.date(2025, 2, 3), "a", "B3"), committed, tail) is not None


def test_day_off_always_valid_after_long_run():
    six = run_of("a", ["A2"] * 6, FEB1)
    assert validate_shift(ShiftAssignment(dt.date(2025, 2, 7), "a", "公"), six) is None
    assert validate_shift(ShiftAssignment(dt.date(2025, 2, 7), "a", "年"), six) is None


def test_invalid_code_rejected():
    error = validate_shift(ShiftAssignment(FEB1, "a", "XX"), [])
    assert error == "Invalid shift code: XX"


def test_work_after_night_rejected():
    committed = run_of("a", ["N1"], FEB1)
    error = validate_shift(ShiftAssignment(dt.date(2025, 2, 2), "a", "A2"), committed)
    assert error == "The day after a night shift must be a day off"


def test_off_after_night_allowed():
    committed = run_of("a", ["N1"], FEB1)
    assert validate_shift(ShiftAssignment(dt.date(2025, 2, 2), "a", "公"), committed) is None


def test_night_after_tail_night_rejected():
    tail = run_of("a", ["N1"], dt.date(2025, 1, 31))
    assert validate_shift(ShiftAssignment(FEB1, "a", "D1"), [], tail) is not None


def test_second_night_allowed_only_under_double_pattern():
    committed = run_of("a", ["公", "N1"], FEB1)
    second = ShiftAssignment(dt.date(2025, 2, 3), "a", "N1")
    assert validate_shift(second, committed) is not None
    assert validate_shift(second, committed, rules=DOUBLE) is None


def test_third_night_rejected_under_double_pattern():
    committed = run_of("a", ["N1", "N1"], FEB1)
    third = ShiftAssignment(dt.date(2025, 2, 3), "a", "N1")
    assert validate_shift(third, committed, rules=DOUBLE) is not None


def test_validate_accepts_prebuilt_index():
    index = AssignmentIndex(run_of("a", ["A2"] * 6, FEB1))
    assert validate_shift(ShiftAssignment(dt.date(2025, 2, 7), "a", "A2"), index) is not None


def test_eligibility_whitelist():
    part_timer = StaffMember(id="p", name="Part", allowed_shift_codes=("P1", "P7"))
    assert not is_eligible(part_timer, "A2", FEB1, [])
    assert is_eligible(part_timer, "P1", FEB1, [])


def test_eligibility_weekend_and_holiday_off():
    weekday_only = StaffMember(id="w", name="Weekday", weekend_and_holiday_off=True)
    saturday = dt.date(2025, 2, 1)
    monday = dt.date(2025, 2, 3)
    holiday = dt.date(2025, 2, 11)
    assert not is_eligible(weekday_only, "A2", saturday, [])
    assert is_eligible(weekday_only, "A2", monday, [])
    assert not is_eligible(weekday_only, "A2", holiday, [], holidays=[holiday])
    assert is_eligible(weekday_only, "A2", holiday, [])


def test_eligibility_night_capability():
    day_only = StaffMember(id="d", name="Day")
    night_ok = StaffMember(id="n", name="Night", can_work_nights=True)
    assert not is_eligible(day_only, "N1", FEB1, [])
    assert is_eligible(night_ok, "N1", FEB1, [])


def test_eligibility_no_early_after_b5():
    staff = StaffMember(id="a", name="A")
    committed = run_of("a", ["B5"], FEB1)
    tomorrow = dt.date(2025, 2, 2)
    assert not is_eligible(staff, "A2", tomorrow, committed)
    assert not is_eligible(staff, "A3", tomorrow, committed)
    assert is_eligible(staff, "D1", tomorrow, committed)
    assert is_eligible(staff, "B3", tomorrow, committed)


def test_eligibility_locale_public_holiday():
    weekday_only = StaffMember(id="w", name="Weekday", weekend_and_holiday_off=True)
    childrens_day = dt.date(2025, 5, 5)  # Monday
    holidays = SchedulerConfig().holiday_dates(2025)
    assert not is_eligible(weekday_only, "A2", childrens_day, [], holidays=holidays)
    assert is_eligible(weekday_only, "A2", dt.date(2025, 5, 7), [], holidays=holidays)
