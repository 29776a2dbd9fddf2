"""Tests for CSV import/export functionality."""

import datetime as dt

import pandas as pd
import pytest

from care_scheduler.domain.entities import EmploymentType, ShiftAssignment
from care_scheduler.domain.models import SOURCE_GENERATED, SOURCE_MANUAL
from care_scheduler.domain.repositories import AssignmentRepository, StaffRepository
from care_scheduler.io.export_csv import export_assignments_csv, write_assignments_csv
from care_scheduler.io.import_csv import (
    import_assignments_csv,
    import_staff_csv,
    read_assignments_csv,
    read_staff_csv,
)

STAFF_CSV = """staff_id,name,employment_type,can_work_nights,can_lead,allowed_shift_codes,weekend_and_holiday_off
s01,Aiko Sato,full_time,true,true,,false
s02,Ken Ito,part_time,false,false,P1;P7,true
s03,Mai Kato,,yes,,,
"""


@pytest.fixture
def staff_csv(tmp_path):
    path = tmp_path / "staff.csv"
    path.write_text(STAFF_CSV, encoding="utf-8")
    return path


def test_read_staff_csv(staff_csv):
    staff = read_staff_csv(staff_csv)
    assert [s.id for s in staff] == ["s01", "s02", "s03"]

    aiko, ken, mai = staff
    assert aiko.can_work_nights and aiko.can_lead
    assert aiko.allowed_shift_codes == ()
    assert ken.employment_type == EmploymentType.PART_TIME
    assert ken.allowed_shift_codes == ("P1", "P7")
    assert ken.weekend_and_holiday_off
    # Blank cells fall back to defaults
    assert mai.employment_type == EmploymentType.FULL_TIME
    assert mai.can_work_nights
    assert not mai.weekend_and_holiday_off


def test_read_staff_csv_requires_columns(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("id,name\n1,A\n")
    with pytest.raises(ValueError, match="staff_id"):
        read_staff_csv(path)


def test_read_staff_csv_rejects_duplicate_ids(tmp_path):
    path = tmp_path / "dupes.csv"
    path.write_text("staff_id,name\ns01,A\ns01,B\n")
    with pytest.raises(ValueError, match="duplicate"):
        read_staff_csv(path)


def test_import_staff_csv(db_session, staff_csv):
    count = import_staff_csv(db_session, staff_csv)
    assert count == 3

    ken = StaffRepository.get_by_id(db_session, "s02")
    assert ken.name == "Ken Ito"
    assert ken.allowed_shift_codes == "P1;P7"
    assert StaffRepository.get_roster(db_session)[1].allowed_shift_codes == ("P1", "P7")

    # Re-importing updates rather than duplicates
    assert import_staff_csv(db_session, staff_csv) == 3
    assert len(StaffRepository.get_all(db_session)) == 3


def test_import_assignments_csv_skips_unknown_staff(db_session, staff_csv, tmp_path):
    import_staff_csv(db_session, staff_csv)
    path = tmp_path / "manual.csv"
    path.write_text(
        "date,staff_id,shift_code\n"
        "2025-02-10,s01,希\n"
        "2025-02-12,s02,委\n"
        "2025-02-12,zz,公\n",
        encoding="utf-8",
    )
    count = import_assignments_csv(db_session, path)
    assert count == 2

    stored = AssignmentRepository.get_entities(
        db_session, dt.date(2025, 2, 1), dt.date(2025, 2, 28), SOURCE_MANUAL
    )
    assert stored == [
        ShiftAssignment(dt.date(2025, 2, 10), "s01", "希"),
        ShiftAssignment(dt.date(2025, 2, 12), "s02", "委"),
    ]
    assert AssignmentRepository.get_range(db_session, dt.date(2025, 2, 1), dt.date(2025, 2, 28)) == []


def test_import_assignments_csv_replaces_only_listed_slots(db_session, staff_csv, tmp_path):
    import_staff_csv(db_session, staff_csv)
    AssignmentRepository.bulk_create(
        db_session,
        [
            ShiftAssignment(dt.date(2025, 2, 5), "s01", "公"),
            ShiftAssignment(dt.date(2025, 2, 10), "s01", "希"),
        ],
        SOURCE_MANUAL,
    )
    path = tmp_path / "manual.csv"
    path.write_text(
        "date,staff_id,shift_code\n"
        "2025-02-05,s01,委\n"
        "2025-02-20,s02,希\n",
        encoding="utf-8",
    )
    assert import_assignments_csv(db_session, path) == 2

    stored = AssignmentRepository.get_entities(
        db_session, dt.date(2025, 2, 1), dt.date(2025, 2, 28), SOURCE_MANUAL
    )
    assert stored == [
        ShiftAssignment(dt.date(2025, 2, 5), "s01", "委"),
        ShiftAssignment(dt.date(2025, 2, 10), "s01", "希"),
        ShiftAssignment(dt.date(2025, 2, 20), "s02", "希"),
    ]


def test_assignment_csv_round_trip(tmp_path):
    assignments = [
        ShiftAssignment(dt.date(2025, 2, 2), "s01", "A2"),
        ShiftAssignment(dt.date(2025, 2, 1), "s02", "N1"),
        ShiftAssignment(dt.date(2025, 2, 1), "s01", "公"),
    ]
    path = tmp_path / "out.csv"
    assert write_assignments_csv(assignments, path) == 3

    df = pd.read_csv(path)
    assert list(df.columns) == ["date", "staff_id", "shift_code"]
    assert list(df["date"]) == ["2025-02-01", "2025-02-01", "2025-02-02"]
    assert list(df["staff_id"]) == ["s01", "s02", "s01"]

    assert sorted(read_assignments_csv(path), key=lambda a: a.key) == sorted(assignments, key=lambda a: a.key)


def test_export_assignments_csv(db_session, staff_csv, tmp_path):
    import_staff_csv(db_session, staff_csv)
    AssignmentRepository.bulk_create(
        db_session,
        [
            ShiftAssignment(dt.date(2025, 2, 1), "s01", "N1"),
            ShiftAssignment(dt.date(2025, 3, 1), "s01", "A2"),
        ],
        SOURCE_GENERATED,
    )
    path = tmp_path / "feb.csv"
    assert export_assignments_csv(db_session, 2025, 2, path) == 1
    assert read_assignments_csv(path) == [ShiftAssignment(dt.date(2025, 2, 1), "s01", "N1")]
