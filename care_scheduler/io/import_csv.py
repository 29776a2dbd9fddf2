"""CSV import utilities for the staff roster and shift assignments."""

from __future__ import annotations

from pathlib import Path
from typing import List

import pandas as pd
from sqlalchemy.orm import Session

from care_scheduler.domain.entities import EmploymentType, ShiftAssignment, StaffMember
from care_scheduler.domain.models import SOURCE_MANUAL
from care_scheduler.domain.repositories import AssignmentRepository, StaffRepository

STAFF_COLUMNS = ["staff_id", "name"]
ASSIGNMENT_COLUMNS = ["date", "staff_id", "shift_code"]

_TRUE_VALUES = {"1", "true", "yes", "y", "t"}


def _as_bool(value) -> bool:
    if pd.isna(value):
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def _read(csv_path: str | Path, required: List[str]) -> pd.DataFrame:
    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False, na_values=[""])
    
    # Normalize column names
    df.columns = df.columns.str.lower().str.strip()
    
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"{csv_path}: missing required column(s): {', '.join(missing)}")
    return df


def read_staff_csv(csv_path: str | Path) -> List[StaffMember]:
    """
    Read the staff roster from CSV.
    
    Columns: staff_id, name, employment_type, can_work_nights, can_lead,
    allowed_shift_codes (semicolon-separated), weekend_and_holiday_off.
    Only staff_id and name are required.
    """
    df = _read(csv_path, STAFF_COLUMNS)
    
    staff = []
    for _, row in df.iterrows():
        codes_raw = row.get("allowed_shift_codes")
        codes = tuple(c.strip() for c in str(codes_raw).split(";") if c.strip()) if pd.notna(codes_raw) else ()
        employment = row.get("employment_type")
        staff.append(
            StaffMember(
                id=str(row["staff_id"]).strip(),
                name=str(row["name"]).strip(),
                employment_type=EmploymentType(str(employment).strip().lower())
                if pd.notna(employment)
                else EmploymentType.FULL_TIME,
                can_work_nights=_as_bool(row.get("can_work_nights")),
                can_lead=_as_bool(row.get("can_lead")),
                allowed_shift_codes=codes,
                weekend_and_holiday_off=_as_bool(row.get("weekend_and_holiday_off")),
            )
        )
    
    ids = [s.id for s in staff]
    if len(ids) != len(set(ids)):
        raise ValueError(f"{csv_path}: duplicate staff_id values")
    return staff


def read_assignments_csv(csv_path: str | Path) -> List[ShiftAssignment]:
    """Read flat assignments (date, staff_id, shift_code) from CSV."""
    df = _read(csv_path, ASSIGNMENT_COLUMNS)
    df = df.dropna(subset=ASSIGNMENT_COLUMNS)
    
    # Convert date
    df["date"] = pd.to_datetime(df["date"]).dt.date
    
    return [
        ShiftAssignment(row["date"], str(row["staff_id"]).strip(), str(row["shift_code"]).strip())
        for _, row in df.iterrows()
    ]


def import_staff_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import the staff roster from CSV into the database.
    
    Args:
        session: Database session
        csv_path: Path to staff CSV
    
    Returns:
        Number of staff imported (existing ids are updated)
    """
    count = StaffRepository.bulk_upsert(session, read_staff_csv(csv_path))
    print(f"[INFO] Imported {count} staff from {csv_path}")
    return count


def import_assignments_csv(session: Session, csv_path: str | Path, source: str = SOURCE_MANUAL) -> int:
    """
    Import assignments from CSV into the database.
    
    Rows whose staff_id is not on the roster are skipped with a warning. A stored
    assignment of the same source is replaced only on a (date, staff_id) slot
    the file lists; other slots in the same dates are kept.
    
    Args:
        session: Database session
        csv_path: Path to assignments CSV
        source: "manual" (requests, committee days) or "generated" (a past month)
    
    Returns:
        Number of assignments imported
    """
    known = {s.staff_id for s in StaffRepository.get_all(session)}
    assignments = []
    for a in read_assignments_csv(csv_path):
        if a.staff_id not in known:
            print(f"[WARN] Skipping assignment for unknown staff {a.staff_id} on {a.date.isoformat()}")
            continue
        assignments.append(a)
    
    if not assignments:
        print(f"[WARN] No assignments imported from {csv_path}")
        return 0
    
    # Last row wins for a repeated (date, staff) slot
    unique = list({a.key: a for a in assignments}.values())
    count = AssignmentRepository.replace_slots(session, unique, source)
    print(f"[INFO] Imported {count} {source} assignments from {csv_path}")
    return count
