"""CSV export utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pandas as pd
from sqlalchemy.orm import Session

from care_scheduler.domain.entities import ShiftAssignment
from care_scheduler.domain.repositories import AssignmentRepository
from care_scheduler.services.calendar import month_bounds

from .import_csv import ASSIGNMENT_COLUMNS


def assignments_to_dataframe(assignments: Sequence[ShiftAssignment]) -> pd.DataFrame:
    """Flat DataFrame with one row per assignment, sorted by date then staff."""
    df = pd.DataFrame(
        [(a.date, a.staff_id, a.shift_code) for a in assignments],
        columns=ASSIGNMENT_COLUMNS,
    )
    return df.sort_values(["date", "staff_id"], kind="stable").reset_index(drop=True)


def write_assignments_csv(assignments: Sequence[ShiftAssignment], csv_path: str | Path) -> int:
    """Write assignments to CSV; returns the number of rows written."""
    df = assignments_to_dataframe(assignments)
    df["date"] = pd.to_datetime(df["date"]).dt.strftime("%Y-%m-%d")
    df.to_csv(csv_path, index=False)
    return len(df)


def export_assignments_csv(session: Session, year: int, month: int, csv_path: str | Path) -> int:
    """
    Export a stored month's generated assignments to CSV.
    
    Returns:
        Number of rows exported
    """
    start, end = month_bounds(year, month)
    assignments = AssignmentRepository.get_entities(session, start, end)
    if not assignments:
        print(f"[WARN] No generated schedule stored for {year}-{month:02d}")
    count = write_assignments_csv(assignments, csv_path)
    print(f"[INFO] Exported {count} assignments to {csv_path}")
    return count
