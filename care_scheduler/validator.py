"""Whole-month schedule checks, display alerts and summaries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Collection, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .catalog import ShiftCategory, category_of, is_early_code, is_night_code, lookup, restricts_next_early
from .domain.entities import NightPattern, ShiftAssignment, StaffMember
from .services.calendar import month_days
from .services.constraints import DEFAULT_RULES, AssignmentIndex, RuleSet, consecutive_working_days
from .services.requirements import DailyRequirements

ERROR = "error"
WARNING = "warning"


@dataclass(frozen=True)
class Alert:
    severity: str  # error or warning
    message: str
    date: Optional[date] = None
    staff_id: Optional[str] = None


def _to_frame(assignments: Sequence[ShiftAssignment]) -> pd.DataFrame:
    df = pd.DataFrame(
        [(a.date, a.staff_id, a.shift_code) for a in assignments],
        columns=["date", "staff_id", "shift_code"],
    )
    df["category"] = [category_of(c).value if lookup(c) else "unknown" for c in df["shift_code"]]
    return df


def collect_alerts(
    assignments: Sequence[ShiftAssignment],
    staff: Sequence[StaffMember],
    year: int,
    month: int,
    requirements: DailyRequirements | None = None,
    previous_tail: Sequence[ShiftAssignment] = (),
    rules: RuleSet = DEFAULT_RULES,
    fixed_slots: Collection[Tuple[date, str]] = (),
) -> List[Alert]:
    """
    Check a month against the output invariants.

    Shortfalls and hard rule breaks are errors; an early shift straight after
    a restricted-recovery late shift is a warning. Rule breaks on
    ``fixed_slots`` ((date, staff_id) pairs force-assigned before generation,
    such as committee days) are reported as warnings too.
    """
    fixed = set(fixed_slots)
    alerts: List[Alert] = []
    days = month_days(year, month)
    df = _to_frame(assignments)

    # One assignment per staff per day
    dupes = df[df.duplicated(["date", "staff_id"], keep=False)]
    for (day, sid), _ in dupes.groupby(["date", "staff_id"]):
        alerts.append(Alert(ERROR, f"{sid} has more than one assignment on {day.isoformat()}", day, sid))
    index = AssignmentIndex(assignments)
    tail = AssignmentIndex(previous_tail)
    for s in staff:
        for day in days:
            if (day, s.id) not in index:
                alerts.append(Alert(ERROR, f"{s.id} has no assignment on {day.isoformat()}", day, s.id))

    for a in sorted(assignments, key=lambda a: (a.staff_id, a.date)):
        entry = lookup(a.shift_code)
        if entry is None:
            alerts.append(Alert(ERROR, f"Invalid shift code: {a.shift_code}", a.date, a.staff_id))
            continue
        if entry.is_off:
            continue

        rule_severity = WARNING if a.key in fixed else ERROR
        run = consecutive_working_days(a.date, a.staff_id, index, tail)
        if run >= rules.max_consecutive_work_days:
            alerts.append(
                Alert(
                    rule_severity,
                    f"{a.staff_id} works more than {rules.max_consecutive_work_days} days in a row "
                    f"(through {a.date.isoformat()})",
                    a.date,
                    a.staff_id,
                )
            )

        yesterday = a.date - timedelta(days=1)
        prev_code = index.get(yesterday, a.staff_id) or tail.get(yesterday, a.staff_id)
        if is_night_code(prev_code):
            before = yesterday - timedelta(days=1)
            before_code = index.get(before, a.staff_id) or tail.get(before, a.staff_id)
            second_of_pair = (
                rules.night_pattern == NightPattern.DOUBLE
                and entry.is_night_shift
                and not is_night_code(before_code)
            )
            if not second_of_pair:
                alerts.append(
                    Alert(rule_severity, f"{a.staff_id} works {a.shift_code} on {a.date.isoformat()} right after a night shift",
                          a.date, a.staff_id)
                )

        if restricts_next_early(prev_code) and is_early_code(a.shift_code):
            alerts.append(
                Alert(WARNING, f"{a.staff_id}: {prev_code} followed by {a.shift_code} on {a.date.isoformat()}",
                      a.date, a.staff_id)
            )

    # Daily headcount per category
    if requirements:
        counts = df.groupby(["date", "category"]).size().unstack(fill_value=0)
        for day in days:
            for category, needed in requirements.get(day, {}).items():
                got = int(counts.get(ShiftCategory(category).value, pd.Series(dtype=int)).get(day, 0))
                if got < int(needed):
                    alerts.append(
                        Alert(ERROR, f"{day.isoformat()}: {ShiftCategory(category).value} short by {int(needed) - got}",
                              day)
                    )

    return alerts


def validate_schedule(
    assignments: Sequence[ShiftAssignment],
    staff: Sequence[StaffMember],
    year: int,
    month: int,
    requirements: DailyRequirements | None = None,
    previous_tail: Sequence[ShiftAssignment] = (),
    rules: RuleSet = DEFAULT_RULES,
    fixed_slots: Collection[Tuple[date, str]] = (),
) -> None:
    """
    Raise ValueError when the month breaks any invariant.

    Warnings count as failures here, except on ``fixed_slots``; use
    collect_alerts to display them instead.
    """
    fixed = set(fixed_slots)
    alerts = [
        a
        for a in collect_alerts(assignments, staff, year, month, requirements, previous_tail, rules, fixed)
        if a.severity == ERROR or (a.date, a.staff_id) not in fixed
    ]
    if alerts:
        shown = "; ".join(a.message for a in alerts[:5])
        more = f" (+{len(alerts) - 5} more)" if len(alerts) > 5 else ""
        raise ValueError(f"Schedule validation failed: {shown}{more}")


def summarize_schedule(assignments: Sequence[ShiftAssignment]) -> str:
    if not assignments:
        return "No assignments."
    df = _to_frame(assignments)
    df["working"] = ~df["category"].isin([ShiftCategory.OFF.value, "unknown"])
    df["night"] = [is_night_code(c) for c in df["shift_code"]]

    coverage = pd.crosstab(df["date"], df["category"])
    per_staff = df.groupby("staff_id").agg(
        working_days=("working", "sum"),
        nights=("night", "sum"),
        days_off=("working", lambda s: int((~s).sum())),
    )
    codes = pd.crosstab(df["staff_id"], df["shift_code"])

    lines = ["Coverage per day per category:"]
    lines.append(coverage.to_string())
    lines.append("")
    lines.append("Shift codes per staff:")
    lines.append(codes.to_string())
    lines.append("")
    lines.append("Workload per staff (month):")
    lines.append(per_staff.to_string())
    return "\n".join(lines)


def alerts_by_severity(alerts: Sequence[Alert]) -> Dict[str, int]:
    out = {ERROR: 0, WARNING: 0}
    for a in alerts:
        out[a.severity] = out.get(a.severity, 0) + 1
    return out
