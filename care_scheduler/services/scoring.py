"""Candidate scoring for the phased generator (lower score = higher priority)."""

from __future__ import annotations

import random
from datetime import date, timedelta

from care_scheduler.catalog import is_night_code, is_off_code, shift_load
from care_scheduler.domain.entities import NightPattern, StaffMember

from .constraints import Assignments, AssignmentIndex, as_index, consecutive_working_days, previous_shift_code

CONSECUTIVE_DAY_WEIGHT = 10
AFTER_REST_HEAVY_PENALTY = 5
LOAD_DECREASE_PENALTY = 3
REPEAT_PENALTY = 8
NIGHT_COUNT_WEIGHT = 5
FORBIDDEN_NIGHT_PENALTY = 2000
SECOND_NIGHT_BONUS = -5000
SECOND_REST_DAY_BONUS = -50
JITTER = 2.0


def count_night_shifts(staff_id: str, committed: Assignments) -> int:
    """Night shifts already committed for ``staff_id`` in the month being built."""
    if isinstance(committed, AssignmentIndex):
        return committed.count(staff_id, is_night_code)
    return sum(1 for a in committed if a.staff_id == staff_id and is_night_code(a.shift_code))


def score_candidate(
    staff: StaffMember,
    target_code: str,
    day: date,
    committed: Assignments,
    previous_tail: Assignments,
    night_pattern: NightPattern,
    rng: random.Random,
) -> float:
    """
    Score a candidate for ``target_code`` on ``day``.

    Deterministic rule-driven contributions plus a small jitter from ``rng``
    so that retries explore different orderings.
    """
    committed = as_index(committed)
    previous_tail = as_index(previous_tail)
    score = 0.0

    # Workload balance: long runs go to the back of the queue
    score += CONSECUTIVE_DAY_WEIGHT * consecutive_working_days(day, staff.id, committed, previous_tail)

    prev_code = previous_shift_code(day, staff.id, committed, previous_tail)
    prev_prev_code = previous_shift_code(day - timedelta(days=1), staff.id, committed, previous_tail)
    prev_load = shift_load(prev_code)
    target_load = shift_load(target_code)

    # Ease back in after a rest day
    if prev_load == 0 and target_load > 1:
        score += AFTER_REST_HEAVY_PENALTY
    # Avoid load whiplash (late -> early)
    if prev_load > target_load and prev_load > 0:
        score += LOAD_DECREASE_PENALTY

    target_is_night = is_night_code(target_code)
    if prev_code == target_code and not target_is_night:
        score += REPEAT_PENALTY

    if target_is_night:
        score += NIGHT_COUNT_WEIGHT * count_night_shifts(staff.id, committed)
        if is_night_code(prev_code):
            if night_pattern == NightPattern.SINGLE:
                score += FORBIDDEN_NIGHT_PENALTY
            elif is_night_code(prev_prev_code):
                score += FORBIDDEN_NIGHT_PENALTY
            else:
                score += SECOND_NIGHT_BONUS

    # Complete the two rest days after a night
    if is_night_code(prev_prev_code) and is_off_code(prev_code) and is_off_code(target_code):
        score += SECOND_REST_DAY_BONUS

    score += rng.random() * JITTER
    return score
