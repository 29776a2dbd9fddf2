"""Services for scheduling logic."""

from .constraints import RuleSet, consecutive_working_days, is_eligible, validate_shift
from .scoring import score_candidate
from .requirements import build_month_requirements, build_requirements_for_day

__all__ = [
    "RuleSet",
    "consecutive_working_days",
    "is_eligible",
    "validate_shift",
    "score_candidate",
    "build_month_requirements",
    "build_requirements_for_day",
]
