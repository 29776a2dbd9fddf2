"""Monthly generation engines and orchestration."""

from .base import (
    BaseGenerator,
    GenerationExhaustedError,
    GenerationRequest,
    PhaseExhaustedError,
    ScheduleGenerationError,
)
from .context import GenerationContext
from .seeding import seed_fixed_assignments
from .phased import PhasedGenerator, generate_monthly_shift
from .orchestrator import MonthOrchestrator, build_month_schedule, get_generator

__all__ = [
    "BaseGenerator",
    "GenerationRequest",
    "ScheduleGenerationError",
    "PhaseExhaustedError",
    "GenerationExhaustedError",
    "GenerationContext",
    "seed_fixed_assignments",
    "PhasedGenerator",
    "generate_monthly_shift",
    "MonthOrchestrator",
    "build_month_schedule",
    "get_generator",
]
