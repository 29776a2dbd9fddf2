"""Base generator interface shared by the greedy and CP-SAT engines."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import date
from typing import List, Optional, Sequence, Tuple

from care_scheduler.config import SchedulerConfig
from care_scheduler.domain.entities import NightPattern, ShiftAssignment, StaffMember
from care_scheduler.services.requirements import DailyRequirements, build_month_requirements


class ScheduleGenerationError(RuntimeError):
    """Base class for generation failures."""


class PhaseExhaustedError(ScheduleGenerationError):
    """No remaining candidate validates for a required slot; aborts one attempt."""

    def __init__(self, shift_code: str, day: date):
        super().__init__(f"Cannot assign {shift_code} on {day.isoformat()}: no valid candidate left")
        self.shift_code = shift_code
        self.day = day


class GenerationExhaustedError(ScheduleGenerationError):
    """Every attempt failed; terminal and user-visible."""

    def __init__(self, attempts: int, last_error: Optional[Exception] = None):
        message = f"Failed to generate a valid schedule after {attempts} attempts"
        if last_error is not None:
            message += f" (last failure: {last_error})"
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


@dataclass
class GenerationRequest:
    """Inputs of one generation run; ``None`` fields fall back to the config."""

    year: int
    month: int
    staff: Sequence[StaffMember]
    requirements: Optional[DailyRequirements] = None
    previous_tail: Sequence[ShiftAssignment] = field(default_factory=list)
    manual_assignments: Sequence[ShiftAssignment] = field(default_factory=list)
    committee_assignments: Sequence[Tuple[date, str]] = field(default_factory=list)
    night_pattern: Optional[NightPattern] = None
    max_attempts: Optional[int] = None

    def resolved(self, cfg: SchedulerConfig) -> "GenerationRequest":
        if not 1 <= self.month <= 12:
            raise ValueError(f"Invalid month: {self.month}")
        ids = [s.id for s in self.staff]
        if len(ids) != len(set(ids)):
            raise ValueError("Staff ids must be unique")
        max_attempts = self.max_attempts if self.max_attempts is not None else cfg.max_attempts
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        return replace(
            self,
            requirements=self.requirements
            if self.requirements is not None
            else build_month_requirements(self.year, self.month, cfg),
            night_pattern=self.night_pattern or cfg.night_pattern,
            max_attempts=max_attempts,
        )


class BaseGenerator(ABC):
    """
    Abstract base class for monthly shift generators.

    Each generator turns a GenerationRequest into a flat list of assignments
    covering every (staff, day) pair of the month, or raises.
    """

    name: str | None = None  # Override in subclasses

    def __init__(self, cfg: SchedulerConfig | None = None):
        self.cfg = cfg or SchedulerConfig()

    @abstractmethod
    def generate(self, request: GenerationRequest) -> List[ShiftAssignment]:
        """
        Generate the month's assignments.

        Raises:
            GenerationExhaustedError: If no valid schedule could be built
        """

    def get_name(self) -> str:
        return self.name or "UNKNOWN"

    def _log(self, message: str) -> None:
        if self.cfg.debug:
            print(f"[DEBUG] {self.get_name()}: {message}")
