"""Domain records, database models and data access layer."""

from .entities import EmploymentType, NightPattern, ShiftAssignment, StaffMember
from .models import SOURCE_GENERATED, SOURCE_MANUAL, Assignment, Base, Staff
from .repositories import AssignmentRepository, StaffRepository

__all__ = [
    "EmploymentType",
    "NightPattern",
    "ShiftAssignment",
    "StaffMember",
    "Assignment",
    "Base",
    "Staff",
    "SOURCE_GENERATED",
    "SOURCE_MANUAL",
    "AssignmentRepository",
    "StaffRepository",
]
