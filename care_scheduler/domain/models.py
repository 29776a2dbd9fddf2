"""SQLAlchemy models for the care-facility roster and monthly schedules."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, relationship

from .entities import EmploymentType, ShiftAssignment, StaffMember

SOURCE_MANUAL = "manual"
SOURCE_GENERATED = "generated"


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Staff(Base):
    """Staff member with capability flags and contract constraints."""
    
    __tablename__ = "staff"
    
    staff_id = Column(String(50), primary_key=True)
    name = Column(String(200), nullable=False)
    employment_type = Column(String(20), nullable=False, default=EmploymentType.FULL_TIME.value)
    can_work_nights = Column(Boolean, nullable=False, default=False)
    can_lead = Column(Boolean, nullable=False, default=False)
    allowed_shift_codes = Column(String(200), nullable=True)  # Semicolon-separated; empty = unrestricted
    weekend_and_holiday_off = Column(Boolean, nullable=False, default=False)
    
    # Relationships
    assignments = relationship("Assignment", back_populates="staff")
    
    def to_entity(self) -> StaffMember:
        codes = tuple(c for c in (self.allowed_shift_codes or "").split(";") if c)
        return StaffMember(
            id=self.staff_id,
            name=self.name,
            employment_type=EmploymentType(self.employment_type),
            can_work_nights=bool(self.can_work_nights),
            can_lead=bool(self.can_lead),
            allowed_shift_codes=codes,
            weekend_and_holiday_off=bool(self.weekend_and_holiday_off),
        )
    
    @classmethod
    def from_entity(cls, member: StaffMember) -> "Staff":
        return cls(
            staff_id=member.id,
            name=member.name,
            employment_type=EmploymentType(member.employment_type).value,
            can_work_nights=member.can_work_nights,
            can_lead=member.can_lead,
            allowed_shift_codes=";".join(member.allowed_shift_codes) or None,
            weekend_and_holiday_off=member.weekend_and_holiday_off,
        )
    
    def __repr__(self) -> str:
        return f"<Staff(id={self.staff_id}, name='{self.name}', nights={self.can_work_nights})>"


class Assignment(Base):
    """One shift code for one staff member on one day."""
    
    __tablename__ = "shift_assignments"
    __table_args__ = (UniqueConstraint("date", "staff_id", "source", name="uq_assignment_slot"),)
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False)
    staff_id = Column(String(50), ForeignKey("staff.staff_id"), nullable=False)
    shift_code = Column(String(8), nullable=False)
    source = Column(String(20), nullable=False, default=SOURCE_GENERATED)  # manual or generated
    
    # Relationships
    staff = relationship("Staff", back_populates="assignments")
    
    def to_entity(self) -> ShiftAssignment:
        return ShiftAssignment(self.date, self.staff_id, self.shift_code)
    
    @classmethod
    def from_entity(cls, assignment: ShiftAssignment, source: str = SOURCE_GENERATED) -> "Assignment":
        return cls(
            date=assignment.date,
            staff_id=assignment.staff_id,
            shift_code=assignment.shift_code,
            source=source,
        )
    
    def __repr__(self) -> str:
        return f"<Assignment(date={self.date}, staff={self.staff_id}, code={self.shift_code}, source={self.source})>"
