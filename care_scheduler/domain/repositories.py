"""Repository classes for data access."""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from .entities import ShiftAssignment, StaffMember
from .models import SOURCE_GENERATED, SOURCE_MANUAL, Assignment, Staff


class StaffRepository:
    """Repository for roster data access."""
    
    @staticmethod
    def get_all(session: Session) -> List[Staff]:
        """Get all staff ordered by staff id."""
        return session.query(Staff).order_by(Staff.staff_id).all()
    
    @staticmethod
    def get_by_id(session: Session, staff_id: str) -> Optional[Staff]:
        """Get a staff member by ID."""
        return session.query(Staff).filter(Staff.staff_id == staff_id).first()
    
    @staticmethod
    def get_roster(session: Session) -> List[StaffMember]:
        """Get all staff as plain entities for the engines."""
        return [s.to_entity() for s in StaffRepository.get_all(session)]
    
    @staticmethod
    def bulk_upsert(session: Session, members: Iterable[StaffMember]) -> int:
        """Create or replace multiple staff members."""
        count = 0
        for member in members:
            session.merge(Staff.from_entity(member))
            count += 1
        session.commit()
        return count


class AssignmentRepository:
    """Repository for shift assignment data access."""
    
    @staticmethod
    def get_range(
        session: Session,
        start: date,
        end: date,
        source: str = SOURCE_GENERATED,
    ) -> List[Assignment]:
        """Get assignments with start <= date <= end for one source."""
        return (
            session.query(Assignment)
            .filter(Assignment.date >= start, Assignment.date <= end, Assignment.source == source)
            .order_by(Assignment.date, Assignment.staff_id)
            .all()
        )
    
    @staticmethod
    def get_entities(
        session: Session,
        start: date,
        end: date,
        source: str = SOURCE_GENERATED,
    ) -> List[ShiftAssignment]:
        """Same as get_range, as plain entities."""
        return [a.to_entity() for a in AssignmentRepository.get_range(session, start, end, source)]
    
    @staticmethod
    def get_schedule_or_manual(session: Session, start: date, end: date) -> List[ShiftAssignment]:
        """Generated assignments for the range, falling back to manual entries when none exist."""
        generated = AssignmentRepository.get_entities(session, start, end, SOURCE_GENERATED)
        if generated:
            return generated
        return AssignmentRepository.get_entities(session, start, end, SOURCE_MANUAL)
    
    @staticmethod
    def bulk_create(
        session: Session,
        assignments: Iterable[ShiftAssignment],
        source: str = SOURCE_GENERATED,
    ) -> int:
        """Create multiple assignments."""
        records = [Assignment.from_entity(a, source) for a in assignments]
        session.add_all(records)
        session.commit()
        return len(records)
    
    @staticmethod
    def replace_slots(
        session: Session,
        assignments: Iterable[ShiftAssignment],
        source: str = SOURCE_GENERATED,
    ) -> int:
        """Replace one source's assignments on exactly the given (date, staff_id) slots."""
        records = [Assignment.from_entity(a, source) for a in assignments]
        for r in records:
            session.query(Assignment).filter(
                Assignment.date == r.date, Assignment.staff_id == r.staff_id, Assignment.source == source
            ).delete(synchronize_session=False)
        session.add_all(records)
        session.commit()
        return len(records)
    
    @staticmethod
    def replace_range(
        session: Session,
        start: date,
        end: date,
        assignments: Iterable[ShiftAssignment],
        source: str = SOURCE_GENERATED,
    ) -> int:
        """Replace one source's assignments in the range in a single transaction."""
        session.query(Assignment).filter(
            Assignment.date >= start, Assignment.date <= end, Assignment.source == source
        ).delete(synchronize_session=False)
        records = [Assignment.from_entity(a, source) for a in assignments]
        session.add_all(records)
        session.commit()
        return len(records)
