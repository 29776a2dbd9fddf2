"""Pytest configuration and shared fixtures."""

import datetime as dt

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from care_scheduler.config import SchedulerConfig
from care_scheduler.domain.entities import ShiftAssignment, StaffMember
from care_scheduler.domain.models import Base


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


class FixedRandom:
    """Stand-in for random.Random that always returns the same value."""

    def __init__(self, value=0.0):
        self.value = value

    def random(self):
        return self.value


@pytest.fixture
def no_jitter():
    return FixedRandom(0.0)


@pytest.fixture
def roster():
    """Ten staff, the first four night-capable."""
    return [
        StaffMember(id=f"s{i:02d}", name=f"Staff {i}", can_work_nights=i <= 4)
        for i in range(1, 11)
    ]


@pytest.fixture
def cfg():
    return SchedulerConfig(seed=42)


@pytest.fixture
def db_session():
    """Create in-memory database session for testing."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()


def run_of(staff_id, codes, start):
    """Assignments for ``staff_id`` on consecutive days starting at ``start``."""
    return [
        ShiftAssignment(start + dt.timedelta(days=i), staff_id, code)
        for i, code in enumerate(codes)
    ]
