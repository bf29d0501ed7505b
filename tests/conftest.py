"""Pytest configuration and shared fixtures for HabitIntel tests.

Provides database fixtures, both persistence adapters, a tracker with a
fixed clock, and record factories so domain logic can be tested without
touching the real app database.
"""

from __future__ import annotations

import tempfile
from datetime import date
from pathlib import Path
from typing import Optional

import pytest
from sqlmodel import Session, SQLModel, create_engine

# Import all models to ensure they're registered with SQLModel metadata
from habitintel.models import HabitEntry, HabitSegment, Slot  # noqa: F401
from habitintel.infra.repositories import InMemoryTrackerRepository, SQLModelTrackerRepository
from habitintel.services import jobs
from habitintel.services.tracker import HabitTracker

DEVICE_ID = "device-1"
TODAY = date(2024, 3, 20)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with all tables created
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the ``Callable[[], Session]`` repositories expect."""

    def factory():
        return Session(db_engine, expire_on_commit=False)

    return factory


@pytest.fixture
def sql_repo(session_factory) -> SQLModelTrackerRepository:
    return SQLModelTrackerRepository(session_factory)


@pytest.fixture
def memory_repo() -> InMemoryTrackerRepository:
    return InMemoryTrackerRepository()


@pytest.fixture(params=["memory", "sql"])
def repository(request):
    """Run a test once against each persistence adapter."""

    return request.getfixturevalue(f"{request.param}_repo")


# =============================================================================
# Tracker Fixtures
# =============================================================================


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def tracker(repository, today) -> HabitTracker:
    """Tracker over the parametrized adapter with a fixed clock."""

    return HabitTracker(repository, clock=lambda: today)


@pytest.fixture
def device(tracker):
    return tracker.register_device(DEVICE_ID, "tester")


@pytest.fixture
def slot(tracker, device) -> Slot:
    return tracker.create_slot(device.device_id, "07:30")


@pytest.fixture
def sync_jobs():
    """Run background jobs inline for the duration of a test."""

    jobs.set_async_execution(False)
    jobs.clear_jobs()
    yield
    jobs.set_async_execution(True)
    jobs.clear_jobs()


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def segment_factory():
    """Factory for unsaved HabitSegment records used by pure-function tests."""

    counter = {"n": 0}

    def _create_segment(
        start_date: date,
        end_date: Optional[date] = None,
        *,
        slot_id: str = "slot-a",
        name: Optional[str] = None,
        color: str = "#3B82F6",
        segment_id: Optional[str] = None,
    ) -> HabitSegment:
        counter["n"] += 1
        return HabitSegment(
            id=segment_id or f"seg-{counter['n']}",
            device_id=DEVICE_ID,
            slot_id=slot_id,
            name=name or f"Habit {counter['n']}",
            color=color,
            start_date=start_date,
            end_date=end_date,
        )

    return _create_segment


@pytest.fixture
def entry_factory():
    """Factory for unsaved HabitEntry records."""

    def _create_entry(segment_id: str, occurred_on: date, completed: bool = True) -> HabitEntry:
        return HabitEntry(
            device_id=DEVICE_ID,
            segment_id=segment_id,
            occurred_on=occurred_on,
            completed=completed,
        )

    return _create_entry
