"""Pytest configuration and shared fixtures for HabitPulse tests.

This module provides database fixtures, test data factories, and a Flask test
client wired to a throwaway SQLite file, so domain logic, the repository and
the API can be tested without touching a real database.
"""

from __future__ import annotations

import tempfile
from datetime import date, datetime
from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine

# Import all models to ensure they're registered with SQLModel metadata
from habitpulse.models import Habit, HabitEntry, Reminder  # noqa: F401

TEST_USER = "tester"


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a database session for a single test."""
    session = Session(db_engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the ``Callable[[], Session]`` repositories expect."""

    def factory():
        return Session(db_engine, expire_on_commit=False)

    return factory


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def habit_factory(db_session):
    """Factory for creating persisted habits.

    Returns:
        Callable: Function that creates and persists Habit instances
    """

    def _create_habit(
        name: str = "Drink water",
        goal: float = 8.0,
        icon: str = "water",
        unit: str = "glasses",
        user_id: str = TEST_USER,
    ) -> Habit:
        habit = Habit(name=name, goal=goal, icon=icon, unit=unit, user_id=user_id)
        db_session.add(habit)
        db_session.commit()
        db_session.refresh(habit)
        return habit

    return _create_habit


@pytest.fixture
def entry_factory(db_session):
    """Factory for persisting habit entries directly, bypassing the repository."""

    def _create_entry(habit: Habit, occurred_on: date, value: float | None) -> HabitEntry:
        entry = HabitEntry(habit_id=habit.id, occurred_on=occurred_on, value=value)
        db_session.add(entry)
        db_session.commit()
        db_session.refresh(entry)
        return entry

    return _create_entry


@pytest.fixture
def make_entry():
    """Build unsaved entries for pure aggregation tests; dates are not validated."""

    def _make_entry(
        occurred_on: object,
        value: float | None,
        *,
        updated_at: datetime | None = None,
    ) -> HabitEntry:
        entry = HabitEntry(habit_id=1, occurred_on=occurred_on, value=value)
        if updated_at is not None:
            entry.updated_at = updated_at
        return entry

    return _make_entry


# =============================================================================
# Flask Fixtures
# =============================================================================


@pytest.fixture
def app(tmp_path, monkeypatch):
    """Flask app backed by a temp SQLite file and the testing config."""

    monkeypatch.setenv("HABITPULSE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("HABITPULSE_DATABASE_URL", f"sqlite:///{tmp_path / 'api.db'}")
    monkeypatch.setenv("HABITPULSE_DEFAULT_USER", TEST_USER)
    monkeypatch.setenv("HABITPULSE_TIMEZONE", "local")

    from habitpulse import create_app
    from habitpulse.extensions import get_engine

    application = create_app("testing")
    yield application

    with application.app_context():
        get_engine().dispose()


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client
