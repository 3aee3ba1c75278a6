"""Pytest configuration and shared fixtures for Habitline tests.

Every test gets a throwaway SQLite file, a session factory that bootstraps a
default user, and a frozen clock so "today" is deterministic.
"""

from __future__ import annotations

import logging

import pytest
from sqlmodel import Session, select

from habitline.config import TestingConfig
from habitline.infra.database import create_db_engine, create_session_factory, init_database
from habitline.logging_config import LOGGER_NAME
from habitline.models import Habit, User
from habitline.services.habits import HabitService
from habitline.services.locks import HabitLocks

from helpers import FrozenClock


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def config(tmp_path):
    """Configuration pointing at a per-test data directory."""
    return TestingConfig(tmp_path / "data")


@pytest.fixture
def db_engine(config):
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with all tables created
    """
    engine = create_db_engine(config)
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """Session for direct inspection of rows; committed on exit."""
    session = Session(db_engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@pytest.fixture
def session_factory(db_engine):
    """Session factory as used by repositories, with a default user attached.

    Returns:
        Callable: Factory returning Session context managers; ``factory.user`` is the bootstrapped user
    """
    factory = create_session_factory(db_engine)

    with factory() as session:
        existing = session.exec(select(User).limit(1)).first()
        if existing is None:
            existing = User(email="tester@example.com", name="Tester", password_hash="dummy-hash", avatar="T")
            session.add(existing)
            session.commit()
            session.refresh(existing)
        session.expunge(existing)
    factory.user = existing  # type: ignore[attr-defined]

    return factory


# =============================================================================
# Domain Fixtures
# =============================================================================


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def user(session_factory) -> User:
    """The default user every factory scopes data to."""
    return session_factory.user  # type: ignore[attr-defined]


@pytest.fixture
def habit_service(session_factory, config, clock) -> HabitService:
    """HabitService on the test database with private locks and frozen time."""
    return HabitService(
        session_factory,
        config=config,
        clock=clock,
        locks=HabitLocks(config.LOCK_TIMEOUT),
    )


@pytest.fixture
def habit_factory(habit_service, user):
    """Factory for creating test habits.

    Returns:
        Callable: Function that creates and persists Habit instances
    """

    def _create_habit(
        name: str = "Test Habit",
        description: str = "Test habit description",
        category: str = "health",
        frequency: str = "daily",
        owner: User | None = None,
    ) -> Habit:
        owner = owner or user
        return habit_service.create_habit(
            owner.id,
            name,
            description=description,
            category=category,
            frequency=frequency,
        )

    return _create_habit


@pytest.fixture
def clean_logging():
    """Detach whatever handlers setup_logging attached to the package logger."""
    yield
    package_logger = logging.getLogger(LOGGER_NAME)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.NOTSET)
