"""Tests for user registration, credentials and cascading removal."""

from __future__ import annotations

import pytest
from sqlmodel import Session, select

from habitline.errors import NotFoundError, ValidationError
from habitline.models import Habit, HabitCompletion, MoodEntry, User
from habitline.services import users
from habitline.services.moods import MoodService

from helpers import TODAY


def test_create_user_hashes_password(session_factory):
    user = users.create_user(
        email="  Alice@Example.com ",
        name="Alice Liddell",
        password="rabbit-hole",
        session_factory=session_factory,
    )

    assert user.id is not None
    assert user.email == "alice@example.com"
    assert user.avatar == "AL"
    assert user.password_hash != "rabbit-hole"
    assert users.verify_password(user, "rabbit-hole")
    assert not users.verify_password(user, "wrong")


def test_duplicate_email_is_case_insensitive(session_factory):
    users.create_user(email="bob@example.com", name="Bob", password="pw", session_factory=session_factory)
    with pytest.raises(ValidationError):
        users.create_user(email="BOB@example.com", name="Bobby", password="pw", session_factory=session_factory)


@pytest.mark.parametrize(
    "email, name, password, tz",
    [
        ("not-an-email", "Carol", "pw", "UTC"),
        ("carol@example.com", "   ", "pw", "UTC"),
        ("carol@example.com", "Carol", "", "UTC"),
        ("carol@example.com", "Carol", "pw", "Mars/Olympus_Mons"),
    ],
)
def test_create_user_rejects_bad_input(session_factory, email, name, password, tz):
    with pytest.raises(ValidationError):
        users.create_user(email=email, name=name, password=password, timezone=tz, session_factory=session_factory)


def test_verify_password_tolerates_garbage_hash(user):
    # the bootstrapped test user carries a placeholder hash
    assert users.verify_password(user, "anything") is False


def test_update_profile(session_factory, user):
    updated = users.update_profile(
        user.id, name="Renamed", timezone="Europe/Berlin", session_factory=session_factory
    )
    assert updated.name == "Renamed"
    assert users.get_user(user.id, session_factory).timezone == "Europe/Berlin"

    with pytest.raises(ValidationError):
        users.update_profile(user.id, timezone="Nowhere/Special", session_factory=session_factory)


def test_lookup_by_email(session_factory, user):
    assert users.get_user_by_email("TESTER@example.com", session_factory).id == user.id
    assert users.get_user_by_email("nobody@example.com", session_factory) is None


def test_delete_user_cascades(session_factory, habit_service, user, clock, db_engine):
    habit = habit_service.create_habit(user.id, "Journal")
    habit_service.toggle_completion(habit.id, TODAY, True)
    MoodService(session_factory, clock=clock).record(user.id, TODAY, 6)

    users.delete_user(user.id, session_factory)

    with Session(db_engine) as session:
        assert session.get(User, user.id) is None
        assert session.exec(select(Habit)).all() == []
        assert session.exec(select(HabitCompletion)).all() == []
        assert session.exec(select(MoodEntry)).all() == []
    with pytest.raises(NotFoundError):
        users.get_user(user.id, session_factory)
