"""Demo seed: the generated history must reproduce the advertised aggregates."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlmodel import Session, select

from habitline.models import Habit, HabitCompletion, MoodEntry, User
from habitline.services import users
from habitline.services.habits import HabitService
from habitline.services.seed import (
    DEMO_EMAIL,
    DEMO_PASSWORD,
    HABIT_SPECS,
    completion_days,
    run_demo_seed,
)
from habitline.services.streaks import DayMark, rebuild

from helpers import TODAY


@pytest.fixture
def seeded(session_factory, config, clock):
    return run_demo_seed(session_factory, config=config, clock=clock)


def _habits_by_name(db_engine) -> dict[str, Habit]:
    with Session(db_engine) as session:
        return {h.name: h for h in session.exec(select(Habit)).all()}


def test_seed_summary(seeded):
    assert seeded.users == 1
    assert seeded.habits == 5
    assert seeded.mood_entries == 7


def test_seed_replaces_existing_users(seeded, db_engine):
    with Session(db_engine) as session:
        emails = [u.email for u in session.exec(select(User)).all()]
    assert emails == [DEMO_EMAIL]


def test_demo_user_can_log_in(seeded, session_factory):
    user = users.get_user_by_email(DEMO_EMAIL, session_factory)
    assert user.name == "Test User"
    assert user.avatar == "TU"
    assert users.verify_password(user, DEMO_PASSWORD)


@pytest.mark.parametrize("spec", HABIT_SPECS, ids=lambda spec: spec["name"])
def test_seeded_aggregates(seeded, db_engine, spec):
    habit = _habits_by_name(db_engine)[spec["name"]]
    assert (habit.streak, habit.best_streak, habit.completion_count) == (
        spec["streak"],
        spec["best"],
        spec["count"],
    )


def test_today_states_and_notes(seeded, db_engine):
    habits = _habits_by_name(db_engine)
    with Session(db_engine) as session:
        today_rows = {
            row.habit_id: row
            for row in session.exec(select(HabitCompletion).where(HabitCompletion.occurred_on == TODAY)).all()
        }

    assert today_rows[habits["Morning Exercise"].id].note == "Morning jog completed"
    assert today_rows[habits["Drink Water"].id].completed is True
    assert today_rows[habits["Meditation"].id].completed is False
    assert habits["Reading"].id not in today_rows


def test_week_of_moods(seeded, db_engine):
    with Session(db_engine) as session:
        entries = session.exec(select(MoodEntry).order_by(MoodEntry.occurred_on)).all()
    assert [e.occurred_on for e in entries] == [TODAY - timedelta(days=n) for n in range(6, -1, -1)]
    assert all(1 <= e.score <= 10 for e in entries)


def test_reconcile_after_seed_changes_nothing(seeded, session_factory, config, clock, db_engine):
    before = {name: (h.streak, h.best_streak, h.completion_count) for name, h in _habits_by_name(db_engine).items()}

    HabitService(session_factory, config=config, clock=clock).reconcile_all()

    after = {name: (h.streak, h.best_streak, h.completion_count) for name, h in _habits_by_name(db_engine).items()}
    assert after == before


@pytest.mark.parametrize("spec", HABIT_SPECS, ids=lambda spec: spec["name"])
def test_completion_days_layout(spec):
    days = completion_days(
        TODAY,
        streak=spec["streak"],
        best=spec["best"],
        count=spec["count"],
        completed_today=spec["today"] is True,
    )
    summary = rebuild([DayMark(day) for day in days], today=TODAY)
    assert (summary.streak, summary.best_streak, summary.completion_count) == (
        spec["streak"],
        spec["best"],
        spec["count"],
    )


def test_completion_days_rejects_inconsistent_targets():
    with pytest.raises(ValueError):
        completion_days(TODAY, streak=5, best=3, count=10, completed_today=True)
