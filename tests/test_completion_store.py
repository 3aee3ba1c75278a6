"""Tests for the SQLModel completion store."""

from __future__ import annotations

import time
from datetime import date, datetime, timedelta, timezone

import pytest
from sqlmodel import select

from habitline.errors import InvalidDateError, NotFoundError, StoreTimeoutError
from habitline.infra.repositories import SQLModelCompletionStore
from habitline.models import HabitCompletion
from habitline.services import users

from helpers import TODAY, days_ago


@pytest.fixture
def store(session_factory, clock, config):
    return SQLModelCompletionStore(
        session_factory, clock=clock, history_window_days=config.HISTORY_WINDOW_DAYS
    )


class TestUpsert:
    def test_creates_record(self, store, habit_factory, user):
        habit = habit_factory(name="Exercise")

        record = store.upsert(habit.id, TODAY, True, "Morning jog")

        assert record.id is not None
        assert record.habit_id == habit.id
        assert record.user_id == user.id
        assert record.occurred_on == TODAY
        assert record.completed is True
        assert record.note == "Morning jog"

    def test_second_write_overwrites_same_key(self, store, habit_factory, db_session):
        habit = habit_factory(name="Exercise")
        store.upsert(habit.id, TODAY, True, "first")

        updated = store.upsert(habit.id, TODAY, False)

        rows = db_session.exec(select(HabitCompletion).where(HabitCompletion.habit_id == habit.id)).all()
        assert len(rows) == 1
        assert updated.completed is False
        assert updated.note is None

    def test_times_on_same_day_collide(self, store, habit_factory):
        habit = habit_factory(name="Water")
        morning = datetime(2024, 6, 14, 7, 30)
        evening = datetime(2024, 6, 14, 22, 15)

        first = store.upsert(habit.id, morning, True)
        second = store.upsert(habit.id, evening, False)

        assert first.id == second.id
        assert second.occurred_on == date(2024, 6, 14)
        assert store.list_for_habit(habit.id, days_ago(5), TODAY)[0].completed is False

    def test_aware_timestamps_use_owner_time_zone(self, store, habit_factory, session_factory, user):
        users.update_profile(user.id, timezone="America/New_York", session_factory=session_factory)
        habit = habit_factory(name="Reading")

        # 02:00 UTC on the 15th is still the evening of the 14th in New York
        record = store.upsert(habit.id, datetime(2024, 6, 15, 2, 0, tzinfo=timezone.utc), True)

        assert record.occurred_on == date(2024, 6, 14)

    def test_iso_string_accepted(self, store, habit_factory):
        habit = habit_factory()
        assert store.upsert(habit.id, "2024-06-10", True).occurred_on == date(2024, 6, 10)

    def test_malformed_string_rejected(self, store, habit_factory):
        habit = habit_factory()
        with pytest.raises(InvalidDateError):
            store.upsert(habit.id, "15/06/2024", True)

    def test_future_day_rejected(self, store, habit_factory):
        habit = habit_factory()
        with pytest.raises(InvalidDateError):
            store.upsert(habit.id, TODAY + timedelta(days=1), True)

    def test_day_before_tracking_window_rejected(self, store, habit_factory, config):
        habit = habit_factory()
        with pytest.raises(InvalidDateError):
            store.upsert(habit.id, days_ago(config.HISTORY_WINDOW_DAYS), True)
        # the oldest day inside the window is still accepted
        assert store.upsert(habit.id, days_ago(config.HISTORY_WINDOW_DAYS - 1), True).id is not None

    def test_unknown_habit(self, store):
        with pytest.raises(NotFoundError):
            store.upsert(9999, TODAY, True)


class TestReads:
    def test_get_returns_none_for_unrecorded_day(self, store, habit_factory):
        habit = habit_factory()
        assert store.get(habit.id, TODAY) is None

    def test_get_existing(self, store, habit_factory):
        habit = habit_factory()
        store.upsert(habit.id, days_ago(1), True, "note")
        record = store.get(habit.id, days_ago(1))
        assert record is not None
        assert record.note == "note"

    def test_get_unknown_habit(self, store):
        with pytest.raises(NotFoundError):
            store.get(4242, TODAY)

    def test_list_is_sparse_ascending_and_inclusive(self, store, habit_factory):
        habit = habit_factory()
        for offset in (0, 7, 3, 5, 9):
            store.upsert(habit.id, days_ago(offset), offset != 5)

        rows = store.list_for_habit(habit.id, days_ago(7), TODAY)

        assert [r.occurred_on for r in rows] == [days_ago(7), days_ago(5), days_ago(3), TODAY]
        assert [r.completed for r in rows] == [True, False, True, True]

    def test_list_only_returns_requested_habit(self, store, habit_factory):
        first = habit_factory(name="First")
        second = habit_factory(name="Second")
        store.upsert(first.id, TODAY, True)
        store.upsert(second.id, TODAY, True)

        assert len(store.list_for_habit(first.id, TODAY, TODAY)) == 1

    def test_list_rejects_inverted_range(self, store, habit_factory):
        habit = habit_factory()
        with pytest.raises(InvalidDateError):
            store.list_for_habit(habit.id, TODAY, days_ago(1))

    def test_list_unknown_habit(self, store):
        with pytest.raises(NotFoundError):
            store.list_for_habit(77, days_ago(3), TODAY)

    def test_count_completed(self, store, habit_factory):
        habit = habit_factory()
        store.upsert(habit.id, TODAY, True)
        store.upsert(habit.id, days_ago(1), False)
        store.upsert(habit.id, days_ago(2), True)

        assert store.count_completed(habit.id) == 2


class TestTimeouts:
    def test_caller_timeout_bounds_wait_on_locked_database(self, store, habit_factory, db_engine, config):
        habit = habit_factory()

        with db_engine.connect() as blocker:
            blocker.exec_driver_sql("BEGIN IMMEDIATE")
            started = time.monotonic()
            with pytest.raises(StoreTimeoutError):
                store.upsert(habit.id, TODAY, True, timeout=0.1)
            elapsed = time.monotonic() - started
            blocker.exec_driver_sql("ROLLBACK")

        assert elapsed < config.LOCK_TIMEOUT * 0.75
        assert store.get(habit.id, TODAY) is None

    def test_pooled_connections_get_default_wait_back(self, store, habit_factory, db_engine, config):
        habit = habit_factory()
        store.upsert(habit.id, TODAY, True, timeout=0.25)

        with db_engine.connect() as conn:
            busy_ms = conn.exec_driver_sql("PRAGMA busy_timeout").scalar()

        assert busy_ms == int(config.LOCK_TIMEOUT * 1000)
