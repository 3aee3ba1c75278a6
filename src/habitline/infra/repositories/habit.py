"""SQLModel implementation of Habit repository."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import update as sa_update
from sqlmodel import Session, select

from ...errors import ConcurrencyConflictError, NotFoundError
from ...models.habit import Habit, HabitCompletion
from .base import SQLModelRepository

PROFILE_FIELDS = ("name", "description", "icon", "target", "category", "frequency", "is_active")


class SQLModelHabitRepository(SQLModelRepository):
    """SQLModel-based habit repository implementation."""

    def get_by_id(self, habit_id: int, *, session: Optional[Session] = None) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self._scope(session) as (s, owned):
            obj = s.get(Habit, habit_id)
            if obj is not None and owned:
                s.expunge(obj)
            return obj

    def list_for_user(self, user_id: int, include_inactive: bool = False) -> list[Habit]:
        """List a user's habits ordered by name."""
        with self._scope() as (s, _owned):
            statement = select(Habit).where(Habit.user_id == user_id).order_by(Habit.name)  # type: ignore
            if not include_inactive:
                statement = statement.where(Habit.is_active == True)  # noqa: E712
            rows = list(s.exec(statement).all())
            s.expunge_all()
            return rows

    def list_ids(self) -> list[int]:
        """Every habit id, used by reconciliation sweeps."""
        with self._scope() as (s, _owned):
            return list(s.exec(select(Habit.id).order_by(Habit.id)).all())  # type: ignore[arg-type]

    def create(self, habit: Habit, *, session: Optional[Session] = None) -> Habit:
        """Create a new habit with empty aggregates."""
        with self._scope(session) as (s, owned):
            habit.streak = 0
            habit.best_streak = 0
            habit.completion_count = 0
            habit.version = 0
            s.add(habit)
            return self._finish(s, habit, owned)

    def update(self, habit: Habit, *, session: Optional[Session] = None) -> Habit:
        """Persist profile fields; the materialized aggregates are left untouched."""
        with self._scope(session) as (s, owned):
            current = s.get(Habit, habit.id)
            if current is None:
                raise NotFoundError("habit", habit.id)
            for field_name in PROFILE_FIELDS:
                setattr(current, field_name, getattr(habit, field_name))
            current.updated_at = datetime.now(timezone.utc)
            s.add(current)
            return self._finish(s, current, owned)

    def delete(self, habit_id: int, *, session: Optional[Session] = None) -> None:
        """Delete a habit together with its completion history."""
        with self._scope(session) as (s, owned):
            habit = s.get(Habit, habit_id)
            if habit is None:
                raise NotFoundError("habit", habit_id)
            self._delete_where(s, HabitCompletion, HabitCompletion.habit_id == habit_id)
            s.delete(habit)
            if owned:
                s.commit()
            else:
                s.flush()

    def lock_for_update(self, habit_id: int, *, session: Session) -> Habit:
        """Load the habit with ``SELECT ... FOR UPDATE`` (ignored by SQLite)."""
        habit = session.exec(select(Habit).where(Habit.id == habit_id).with_for_update()).first()
        if habit is None:
            raise NotFoundError("habit", habit_id)
        return habit

    def save_aggregates(
        self,
        habit: Habit,
        *,
        streak: int,
        best_streak: int,
        completion_count: int,
        session: Session,
    ) -> Habit:
        """Compare-and-set the aggregates on ``habit.version``.

        Raises ConcurrencyConflictError when another writer bumped the version
        since ``habit`` was loaded.
        """
        result = session.connection().execute(
            sa_update(Habit)
            .where(Habit.id == habit.id, Habit.version == habit.version)
            .values(
                streak=streak,
                best_streak=best_streak,
                completion_count=completion_count,
                version=Habit.version + 1,
                updated_at=datetime.now(timezone.utc),
            )
        )
        if result.rowcount != 1:
            raise ConcurrencyConflictError(
                f"habit {habit.id} changed concurrently (expected version {habit.version})"
            )
        session.refresh(habit)
        return habit


__all__ = ["SQLModelHabitRepository"]
