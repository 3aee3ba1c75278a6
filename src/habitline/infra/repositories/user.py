"""SQLModel implementation of the user repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Session, select

from ...errors import NotFoundError
from ...models.habit import Habit, HabitCompletion
from ...models.mood import MoodEntry
from ...models.user import User
from .base import SQLModelRepository


class SQLModelUserRepository(SQLModelRepository):
    """Users and the cascade over everything they own."""

    def get_by_id(self, user_id: int, *, session: Optional[Session] = None) -> Optional[User]:
        with self._scope(session) as (s, owned):
            user = s.get(User, user_id)
            if user is not None and owned:
                s.expunge(user)
            return user

    def get_by_email(self, email: str, *, session: Optional[Session] = None) -> Optional[User]:
        with self._scope(session) as (s, owned):
            user = s.exec(select(User).where(User.email == email)).first()
            if user is not None and owned:
                s.expunge(user)
            return user

    def create(self, user: User, *, session: Optional[Session] = None) -> User:
        with self._scope(session) as (s, owned):
            s.add(user)
            return self._finish(s, user, owned)

    def update(self, user: User, *, session: Optional[Session] = None) -> User:
        with self._scope(session) as (s, owned):
            merged = s.merge(user)
            return self._finish(s, merged, owned)

    def delete(self, user_id: int, *, session: Optional[Session] = None) -> None:
        """Delete the user, their mood entries, habits and completions."""
        with self._scope(session) as (s, owned):
            user = s.get(User, user_id)
            if user is None:
                raise NotFoundError("user", user_id)
            self._delete_where(s, MoodEntry, MoodEntry.user_id == user_id)
            self._delete_where(s, HabitCompletion, HabitCompletion.user_id == user_id)
            self._delete_where(s, Habit, Habit.user_id == user_id)
            s.delete(user)
            if owned:
                s.commit()
            else:
                s.flush()


__all__ = ["SQLModelUserRepository"]
