"""Habit repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from sqlmodel import Session

from ...models.habit import Habit


class HabitRepository(Protocol):
    """Repository for managing habit entities and their aggregates."""

    def get_by_id(self, habit_id: int, *, session: Optional[Session] = None) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def list_for_user(self, user_id: int, include_inactive: bool = False) -> list[Habit]:
        """List a user's habits, optionally including archived ones."""
        ...

    def list_ids(self) -> list[int]:
        ...

    def create(self, habit: Habit, *, session: Optional[Session] = None) -> Habit:
        ...

    def update(self, habit: Habit, *, session: Optional[Session] = None) -> Habit:
        """Persist profile fields (name, icon, ...); aggregates are ignored."""
        ...

    def delete(self, habit_id: int, *, session: Optional[Session] = None) -> None:
        """Delete a habit and its completion history."""
        ...

    def lock_for_update(self, habit_id: int, *, session: Session) -> Habit:
        """Load a habit inside ``session`` holding a row lock where supported."""
        ...

    def save_aggregates(
        self, habit: Habit, *, streak: int, best_streak: int, completion_count: int, session: Session
    ) -> Habit:
        """Write the materialized aggregates guarded by the habit's version."""
        ...
