"""Completion store protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from sqlmodel import Session

from ...dates import DayLike
from ...models.habit import HabitCompletion


class CompletionStore(Protocol):
    """One completion record per (habit, calendar day)."""

    def upsert(
        self,
        habit_id: int,
        day: DayLike,
        completed: bool,
        note: Optional[str] = None,
        *,
        session: Optional[Session] = None,
        timeout: Optional[float] = None,
    ) -> HabitCompletion:
        """Write the record for the (habit, day) key, replacing any prior value."""
        ...

    def get(
        self,
        habit_id: int,
        day: DayLike,
        *,
        session: Optional[Session] = None,
        timeout: Optional[float] = None,
    ) -> Optional[HabitCompletion]:
        """Return the record for the key, or None when the day is unrecorded."""
        ...

    def today_for(
        self,
        habit_id: int,
        *,
        session: Optional[Session] = None,
        timeout: Optional[float] = None,
    ) -> date:
        """Today in the time zone of the habit's owner."""
        ...

    def count_completed(
        self,
        habit_id: int,
        *,
        session: Optional[Session] = None,
        timeout: Optional[float] = None,
    ) -> int:
        """Days ever marked completed."""
        ...

    def list_for_habit(
        self,
        habit_id: int,
        start_date: DayLike,
        end_date: DayLike,
        *,
        session: Optional[Session] = None,
        timeout: Optional[float] = None,
    ) -> list[HabitCompletion]:
        """Recorded days in ``[start_date, end_date]``, ascending; gaps are omitted."""
        ...
