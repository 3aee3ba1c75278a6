"""Mood store protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from sqlmodel import Session

from ...dates import DayLike
from ...models.mood import MoodEntry


class MoodStore(Protocol):
    """One mood entry per (user, calendar day)."""

    def upsert(
        self,
        user_id: int,
        day: DayLike,
        score: int,
        note: Optional[str] = None,
        *,
        session: Optional[Session] = None,
        timeout: Optional[float] = None,
    ) -> MoodEntry:
        """Record the score (1-10) for the day, replacing any previous entry."""
        ...

    def get(
        self,
        user_id: int,
        day: DayLike,
        *,
        session: Optional[Session] = None,
        timeout: Optional[float] = None,
    ) -> Optional[MoodEntry]:
        ...

    def range(
        self,
        user_id: int,
        start_date: DayLike,
        end_date: DayLike,
        *,
        session: Optional[Session] = None,
        timeout: Optional[float] = None,
    ) -> list[MoodEntry]:
        """Entries in the inclusive range, ascending and sparse."""
        ...
