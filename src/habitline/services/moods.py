"""Mood journal service and caller-side trend helpers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Iterable, Optional, Sequence

from sqlmodel import Session

from ..dates import Clock, DayLike, local_today, resolve_zone
from ..domain.repositories import MoodStore
from ..errors import NotFoundError, ValidationError
from ..infra.repositories import SQLModelMoodStore, SQLModelUserRepository
from ..logging_config import get_logger
from ..models.mood import MoodEntry

logger = get_logger("services.moods")


@dataclass(frozen=True)
class MoodSummary:
    """Simple aggregate over a set of mood entries."""

    count: int
    average: Optional[float]
    minimum: Optional[int]
    maximum: Optional[int]
    latest: Optional[int]


def moving_average(entries: Sequence[MoodEntry], window: int = 7) -> list[tuple[date, float]]:
    """Trailing average per recorded day over the previous ``window`` calendar days.

    Days without an entry are not invented; each point averages only the entries
    that fall inside its window.
    """

    if window < 1:
        raise ValidationError("Moving average window must be at least 1 day")
    ordered = sorted(entries, key=lambda e: e.occurred_on)
    points: list[tuple[date, float]] = []
    for entry in ordered:
        floor = entry.occurred_on - timedelta(days=window - 1)
        scores = [e.score for e in ordered if floor <= e.occurred_on <= entry.occurred_on]
        points.append((entry.occurred_on, round(sum(scores) / len(scores), 2)))
    return points


def summarize(entries: Iterable[MoodEntry]) -> MoodSummary:
    ordered = sorted(entries, key=lambda e: e.occurred_on)
    if not ordered:
        return MoodSummary(count=0, average=None, minimum=None, maximum=None, latest=None)
    scores = [e.score for e in ordered]
    return MoodSummary(
        count=len(scores),
        average=round(sum(scores) / len(scores), 2),
        minimum=min(scores),
        maximum=max(scores),
        latest=scores[-1],
    )


class MoodService:
    """Thin facade over the mood store used by the API layer."""

    def __init__(self, session_factory: Callable[[], Session], *, clock: Optional[Clock] = None):
        self.clock = clock
        self.store: MoodStore = SQLModelMoodStore(session_factory, clock=clock)
        self.users = SQLModelUserRepository(session_factory)

    def record(
        self,
        user_id: int,
        day: DayLike,
        score: int,
        note: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
    ) -> MoodEntry:
        entry = self.store.upsert(user_id, day, score, note, timeout=timeout)
        logger.info(
            "Mood recorded",
            extra={"user_id": user_id, "day": entry.occurred_on.isoformat(), "score": entry.score},
        )
        return entry

    def get(self, user_id: int, day: DayLike) -> MoodEntry:
        entry = self.store.get(user_id, day)
        if entry is None:
            raise NotFoundError("mood entry", (user_id, str(day)))
        return entry

    def history(self, user_id: int, start_date: DayLike, end_date: DayLike) -> list[MoodEntry]:
        return self.store.range(user_id, start_date, end_date)

    def recent(self, user_id: int, days: int = 7) -> list[MoodEntry]:
        """Entries for the last ``days`` days ending today in the user's zone."""
        if days < 1:
            raise ValidationError("days must be at least 1")
        user = self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("user", user_id)
        today = local_today(resolve_zone(user.timezone), self.clock)
        return self.store.range(user_id, today - timedelta(days=days - 1), today)


__all__ = ["MoodService", "MoodSummary", "moving_average", "summarize"]
