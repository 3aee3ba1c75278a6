"""SQLModel implementation of the mood store."""

from __future__ import annotations

from numbers import Integral
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from sqlmodel import Session, select

from ...constants.habits import MOOD_MAX, MOOD_MIN
from ...dates import Clock, DayLike, ensure_not_future, local_today, normalize_day, resolve_zone
from ...errors import InvalidDateError, NotFoundError, ValidationError
from ...models.mood import MoodEntry
from ...models.user import User
from .base import SQLModelRepository


def validate_score(score: object) -> int:
    """Return ``score`` as int when it is an integer within the mood scale."""

    if isinstance(score, bool) or not isinstance(score, Integral):
        raise ValidationError(f"Mood score must be an integer, got {score!r}")
    if not MOOD_MIN <= int(score) <= MOOD_MAX:
        raise ValidationError(f"Mood score must be between {MOOD_MIN} and {MOOD_MAX}, got {score}")
    return int(score)


class SQLModelMoodStore(SQLModelRepository):
    """Durable (user, day) -> mood score."""

    def __init__(self, session_factory: Callable[[], Session], *, clock: Optional[Clock] = None):
        super().__init__(session_factory)
        self.clock = clock

    def _user_zone(self, session: Session, user_id: int) -> ZoneInfo:
        zone_name = session.exec(select(User.timezone).where(User.id == user_id)).first()
        if zone_name is None:
            raise NotFoundError("user", user_id)
        return resolve_zone(zone_name)

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
        """Insert or replace the mood entry for (user, day)."""
        value = validate_score(score)
        with self._scope(session, timeout) as (s, owned):
            zone = self._user_zone(s, user_id)
            key = normalize_day(day, zone)
            ensure_not_future(key, local_today(zone, self.clock))

            entry = s.exec(
                select(MoodEntry).where(MoodEntry.user_id == user_id, MoodEntry.occurred_on == key)
            ).first()
            if entry is None:
                entry = MoodEntry(user_id=user_id, occurred_on=key, score=value, note=note)
            else:
                entry.score = value
                entry.note = note
            s.add(entry)
            return self._finish(s, entry, owned)

    def get(
        self,
        user_id: int,
        day: DayLike,
        *,
        session: Optional[Session] = None,
        timeout: Optional[float] = None,
    ) -> Optional[MoodEntry]:
        with self._scope(session, timeout) as (s, owned):
            key = normalize_day(day, self._user_zone(s, user_id))
            entry = s.exec(
                select(MoodEntry).where(MoodEntry.user_id == user_id, MoodEntry.occurred_on == key)
            ).first()
            if entry is not None and owned:
                s.expunge(entry)
            return entry

    def range(
        self,
        user_id: int,
        start_date: DayLike,
        end_date: DayLike,
        *,
        session: Optional[Session] = None,
        timeout: Optional[float] = None,
    ) -> list[MoodEntry]:
        """Entries between the two days inclusive, oldest first."""
        with self._scope(session, timeout) as (s, owned):
            zone = self._user_zone(s, user_id)
            start = normalize_day(start_date, zone)
            end = normalize_day(end_date, zone)
            if start > end:
                raise InvalidDateError(f"Range start {start} is after end {end}")
            rows = list(
                s.exec(
                    select(MoodEntry)
                    .where(MoodEntry.user_id == user_id)
                    .where(MoodEntry.occurred_on >= start)
                    .where(MoodEntry.occurred_on <= end)
                    .order_by(MoodEntry.occurred_on)  # type: ignore[arg-type]
                ).all()
            )
            if owned:
                s.expunge_all()
            return rows


__all__ = ["SQLModelMoodStore", "validate_score"]
