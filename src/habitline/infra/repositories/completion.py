"""SQLModel implementation of the completion store."""

from __future__ import annotations

from datetime import date
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from sqlalchemy import func
from sqlmodel import Session, select

from ...dates import Clock, DayLike, ensure_in_window, local_today, normalize_day, resolve_zone
from ...errors import InvalidDateError, NotFoundError
from ...models.habit import Habit, HabitCompletion
from ...models.user import User
from .base import SQLModelRepository


class SQLModelCompletionStore(SQLModelRepository):
    """Durable (habit, day) -> completion facts.

    Day keys are formed in the owning user's time zone, so two timestamps on the
    same local day address the same record.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        clock: Optional[Clock] = None,
        history_window_days: int = 365,
    ):
        super().__init__(session_factory)
        self.clock = clock
        self.history_window_days = history_window_days

    def _habit_zone(self, session: Session, habit_id: int) -> tuple[Habit, ZoneInfo]:
        row = session.exec(
            select(Habit, User.timezone)
            .join(User, User.id == Habit.user_id)  # type: ignore[arg-type]
            .where(Habit.id == habit_id)
        ).first()
        if row is None:
            raise NotFoundError("habit", habit_id)
        habit, zone_name = row
        return habit, resolve_zone(zone_name)

    def today_for(
        self,
        habit_id: int,
        *,
        session: Optional[Session] = None,
        timeout: Optional[float] = None,
    ) -> date:
        """Today's calendar day for the habit's owner."""
        with self._scope(session, timeout) as (s, _owned):
            _, zone = self._habit_zone(s, habit_id)
            return local_today(zone, self.clock)

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
        """Insert or overwrite the record for (habit, day)."""
        with self._scope(session, timeout) as (s, owned):
            habit, zone = self._habit_zone(s, habit_id)
            key = normalize_day(day, zone)
            ensure_in_window(key, local_today(zone, self.clock), self.history_window_days)

            record = s.exec(
                select(HabitCompletion)
                .where(HabitCompletion.habit_id == habit_id)
                .where(HabitCompletion.occurred_on == key)
            ).first()
            if record is None:
                record = HabitCompletion(
                    user_id=habit.user_id,
                    habit_id=habit_id,
                    occurred_on=key,
                    completed=bool(completed),
                    note=note,
                )
            else:
                record.completed = bool(completed)
                record.note = note
            s.add(record)
            return self._finish(s, record, owned)

    def get(
        self,
        habit_id: int,
        day: DayLike,
        *,
        session: Optional[Session] = None,
        timeout: Optional[float] = None,
    ) -> Optional[HabitCompletion]:
        """Get the record for (habit, day), or None when unrecorded."""
        with self._scope(session, timeout) as (s, owned):
            _, zone = self._habit_zone(s, habit_id)
            key = normalize_day(day, zone)
            record = s.exec(
                select(HabitCompletion)
                .where(HabitCompletion.habit_id == habit_id)
                .where(HabitCompletion.occurred_on == key)
            ).first()
            if record is not None and owned:
                s.expunge(record)
            return record

    def list_for_habit(
        self,
        habit_id: int,
        start_date: DayLike,
        end_date: DayLike,
        *,
        session: Optional[Session] = None,
        timeout: Optional[float] = None,
    ) -> list[HabitCompletion]:
        """Recorded days in the inclusive range, ascending."""
        with self._scope(session, timeout) as (s, owned):
            _, zone = self._habit_zone(s, habit_id)
            start = normalize_day(start_date, zone)
            end = normalize_day(end_date, zone)
            if start > end:
                raise InvalidDateError(f"Range start {start} is after end {end}")
            rows = list(
                s.exec(
                    select(HabitCompletion)
                    .where(HabitCompletion.habit_id == habit_id)
                    .where(HabitCompletion.occurred_on >= start)
                    .where(HabitCompletion.occurred_on <= end)
                    .order_by(HabitCompletion.occurred_on)  # type: ignore[arg-type]
                ).all()
            )
            if owned:
                s.expunge_all()
            return rows

    def count_completed(
        self,
        habit_id: int,
        *,
        session: Optional[Session] = None,
        timeout: Optional[float] = None,
    ) -> int:
        """Number of days ever marked completed, regardless of any window."""
        with self._scope(session, timeout) as (s, _owned):
            return s.exec(
                select(func.count(HabitCompletion.id))  # type: ignore[arg-type]
                .where(HabitCompletion.habit_id == habit_id)
                .where(HabitCompletion.completed == True)  # noqa: E712
            ).one()


__all__ = ["SQLModelCompletionStore"]
