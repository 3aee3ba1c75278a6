"""Habit service: CRUD plus the completion toggle that keeps aggregates in sync."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Callable, Optional

from sqlmodel import Session

from ..config import BaseConfig
from ..constants.habits import (
    DEFAULT_CATEGORY,
    DEFAULT_FREQUENCY,
    DEFAULT_ICON,
    HABIT_CATEGORIES,
    HABIT_FREQUENCIES,
)
from ..dates import Clock, DayLike, window_start
from ..domain.repositories import CompletionStore, HabitRepository
from ..errors import (
    ConcurrencyConflictError,
    InvariantViolationError,
    NotFoundError,
    ServiceFailure,
    ValidationError,
)
from ..infra.repositories import (
    SQLModelCompletionStore,
    SQLModelHabitRepository,
    SQLModelUserRepository,
)
from ..logging_config import get_logger
from ..models.habit import Habit, HabitCompletion
from . import streaks
from .locks import HabitLocks

logger = get_logger("services.habits")

SessionFactory = Callable[[], Session]

# Process-wide so every service instance serializes on the same habit locks.
_SHARED_LOCKS = HabitLocks()

_EDITABLE_FIELDS = {"name", "description", "icon", "target", "category", "frequency"}
_AGGREGATE_FIELDS = {"streak", "best_streak", "completion_count", "version"}


@dataclass(frozen=True)
class ToggleResult:
    """Outcome of a completion toggle."""

    habit: Habit
    completion: HabitCompletion
    summary: streaks.StreakSummary


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Habit name is required")
    if len(cleaned) > 80:
        raise ValidationError("Habit name must be 80 characters or fewer")
    return cleaned


def _check_choice(field_name: str, value: str, allowed: tuple[str, ...]) -> str:
    normalized = (value or "").strip().lower()
    if normalized not in allowed:
        raise ValidationError(f"Invalid {field_name}: {value!r} (expected one of {', '.join(allowed)})")
    return normalized


class HabitService:
    """Coordinates the habit repository, completion store and streak engine."""

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        config: Optional[BaseConfig] = None,
        clock: Optional[Clock] = None,
        locks: Optional[HabitLocks] = None,
    ):
        self.config = config or BaseConfig()
        self.session_factory = session_factory
        self.habits: HabitRepository = SQLModelHabitRepository(session_factory)
        self.users = SQLModelUserRepository(session_factory)
        self.completions: CompletionStore = SQLModelCompletionStore(
            session_factory,
            clock=clock,
            history_window_days=self.config.HISTORY_WINDOW_DAYS,
        )
        self.locks = locks or _SHARED_LOCKS

    # ------------------------------------------------------------------ CRUD

    def create_habit(
        self,
        user_id: int,
        name: str,
        *,
        description: str = "",
        icon: str = DEFAULT_ICON,
        target: str = "",
        category: str = DEFAULT_CATEGORY,
        frequency: str = DEFAULT_FREQUENCY,
    ) -> Habit:
        """Create a habit for ``user_id`` with zeroed aggregates."""
        if self.users.get_by_id(user_id) is None:
            raise NotFoundError("user", user_id)
        habit = Habit(
            user_id=user_id,
            name=_clean_name(name),
            description=(description or "").strip(),
            icon=icon or DEFAULT_ICON,
            target=(target or "").strip(),
            category=_check_choice("category", category, HABIT_CATEGORIES),
            frequency=_check_choice("frequency", frequency, HABIT_FREQUENCIES),
        )
        created = self.habits.create(habit)
        logger.info("Habit created", extra={"habit_id": created.id, "user_id": user_id})
        return created

    def get_habit(self, habit_id: int) -> Habit:
        habit = self.habits.get_by_id(habit_id)
        if habit is None:
            raise NotFoundError("habit", habit_id)
        return habit

    def list_habits(self, user_id: int, *, include_inactive: bool = False) -> list[Habit]:
        return self.habits.list_for_user(user_id, include_inactive=include_inactive)

    def update_habit(self, habit_id: int, **changes) -> Habit:
        """Edit profile fields. Aggregates are derived and cannot be set here."""
        forbidden = set(changes) & _AGGREGATE_FIELDS
        if forbidden:
            raise ValidationError(f"Derived fields cannot be edited: {', '.join(sorted(forbidden))}")
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown habit fields: {', '.join(sorted(unknown))}")

        habit = self.get_habit(habit_id)
        if "name" in changes:
            changes["name"] = _clean_name(changes["name"])
        if "category" in changes:
            changes["category"] = _check_choice("category", changes["category"], HABIT_CATEGORIES)
        if "frequency" in changes:
            changes["frequency"] = _check_choice("frequency", changes["frequency"], HABIT_FREQUENCIES)
        for field_name, value in changes.items():
            setattr(habit, field_name, value)
        return self.habits.update(habit)

    def rename_habit(self, habit_id: int, name: str) -> Habit:
        return self.update_habit(habit_id, name=name)

    def archive_habit(self, habit_id: int) -> Habit:
        """Soft delete: hide the habit but keep its history."""
        habit = self.get_habit(habit_id)
        habit.is_active = False
        return self.habits.update(habit)

    def delete_habit(self, habit_id: int, *, timeout: Optional[float] = None) -> None:
        """Hard delete the habit and every completion recorded for it."""
        with self.locks.hold(habit_id, self._timeout(timeout)):
            self.habits.delete(habit_id)
        self.locks.forget(habit_id)
        logger.info("Habit deleted", extra={"habit_id": habit_id})

    # ------------------------------------------------------------ completions

    def toggle_completion(
        self,
        habit_id: int,
        day: DayLike,
        completed: bool,
        note: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
    ) -> ToggleResult:
        """Mark ``day`` completed or not and refresh the habit's aggregates atomically.

        A concurrency conflict is retried once; validation and not-found errors
        reach the caller unchanged; corrupt history surfaces as ServiceFailure.
        """
        try:
            try:
                return self._toggle_once(habit_id, day, completed, note, timeout)
            except ConcurrencyConflictError:
                logger.warning("Toggle conflicted, retrying once", extra={"habit_id": habit_id})
                return self._toggle_once(habit_id, day, completed, note, timeout)
        except InvariantViolationError as exc:
            logger.exception("Completion history invariant violated", extra={"habit_id": habit_id})
            raise ServiceFailure(f"Could not update habit {habit_id}") from exc

    def _toggle_once(
        self,
        habit_id: int,
        day: DayLike,
        completed: bool,
        note: Optional[str],
        timeout: Optional[float],
    ) -> ToggleResult:
        with self.locks.hold(habit_id, self._timeout(timeout)):
            with self.session_factory() as session:
                try:
                    habit = self.habits.lock_for_update(habit_id, session=session)
                    today = self.completions.today_for(habit_id, session=session)

                    prior = self.completions.get(habit_id, day, session=session)
                    was_completed = bool(prior is not None and prior.completed)
                    record = self.completions.upsert(
                        habit_id, day, completed, note, session=session, timeout=self._timeout(timeout)
                    )

                    history = self.completions.list_for_habit(
                        habit_id,
                        window_start(today, self.config.HISTORY_WINDOW_DAYS),
                        today,
                        session=session,
                    )
                    summary = streaks.recompute(
                        history,
                        today=today,
                        previous_best=habit.best_streak,
                        correction=streaks.Correction(
                            day=record.occurred_on,
                            was_completed=was_completed,
                            now_completed=record.completed,
                        ),
                        completed_total=self.completions.count_completed(habit_id, session=session),
                    )
                    if summary.best_streak < habit.best_streak:
                        # record run was broken; an equal run may predate the window
                        full_history = self.completions.list_for_habit(
                            habit_id, date.min, today, session=session
                        )
                        summary = replace(
                            summary,
                            best_streak=max(streaks.longest_run(full_history, today=today), summary.streak),
                        )
                    self.habits.save_aggregates(
                        habit,
                        streak=summary.streak,
                        best_streak=summary.best_streak,
                        completion_count=summary.completion_count,
                        session=session,
                    )
                    session.commit()
                except Exception:
                    session.rollback()
                    raise
                session.expunge(habit)
                session.expunge(record)

        logger.debug(
            "Completion toggled",
            extra={
                "habit_id": habit_id,
                "day": record.occurred_on.isoformat(),
                "completed": record.completed,
                "streak": summary.streak,
            },
        )
        return ToggleResult(habit=habit, completion=record, summary=summary)

    def history(self, habit_id: int, start_date: DayLike, end_date: DayLike) -> list[HabitCompletion]:
        return self.completions.list_for_habit(habit_id, start_date, end_date)

    # --------------------------------------------------------- reconciliation

    def reconcile(self, habit_id: int, *, timeout: Optional[float] = None) -> Habit:
        """Full recompute of the habit's aggregates from its entire history."""
        with self.locks.hold(habit_id, self._timeout(timeout)):
            with self.session_factory() as session:
                try:
                    habit = self.habits.lock_for_update(habit_id, session=session)
                    today = self.completions.today_for(habit_id, session=session)
                    history = self.completions.list_for_habit(habit_id, date.min, today, session=session)
                    summary = streaks.rebuild(history, today=today)
                    drifted = (habit.streak, habit.best_streak, habit.completion_count) != (
                        summary.streak,
                        summary.best_streak,
                        summary.completion_count,
                    )
                    if drifted:
                        logger.warning(
                            "Habit aggregates drifted from history",
                            extra={
                                "habit_id": habit_id,
                                "stored": [habit.streak, habit.best_streak, habit.completion_count],
                                "derived": [summary.streak, summary.best_streak, summary.completion_count],
                            },
                        )
                    self.habits.save_aggregates(
                        habit,
                        streak=summary.streak,
                        best_streak=summary.best_streak,
                        completion_count=summary.completion_count,
                        session=session,
                    )
                    session.commit()
                except Exception:
                    session.rollback()
                    raise
                session.expunge(habit)
        return habit

    def reconcile_all(self) -> int:
        """Reconcile every habit; returns how many were processed."""
        habit_ids = self.habits.list_ids()
        for habit_id in habit_ids:
            self.reconcile(habit_id)
        logger.info("Reconciled habits", extra={"count": len(habit_ids)})
        return len(habit_ids)

    def _timeout(self, timeout: Optional[float]) -> float:
        return self.config.LOCK_TIMEOUT if timeout is None else timeout


__all__ = ["HabitService", "ToggleResult"]
