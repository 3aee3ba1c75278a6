"""Streak engine: derive habit aggregates from a sparse completion history.

The history is the ascending list of recorded days for one habit. A day with no
record is a gap, exactly like a day explicitly marked not completed. The current
streak is anchored at today when today is completed, otherwise at yesterday, so an
untouched "today" does not break yesterday's run.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, NamedTuple, Optional, Protocol, Sequence

from ..errors import InvariantViolationError

ONE_DAY = timedelta(days=1)


class DayRecord(Protocol):
    occurred_on: date
    completed: bool


class DayMark(NamedTuple):
    """Lightweight history item for callers without ORM rows."""

    occurred_on: date
    completed: bool = True


@dataclass(frozen=True)
class Correction:
    """The toggle that produced the history being recomputed."""

    day: date
    was_completed: bool
    now_completed: bool

    @property
    def removes_completion(self) -> bool:
        return self.was_completed and not self.now_completed


@dataclass(frozen=True)
class StreakSummary:
    """Aggregates materialized on the habit row."""

    streak: int
    best_streak: int
    completion_count: int
    last_completed_on: Optional[date] = None


def validate_history(history: Iterable[DayRecord]) -> list[DayRecord]:
    """Return the history as a list, rejecting duplicate or out-of-order days."""

    records = list(history)
    for previous, current in zip(records, records[1:]):
        if current.occurred_on == previous.occurred_on:
            raise InvariantViolationError(f"Duplicate completion record for {current.occurred_on}")
        if current.occurred_on < previous.occurred_on:
            raise InvariantViolationError(
                f"Completion history out of order: {current.occurred_on} after {previous.occurred_on}"
            )
    return records


def _completed_days(records: Sequence[DayRecord], today: date) -> set[date]:
    return {r.occurred_on for r in records if r.completed and r.occurred_on <= today}


def _run_back(days: set[date], end: date) -> int:
    """Length of the consecutive run of ``days`` ending at ``end``."""
    length = 0
    cursor = end
    while cursor in days:
        length += 1
        cursor -= ONE_DAY
    return length


def _run_forward(days: set[date], start: date) -> int:
    length = 0
    cursor = start
    while cursor in days:
        length += 1
        cursor += ONE_DAY
    return length


def current_streak(history: Iterable[DayRecord], *, today: date) -> int:
    """Consecutive completed days ending today, or ending yesterday while today is open."""

    days = _completed_days(validate_history(history), today)
    if today in days:
        return _run_back(days, today)
    return _run_back(days, today - ONE_DAY)


def longest_run(history: Iterable[DayRecord], *, today: Optional[date] = None) -> int:
    """Longest run of consecutive completed days anywhere in the history."""

    records = validate_history(history)
    longest = 0
    run = 0
    last_day: Optional[date] = None
    for record in records:
        if not record.completed or (today is not None and record.occurred_on > today):
            run = 0
            last_day = None
            continue
        if last_day is not None and record.occurred_on == last_day + ONE_DAY:
            run += 1
        else:
            run = 1
        last_day = record.occurred_on
        longest = max(longest, run)
    return longest


def recompute(
    history: Iterable[DayRecord],
    *,
    today: date,
    previous_best: int = 0,
    correction: Optional[Correction] = None,
    completed_total: Optional[int] = None,
) -> StreakSummary:
    """Recompute aggregates after a toggle.

    ``best_streak`` never moves down, except when ``correction`` un-marks a day that
    belonged to the run holding the record; then it is recomputed from the history.
    ``completed_total`` lets callers supply a count covering days older than the
    (bounded) history they loaded.
    """

    records = validate_history(history)
    in_history = sum(1 for r in records if r.completed)
    if completed_total is None:
        completed_total = in_history
    elif completed_total < in_history:
        raise InvariantViolationError(
            f"Completion total {completed_total} is below the {in_history} completions in history"
        )

    days = _completed_days(records, today)
    streak = _run_back(days, today) if today in days else _run_back(days, today - ONE_DAY)
    longest = longest_run(records, today=today)
    best = max(previous_best, longest)

    if correction is not None and correction.removes_completion:
        # length of the run the day sat in before it was un-marked
        former_run = (
            _run_back(days, correction.day - ONE_DAY) + 1 + _run_forward(days, correction.day + ONE_DAY)
        )
        if former_run >= previous_best:
            best = longest

    return StreakSummary(
        streak=streak,
        best_streak=max(best, streak),
        completion_count=completed_total,
        last_completed_on=max(days) if days else None,
    )


def rebuild(history: Iterable[DayRecord], *, today: date) -> StreakSummary:
    """Full recompute from a complete history, discarding any cached best."""

    records = validate_history(history)
    return StreakSummary(
        streak=current_streak(records, today=today),
        best_streak=longest_run(records, today=today),
        completion_count=sum(1 for r in records if r.completed),
        last_completed_on=max(_completed_days(records, today), default=None),
    )


__all__ = [
    "Correction",
    "DayMark",
    "DayRecord",
    "StreakSummary",
    "current_streak",
    "longest_run",
    "rebuild",
    "recompute",
    "validate_history",
]
