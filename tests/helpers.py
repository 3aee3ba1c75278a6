"""Shared test values: a frozen "now" and date arithmetic around it."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
TODAY = date(2024, 6, 15)


class FrozenClock:
    """Callable clock whose time only moves when a test says so."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, days: int = 0, **kwargs) -> None:
        self.now += timedelta(days=days, **kwargs)


def days_ago(n: int, today: date = TODAY) -> date:
    return today - timedelta(days=n)
