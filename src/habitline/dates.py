"""Day-boundary policy: every day key is the calendar date at user-local midnight."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import InvalidDateError, ValidationError

Clock = Callable[[], datetime]
DayLike = Union[date, datetime, str]


def utc_now() -> datetime:
    """Default clock."""

    return datetime.now(timezone.utc)


def resolve_zone(name: str) -> ZoneInfo:
    """Return the ZoneInfo for an IANA name or raise ValidationError."""

    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError(f"Unknown time zone: {name!r}") from exc


def normalize_day(value: DayLike, tz: ZoneInfo) -> date:
    """Collapse a date-ish value onto its calendar day in ``tz``.

    Aware datetimes are converted into the zone first; naive datetimes are taken
    as already local. Strings must be ISO ``YYYY-MM-DD``.
    """

    # datetime subclasses date, so check it first
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as exc:
            raise InvalidDateError(f"Malformed date: {value!r}") from exc
    raise InvalidDateError(f"Unsupported date value: {value!r}")


def local_today(tz: ZoneInfo, clock: Optional[Clock] = None) -> date:
    """Return today's calendar day in ``tz`` according to ``clock``."""

    now = (clock or utc_now)()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(tz).date()


def ensure_not_future(day: date, today: date) -> None:
    if day > today:
        raise InvalidDateError(f"{day.isoformat()} is in the future (today is {today.isoformat()})")


def window_start(today: date, window_days: int) -> date:
    """First day of the tracking window ending at ``today`` (inclusive)."""

    return today - timedelta(days=window_days - 1)


def ensure_in_window(day: date, today: date, window_days: int) -> None:
    """Reject days after today or before the start of the tracking window."""

    ensure_not_future(day, today)
    start = window_start(today, window_days)
    if day < start:
        raise InvalidDateError(
            f"{day.isoformat()} is outside the {window_days}-day tracking window "
            f"(earliest allowed: {start.isoformat()})"
        )
