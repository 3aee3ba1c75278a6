"""Error taxonomy shared by stores and services.

Validation and not-found errors are user-correctable and travel to the caller
unchanged. Invariant violations indicate a storage defect; services log them and
surface :class:`ServiceFailure` instead. Concurrency conflicts are safe to retry.
"""

from __future__ import annotations


class HabitlineError(Exception):
    """Base class for every error raised by habitline."""


class ValidationError(HabitlineError, ValueError):
    """Input rejected: out-of-range score, unknown category, bad date, ..."""


class InvalidDateError(ValidationError):
    """Date is malformed, in the future, or outside the tracking window."""


class NotFoundError(HabitlineError, LookupError):
    """A referenced user, habit or mood entry does not exist."""

    def __init__(self, kind: str, key: object) -> None:
        super().__init__(f"{kind} not found: {key}")
        self.kind = kind
        self.key = key


class InvariantViolationError(HabitlineError):
    """Completion history is corrupt (duplicate or out-of-order days)."""


class ConcurrencyConflictError(HabitlineError):
    """A concurrent writer won the race; retrying the whole operation is safe."""


class StoreTimeoutError(HabitlineError, TimeoutError):
    """A lock or the database could not be acquired within the allowed time."""


class ServiceFailure(HabitlineError):
    """Generic, non user-correctable failure."""


__all__ = [
    "ConcurrencyConflictError",
    "HabitlineError",
    "InvalidDateError",
    "InvariantViolationError",
    "NotFoundError",
    "ServiceFailure",
    "StoreTimeoutError",
    "ValidationError",
]
