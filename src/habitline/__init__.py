"""Habitline: habit streaks, completions and mood journal."""

from __future__ import annotations

from .config import BaseConfig, DevConfig, TestingConfig
from .errors import (
    ConcurrencyConflictError,
    HabitlineError,
    InvalidDateError,
    InvariantViolationError,
    NotFoundError,
    ServiceFailure,
    StoreTimeoutError,
    ValidationError,
)

__all__ = [
    "BaseConfig",
    "ConcurrencyConflictError",
    "DevConfig",
    "HabitlineError",
    "InvalidDateError",
    "InvariantViolationError",
    "NotFoundError",
    "ServiceFailure",
    "StoreTimeoutError",
    "TestingConfig",
    "ValidationError",
]
