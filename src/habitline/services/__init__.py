"""Service module exports."""

from . import habits, locks, moods, seed, streaks, users

__all__ = [
    "habits",
    "locks",
    "moods",
    "seed",
    "streaks",
    "users",
]
