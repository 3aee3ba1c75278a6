"""Enumerated values for habits and mood entries."""

from __future__ import annotations

HABIT_CATEGORIES: tuple[str, ...] = ("fitness", "health", "mindfulness", "productivity", "other")
HABIT_FREQUENCIES: tuple[str, ...] = ("daily", "weekly")

DEFAULT_CATEGORY = "other"
DEFAULT_FREQUENCY = "daily"
DEFAULT_ICON = "✅"

MOOD_MIN = 1
MOOD_MAX = 10

__all__ = [
    "DEFAULT_CATEGORY",
    "DEFAULT_FREQUENCY",
    "DEFAULT_ICON",
    "HABIT_CATEGORIES",
    "HABIT_FREQUENCIES",
    "MOOD_MAX",
    "MOOD_MIN",
]
