"""SQLModel table exports."""

from .habit import Habit, HabitCompletion
from .mood import MoodEntry
from .user import User

__all__ = [
    "Habit",
    "HabitCompletion",
    "MoodEntry",
    "User",
]
