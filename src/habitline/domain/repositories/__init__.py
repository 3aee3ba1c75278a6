"""Repository protocol definitions for domain layer."""

from .completion import CompletionStore
from .habit import HabitRepository
from .mood import MoodStore

__all__ = [
    "CompletionStore",
    "HabitRepository",
    "MoodStore",
]
