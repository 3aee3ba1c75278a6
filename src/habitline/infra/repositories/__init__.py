"""Concrete repository implementations using SQLModel."""

from .completion import SQLModelCompletionStore
from .habit import SQLModelHabitRepository
from .mood import SQLModelMoodStore
from .user import SQLModelUserRepository

__all__ = [
    "SQLModelCompletionStore",
    "SQLModelHabitRepository",
    "SQLModelMoodStore",
    "SQLModelUserRepository",
]
