"""Per-habit mutual exclusion for read-recompute-write cycles."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from ..errors import StoreTimeoutError
from ..logging_config import get_logger

logger = get_logger("services.locks")


class HabitLocks:
    """Hands out one lock per habit id.

    Toggles for the same habit queue behind each other; different habits never
    contend. Waiting is always bounded.
    """

    def __init__(self, default_timeout: float = 10.0):
        self.default_timeout = default_timeout
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}

    def _lock_for(self, habit_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(habit_id)
            if lock is None:
                lock = self._locks[habit_id] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, habit_id: int, timeout: Optional[float] = None) -> Iterator[None]:
        """Hold the habit's lock, raising StoreTimeoutError after ``timeout`` seconds."""
        wait = self.default_timeout if timeout is None else timeout
        lock = self._lock_for(habit_id)
        if not lock.acquire(timeout=max(wait, 0)):
            logger.warning("Timed out waiting for habit lock", extra={"habit_id": habit_id, "timeout": wait})
            raise StoreTimeoutError(f"habit {habit_id} is busy; gave up after {wait:.1f}s")
        try:
            yield
        finally:
            lock.release()

    def forget(self, habit_id: int) -> None:
        """Drop the lock of a deleted habit."""
        with self._guard:
            self._locks.pop(habit_id, None)


__all__ = ["HabitLocks"]
