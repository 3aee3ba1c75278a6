"""Shared plumbing for SQLModel repositories."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Tuple

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlmodel import Session, select

from ...errors import ConcurrencyConflictError, StoreTimeoutError
from ...logging_config import get_logger

logger = get_logger("infra.repositories")

_BUSY_MARKERS = ("database is locked", "lock timeout", "could not obtain lock", "timeout")


def apply_lock_timeout(session: Session, timeout: float) -> None:
    """Bound lock waits of the session's current transaction to ``timeout`` seconds.

    SQLite gets a connection-level busy timeout, reset when the connection goes
    back to the pool; PostgreSQL gets a transaction-local ``lock_timeout``. Other
    backends keep the engine-wide bound.
    """
    millis = max(int(timeout * 1000), 0)
    connection = session.connection()
    dialect = connection.dialect.name
    if dialect == "sqlite":
        connection.exec_driver_sql(f"PRAGMA busy_timeout = {millis}")
    elif dialect == "postgresql":
        connection.exec_driver_sql(f"SET LOCAL lock_timeout = {millis}")


class SQLModelRepository:
    """Base for repositories built on a session factory.

    Every public method accepts an optional ``session``. When one is passed the
    repository joins the caller's transaction (flushes, never commits); otherwise
    it opens, commits and closes its own session and returns detached objects.
    Store methods also take ``timeout``, the longest they may wait on a lock.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    @contextmanager
    def _scope(
        self, session: Optional[Session] = None, timeout: Optional[float] = None
    ) -> Iterator[Tuple[Session, bool]]:
        """Yield ``(session, owned)`` and translate driver errors."""
        try:
            if session is not None:
                if timeout is not None:
                    apply_lock_timeout(session, timeout)
                yield session, False
                return
            with self.session_factory() as own:
                try:
                    if timeout is not None:
                        apply_lock_timeout(own, timeout)
                    yield own, True
                except Exception:
                    own.rollback()
                    raise
        except IntegrityError as exc:
            logger.warning("Unique key collision: %s", exc.orig)
            raise ConcurrencyConflictError("Record was written concurrently; retry") from exc
        except OperationalError as exc:
            message = str(exc.orig).lower()
            if any(marker in message for marker in _BUSY_MARKERS):
                raise StoreTimeoutError(f"Database busy: {exc.orig}") from exc
            raise

    @staticmethod
    def _delete_where(session: Session, model, *criteria) -> int:
        """Delete matching rows one by one so ORM state stays consistent."""
        rows = session.exec(select(model).where(*criteria)).all()
        for row in rows:
            session.delete(row)
        session.flush()
        return len(rows)

    @staticmethod
    def _finish(session: Session, obj, owned: bool):
        """Commit (owned) or flush (joined) and hand back ``obj``."""
        if owned:
            session.commit()
            session.refresh(obj)
            session.expunge(obj)
        else:
            session.flush()
        return obj


__all__ = ["SQLModelRepository", "apply_lock_timeout"]
