"""User registration, profile and removal."""

from __future__ import annotations

from typing import Callable, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError
from sqlmodel import Session

from ..dates import resolve_zone
from ..errors import NotFoundError, ValidationError
from ..infra.repositories import SQLModelUserRepository
from ..logging_config import get_logger
from ..models.user import User

SessionFactory = Callable[[], Session]

logger = get_logger("services.users")

_hasher = PasswordHasher()


def _normalize_email(email: str) -> str:
    email = (email or "").strip().lower()
    local, _, domain = email.partition("@")
    if not local or "." not in domain:
        raise ValidationError(f"Invalid email address: {email!r}")
    return email


def initials(name: str) -> str:
    """Avatar label from a display name: 'Test User' -> 'TU'."""

    parts = [p for p in name.split() if p]
    return "".join(p[0] for p in parts[:2]).upper()


def create_user(
    *,
    email: str,
    name: str,
    password: str,
    avatar: Optional[str] = None,
    timezone: str = "UTC",
    session_factory: SessionFactory,
) -> User:
    """Register a user with an argon2-hashed password."""

    email = _normalize_email(email)
    name = (name or "").strip()
    if not name:
        raise ValidationError("Name is required")
    if not password:
        raise ValidationError("Password cannot be empty")
    resolve_zone(timezone)

    repo = SQLModelUserRepository(session_factory)
    if repo.get_by_email(email) is not None:
        raise ValidationError("Email already registered")
    user = repo.create(
        User(
            email=email,
            name=name,
            password_hash=_hasher.hash(password),
            avatar=(avatar or initials(name))[:8],
            timezone=timezone,
        )
    )
    logger.info("User created", extra={"user_id": user.id})
    return user


def verify_password(user: User, password: str) -> bool:
    try:
        return _hasher.verify(user.password_hash, password)
    except (VerifyMismatchError, InvalidHash, VerificationError):
        return False


def get_user(user_id: int, session_factory: SessionFactory) -> User:
    user = SQLModelUserRepository(session_factory).get_by_id(user_id)
    if user is None:
        raise NotFoundError("user", user_id)
    return user


def get_user_by_email(email: str, session_factory: SessionFactory) -> Optional[User]:
    return SQLModelUserRepository(session_factory).get_by_email((email or "").strip().lower())


def update_profile(
    user_id: int,
    *,
    name: Optional[str] = None,
    avatar: Optional[str] = None,
    timezone: Optional[str] = None,
    session_factory: SessionFactory,
) -> User:
    """Update display fields; email and credentials are immutable here."""

    user = get_user(user_id, session_factory)
    if name is not None:
        if not name.strip():
            raise ValidationError("Name is required")
        user.name = name.strip()
    if avatar is not None:
        user.avatar = avatar[:8]
    if timezone is not None:
        resolve_zone(timezone)
        user.timezone = timezone
    return SQLModelUserRepository(session_factory).update(user)


def delete_user(user_id: int, session_factory: SessionFactory) -> None:
    """Remove the user and cascade to habits, completions and mood entries."""

    SQLModelUserRepository(session_factory).delete(user_id)
    logger.info("User deleted", extra={"user_id": user_id})


__all__ = [
    "create_user",
    "delete_user",
    "get_user",
    "get_user_by_email",
    "initials",
    "update_profile",
    "verify_password",
]
