"""User model: identity anchor owning habits and mood entries."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel


class User(SQLModel, table=True):
    """Registered user with credentials and a recording time zone."""

    __tablename__: ClassVar[str] = "user"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(nullable=False, unique=True, index=True, max_length=255)
    name: str = Field(nullable=False, max_length=120)
    password_hash: str = Field(nullable=False, max_length=255)
    avatar: str = Field(default="", max_length=8)
    timezone: str = Field(default="UTC", nullable=False, max_length=64)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    habits = Relationship(
        back_populates="user",
        sa_relationship=relationship("Habit", back_populates="user"),
    )
    mood_entries = Relationship(
        back_populates="user",
        sa_relationship=relationship("MoodEntry", back_populates="user"),
    )
