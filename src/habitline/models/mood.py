"""Mood journal table."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy import CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:  # pragma: no cover
    from .user import User


class MoodEntry(SQLModel, table=True):
    """A user's self-reported mood (1-10) for one calendar day."""

    __tablename__: ClassVar[str] = "mood_entry"
    __table_args__ = (
        UniqueConstraint("user_id", "occurred_on", name="uq_mood_user_day"),
        CheckConstraint("score >= 1 AND score <= 10", name="ck_mood_score_range"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    occurred_on: date = Field(nullable=False, index=True)
    score: int = Field(nullable=False)
    note: Optional[str] = Field(default=None, max_length=500)

    user: "User" = Relationship(sa_relationship=relationship("User", back_populates="mood_entries"))
