"""Saved game model."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Game(SQLModel, table=True):
    """A move sequence saved by a user."""

    __tablename__ = "games"
    __table_args__ = (
        Index("ix_games_user_saved_at_id", "user_id", "saved_at", "id"),
        CheckConstraint("moves_count >= 0", name="ck_games_moves_count_non_negative"),
    )

    id: int | None = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True),
    )
    user_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        )
    )
    moves: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )
    moves_count: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
    )
    title: str | None = Field(
        default=None, sa_column=Column(String(200), nullable=True)
    )
    saved_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
