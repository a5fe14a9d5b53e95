"""Profile composition, partial updates and favorites mutations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, cast

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from models import User

from .errors import NotFoundError, StorageError
from .favorites import add_favorite, decode_favorites, remove_favorite
from .games import count_games_by_owner, latest_game_by_owner
from .persistence import commit_or_raise

logger = logging.getLogger(__name__)


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def ensure_aware(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass(frozen=True)
class ProfileView:
    """Identity, favorites and game statistics for one user."""

    id: int
    username: str
    email: str | None
    display_name: str | None
    avatar_url: str | None
    bio: str | None
    favorites: list[str] = field(default_factory=list)
    games_count: int = 0
    latest_saved_at: datetime | None = None


@dataclass(frozen=True)
class ProfilePatch:
    """Partial profile update; ``None`` leaves the stored value untouched."""

    display_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    email: str | None = None


def _require_user_id(user: User) -> int:
    if user.id is None:
        raise NotFoundError("User record missing identifier")
    return user.id


async def get_user_by_username(session: AsyncSession, username: str) -> User:
    try:
        result = await session.execute(select(User).where(_eq(User.username, username)))
    except SQLAlchemyError as exc:
        raise StorageError("Failed to load user") from exc
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError("User not found")
    return user


async def build_profile(session: AsyncSession, user: User) -> ProfileView:
    """Compose a fresh profile view; statistics are read at call time."""
    user_id = _require_user_id(user)
    games_count = await count_games_by_owner(session, user_id)
    latest = await latest_game_by_owner(session, user_id)
    return ProfileView(
        id=user_id,
        username=user.username,
        email=user.email,
        display_name=user.display_name,
        avatar_url=user.avatar_url,
        bio=user.bio,
        favorites=decode_favorites(user.favorites),
        games_count=games_count,
        latest_saved_at=ensure_aware(latest.saved_at) if latest is not None else None,
    )


async def get_profile(session: AsyncSession, username: str) -> ProfileView:
    user = await get_user_by_username(session, username)
    return await build_profile(session, user)


def _normalize_optional_text(value: str) -> str | None:
    normalized = value.strip()
    return normalized or None


async def update_profile(
    session: AsyncSession,
    user: User,
    patch: ProfilePatch,
) -> ProfileView:
    """Apply the non-absent fields of ``patch`` and return the refreshed profile."""
    updated = False
    if patch.display_name is not None:
        user.display_name = _normalize_optional_text(patch.display_name)
        updated = True
    if patch.avatar_url is not None:
        user.avatar_url = _normalize_optional_text(patch.avatar_url)
        updated = True
    if patch.bio is not None:
        user.bio = _normalize_optional_text(patch.bio)
        updated = True
    if patch.email is not None:
        user.email = patch.email.strip().lower()
        updated = True

    if updated:
        session.add(user)
        await commit_or_raise(session, conflict_detail="Email already in use")
        await session.refresh(user)
    return await build_profile(session, user)


async def _lock_user(session: AsyncSession, user_id: int) -> User:
    stmt = (
        select(User)
        .where(_eq(User.id, user_id))
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as exc:
        raise StorageError("Failed to load user") from exc
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError("User not found")
    return user


async def add_user_favorite(
    session: AsyncSession,
    user: User,
    opening_id: str,
) -> list[str]:
    locked = await _lock_user(session, _require_user_id(user))
    raw, favorites = add_favorite(locked.favorites, opening_id)
    if raw != locked.favorites:
        locked.favorites = raw
        session.add(locked)
        await commit_or_raise(session)
        logger.info(
            "Added favorite opening",
            extra={"user_id": locked.id, "opening_id": opening_id},
        )
    return favorites


async def remove_user_favorite(
    session: AsyncSession,
    user: User,
    opening_id: str,
) -> list[str]:
    locked = await _lock_user(session, _require_user_id(user))
    raw, favorites = remove_favorite(locked.favorites, opening_id)
    if raw != locked.favorites:
        locked.favorites = raw
        session.add(locked)
        await commit_or_raise(session)
        logger.info(
            "Removed favorite opening",
            extra={"user_id": locked.id, "opening_id": opening_id},
        )
    return favorites


__all__ = [
    "ProfileView",
    "ProfilePatch",
    "ensure_aware",
    "get_user_by_username",
    "build_profile",
    "get_profile",
    "update_profile",
    "add_user_favorite",
    "remove_user_favorite",
]
