"""Identity normalization and login-user resolution helpers."""

from __future__ import annotations

import logging
from typing import Any, cast

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from core import hash_password, needs_rehash, verify_password
from models import User

logger = logging.getLogger(__name__)


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def normalize_email(value: str) -> str:
    return value.strip().lower()


async def registration_conflict_exists(
    session: AsyncSession,
    *,
    username: str,
    normalized_email: str | None,
) -> bool:
    conditions = [_eq(User.username, username)]
    if normalized_email is not None:
        lowered_email_column = cast(Any, func.lower(cast(Any, User.email)))
        conditions.append(_eq(lowered_email_column, normalized_email))
    existing = await session.execute(select(User).where(or_(*conditions)).limit(1))
    return existing.scalar_one_or_none() is not None


async def resolve_login_user(
    session: AsyncSession,
    *,
    identifier: str,
    password: str,
) -> User | None:
    """Return the user matching ``identifier`` (username or email) and password.

    A stale password hash is upgraded in place; the caller owns the commit.
    """
    identifier = identifier.strip()
    if "@" in identifier:
        lowered_email_column = cast(Any, func.lower(cast(Any, User.email)))
        stmt = select(User).where(_eq(lowered_email_column, normalize_email(identifier)))
    else:
        stmt = select(User).where(_eq(User.username, identifier))
    result = await session.execute(stmt.limit(1))
    user = result.scalar_one_or_none()
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Rejected login attempt", extra={"identifier": identifier})
        return None

    if needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        session.add(user)
    return user


__all__ = [
    "normalize_email",
    "registration_conflict_exists",
    "resolve_login_user",
]
