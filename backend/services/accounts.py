"""Account registration."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from core import hash_password
from models import User

from .auth.identity_resolution import normalize_email, registration_conflict_exists
from .errors import ConflictError
from .persistence import commit_or_raise

logger = logging.getLogger(__name__)

REGISTRATION_CONFLICT_DETAIL = "User with that username or email already exists"


async def register_account(
    session: AsyncSession,
    *,
    username: str,
    password: str,
    email: str | None = None,
    display_name: str | None = None,
) -> User:
    """Create a user; the plaintext password is hashed before it is stored."""
    normalized_username = username.strip()
    normalized_email = normalize_email(email) if email else None

    if await registration_conflict_exists(
        session,
        username=normalized_username,
        normalized_email=normalized_email,
    ):
        raise ConflictError(REGISTRATION_CONFLICT_DETAIL)

    user = User(
        username=normalized_username,
        email=normalized_email,
        password_hash=hash_password(password),
        display_name=(display_name or "").strip() or None,
    )
    session.add(user)
    await commit_or_raise(session, conflict_detail=REGISTRATION_CONFLICT_DETAIL)
    await session.refresh(user)
    logger.info("Registered account", extra={"user_id": user.id})
    return user


__all__ = ["REGISTRATION_CONFLICT_DETAIL", "register_account"]
