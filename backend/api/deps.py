"""Shared FastAPI dependencies."""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from core import ACCESS_TOKEN_TYPE, decode_token
from db.session import get_session
from models import User
from services.auth import ACCESS_COOKIE

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    async for session in get_session():
        yield session


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the caller from a bearer header or the access-token cookie."""
    token = credentials.credentials if credentials is not None else None
    if not token:
        token = request.cookies.get(ACCESS_COOKIE)
    if not token:
        raise _credentials_exception()

    try:
        payload = decode_token(token)
    except ValueError as exc:
        raise _credentials_exception() from exc
    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise _credentials_exception()

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError) as exc:
        raise _credentials_exception() from exc

    user = await session.get(User, user_id)
    if user is None:
        raise _credentials_exception()
    return user


__all__ = ["get_db", "get_current_user"]
