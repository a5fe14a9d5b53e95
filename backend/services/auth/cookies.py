"""HTTP cookie helpers for access-token transport."""

from __future__ import annotations

from datetime import timedelta
from typing import Literal

from fastapi import Response

from core import settings

ACCESS_COOKIE = "access_token"
COOKIE_PATH = "/"
COOKIE_SAMESITE: Literal["lax", "strict", "none"] = "lax"


def _cookie_secure() -> bool:
    return (
        settings.app_env.strip().lower() not in {"local", "test"}
        and not settings.allow_insecure_http_cookies
    )


def set_access_cookie(response: Response, access_token: str) -> None:
    max_age = int(timedelta(minutes=settings.access_token_expire_minutes).total_seconds())
    response.set_cookie(
        key=ACCESS_COOKIE,
        value=access_token,
        httponly=True,
        secure=_cookie_secure(),
        samesite=COOKIE_SAMESITE,
        max_age=max_age,
        path=COOKIE_PATH,
    )


def clear_access_cookie(response: Response) -> None:
    response.delete_cookie(
        key=ACCESS_COOKIE,
        path=COOKIE_PATH,
        secure=_cookie_secure(),
        samesite=COOKIE_SAMESITE,
    )


__all__ = ["ACCESS_COOKIE", "set_access_cookie", "clear_access_cookie"]
