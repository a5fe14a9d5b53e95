"""Authentication endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_db
from core import create_access_token
from services.accounts import register_account
from services.auth import clear_access_cookie, resolve_login_user, set_access_cookie
from services.persistence import commit_or_raise

router = APIRouter(prefix="/auth", tags=["auth"])

MAX_DISPLAY_NAME_LENGTH = 80


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=30)
    password: str = Field(min_length=8, max_length=128)
    email: EmailStr | None = None
    display_name: str | None = Field(default=None, max_length=MAX_DISPLAY_NAME_LENGTH)

    @field_validator("username")
    @classmethod
    def _reject_email_like_username(cls, value: str) -> str:
        normalized = value.strip()
        if "@" in normalized:
            raise ValueError("Username cannot contain '@'")
        if len(normalized) < 3:
            raise ValueError("Username must be at least 3 characters")
        return normalized


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str | None = None
    display_name: str | None = None


class LoginRequest(BaseModel):
    # One field carries either the username or the email address.
    username: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=8, max_length=128)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class RegisterResponse(UserResponse):
    access_token: str
    token_type: str = "bearer"


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=RegisterResponse)
async def register(
    payload: RegisterRequest,
    response: Response,
    session: AsyncSession = Depends(get_db),
) -> RegisterResponse:
    user = await register_account(
        session,
        username=payload.username,
        password=payload.password,
        email=str(payload.email) if payload.email is not None else None,
        display_name=payload.display_name,
    )
    access_token = create_access_token(str(user.id))
    set_access_cookie(response, access_token)
    return RegisterResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        display_name=user.display_name,
        access_token=access_token,
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_db),
) -> TokenResponse:
    user = await resolve_login_user(
        session,
        identifier=payload.username,
        password=payload.password,
    )
    if user is None or user.id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    access_token = create_access_token(str(user.id))
    # Persists a password rehash, if one was needed.
    await commit_or_raise(session)

    set_access_cookie(response, access_token)
    return TokenResponse(access_token=access_token)


@router.post("/logout", status_code=status.HTTP_200_OK)
async def logout(response: Response) -> dict[str, Any]:
    clear_access_cookie(response)
    return {"detail": "Logged out"}
