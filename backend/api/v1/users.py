"""Profile and favorites endpoints for the authenticated user."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db
from models import User
from services.profiles import (
    ProfilePatch,
    add_user_favorite,
    build_profile,
    remove_user_favorite,
    update_profile,
)

router = APIRouter(tags=["users"])

MAX_PROFILE_NAME_LENGTH = 80
MAX_PROFILE_BIO_LENGTH = 500
MAX_AVATAR_URL_LENGTH = 512
MAX_OPENING_ID_LENGTH = 100

OpeningId = Annotated[
    str,
    Field(min_length=1, max_length=MAX_OPENING_ID_LENGTH),
]


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    favorites: list[str] = Field(default_factory=list)
    games_count: int = 0
    latest_saved_at: datetime | None = None


class ProfileUpdateRequest(BaseModel):
    display_name: str | None = Field(default=None, max_length=MAX_PROFILE_NAME_LENGTH)
    avatar_url: str | None = Field(default=None, max_length=MAX_AVATAR_URL_LENGTH)
    bio: str | None = Field(default=None, max_length=MAX_PROFILE_BIO_LENGTH)
    email: EmailStr | None = None


class FavoriteRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    opening_id: OpeningId


@router.get("/me", response_model=ProfileResponse)
async def get_me(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    """Return the authenticated user's profile with favorites and game stats."""
    profile = await build_profile(session, current_user)
    return ProfileResponse.model_validate(asdict(profile))


@router.patch("/me", response_model=ProfileResponse)
async def update_me(
    payload: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    """Update only the profile fields present in the payload."""
    patch = ProfilePatch(
        display_name=payload.display_name,
        avatar_url=payload.avatar_url,
        bio=payload.bio,
        email=str(payload.email) if payload.email is not None else None,
    )
    profile = await update_profile(session, current_user, patch)
    return ProfileResponse.model_validate(asdict(profile))


@router.post("/me/favorites", response_model=list[str])
async def add_favorite(
    payload: FavoriteRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> list[str]:
    return await add_user_favorite(session, current_user, payload.opening_id)


@router.delete("/me/favorites/{opening_id}", response_model=list[str])
async def remove_favorite(
    opening_id: Annotated[str, Path(min_length=1, max_length=MAX_OPENING_ID_LENGTH)],
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> list[str]:
    return await remove_user_favorite(session, current_user, opening_id.strip())
