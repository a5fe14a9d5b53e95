"""Saved-game endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db
from models import User
from services.games import list_games_by_owner, save_game
from services.profiles import ensure_aware

from .pagination import MAX_PAGE_SIZE, set_next_offset_header

router = APIRouter(prefix="/games", tags=["games"])

MAX_GAME_TITLE_LENGTH = 200


class SaveGameRequest(BaseModel):
    # The web client posts JSON.stringify(history); plain arrays work too.
    moves: str | list[str] | None = None
    title: str | None = Field(default=None, max_length=MAX_GAME_TITLE_LENGTH)


class GameResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    moves: list[str]
    moves_count: int
    title: str | None = None
    saved_at: datetime

    @field_validator("saved_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_aware(value)


def _require_user_id(user: User) -> int:
    if user.id is None:
        _raise_missing_identifier()
    return user.id


def _raise_missing_identifier() -> NoReturn:
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="User record missing identifier",
    )


@router.post("", status_code=status.HTTP_201_CREATED, response_model=GameResponse)
async def create_game(
    payload: SaveGameRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> GameResponse:
    """Save a game; any client-supplied move count is ignored."""
    title = payload.title.strip() if payload.title else None
    game = await save_game(
        session,
        owner_id=_require_user_id(current_user),
        moves=payload.moves,
        title=title or None,
    )
    return GameResponse.model_validate(game)


@router.get("", response_model=list[GameResponse])
async def list_my_games(
    response: Response,
    limit: Annotated[int | None, Query(ge=1, le=MAX_PAGE_SIZE)] = None,
    offset: Annotated[int, Query(ge=0)] = 0,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> list[GameResponse]:
    """List the caller's games, most recently saved first."""
    games = await list_games_by_owner(
        session,
        _require_user_id(current_user),
        limit=limit + 1 if limit is not None else None,
        offset=offset,
    )
    if limit is not None:
        has_more = len(games) > limit
        if has_more:
            games = games[:limit]
        set_next_offset_header(response, offset=offset, limit=limit, has_more=has_more)
    return [GameResponse.model_validate(game) for game in games]
