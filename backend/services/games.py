"""Saved-game persistence and owner-scoped queries."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any, cast

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from models import Game, User

from .errors import NotFoundError, StorageError
from .persistence import commit_or_raise

logger = logging.getLogger(__name__)

MovesInput = str | Sequence[str] | None

_MOVES_ADAPTER: TypeAdapter[list[str]] = TypeAdapter(list[str])


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def _desc(column: Any) -> Any:
    return cast(Any, column).desc()


def _asc(column: Any) -> Any:
    return cast(Any, column).asc()


def _newest_first() -> tuple[Any, Any]:
    # Equal saved_at values keep insertion order.
    return _desc(Game.saved_at), _asc(Game.id)


def normalize_moves(moves: MovesInput) -> list[str]:
    """Turn client move input into a list of move tokens.

    Accepts either a sequence of tokens or the JSON text of an array of
    strings. Anything absent, empty or malformed yields an empty list.
    """
    if moves is None:
        return []
    if isinstance(moves, str):
        if not moves.strip():
            return []
        try:
            return _MOVES_ADAPTER.validate_json(moves, strict=True)
        except ValidationError:
            logger.debug("Discarding malformed move list encoding")
            return []
    if not all(isinstance(token, str) for token in moves):
        return []
    return list(moves)


def _has_move_content(moves: MovesInput) -> bool:
    if moves is None:
        return False
    if isinstance(moves, str):
        return "".join(moves.split()) not in ("", "[]")
    return len(moves) > 0


def count_moves(moves: MovesInput) -> int:
    return len(normalize_moves(moves))


async def save_game(
    session: AsyncSession,
    *,
    owner_id: int,
    moves: MovesInput,
    title: str | None = None,
    saved_at: datetime | None = None,
) -> Game:
    """Persist a game for ``owner_id``; ``moves_count`` is always derived here."""
    owner = await session.get(User, owner_id)
    if owner is None:
        raise NotFoundError("Owner not found")

    tokens = normalize_moves(moves)
    game = Game(
        user_id=owner_id,
        moves=tokens,
        moves_count=len(tokens),
        title=title,
    )
    if saved_at is not None:
        game.saved_at = saved_at.astimezone(timezone.utc)
    session.add(game)
    await commit_or_raise(session)
    await session.refresh(game)
    if not tokens and _has_move_content(moves):
        logger.warning(
            "Stored empty move list in place of malformed input",
            extra={"user_id": owner_id, "game_id": game.id},
        )
    logger.info(
        "Saved game",
        extra={"user_id": owner_id, "game_id": game.id, "moves_count": game.moves_count},
    )
    return game


async def list_games_by_owner(
    session: AsyncSession,
    owner_id: int,
    *,
    limit: int | None = None,
    offset: int = 0,
) -> list[Game]:
    stmt = select(Game).where(_eq(Game.user_id, owner_id)).order_by(*_newest_first())
    if offset > 0:
        stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as exc:
        raise StorageError("Failed to load games") from exc
    return list(result.scalars().all())


async def count_games_by_owner(session: AsyncSession, owner_id: int) -> int:
    stmt = select(func.count()).select_from(Game).where(_eq(Game.user_id, owner_id))
    try:
        result = await session.execute(stmt)
    except SQLAlchemyError as exc:
        raise StorageError("Failed to count games") from exc
    return int(result.scalar_one())


async def latest_game_by_owner(session: AsyncSession, owner_id: int) -> Game | None:
    games = await list_games_by_owner(session, owner_id, limit=1)
    return games[0] if games else None


__all__ = [
    "normalize_moves",
    "count_moves",
    "save_game",
    "list_games_by_owner",
    "count_games_by_owner",
    "latest_game_by_owner",
]
