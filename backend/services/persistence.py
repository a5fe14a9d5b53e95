"""Commit helpers that translate database faults into service errors."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from db.errors import is_unique_violation

from .errors import ConflictError, StorageError

logger = logging.getLogger(__name__)


async def commit_or_raise(
    session: AsyncSession,
    *,
    conflict_detail: str = "Resource already exists",
) -> None:
    """Commit the session, rolling back and re-raising as a service error."""
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if is_unique_violation(exc):
            raise ConflictError(conflict_detail) from exc
        logger.exception("Integrity failure during commit")
        raise StorageError("Failed to persist changes") from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Database failure during commit")
        raise StorageError("Failed to persist changes") from exc


__all__ = ["commit_or_raise"]
