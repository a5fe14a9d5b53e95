"""Mapping of service errors onto HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from services.errors import (
    ChessOpeningsError,
    ConflictError,
    NotFoundError,
    SerializationError,
    StorageError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[ChessOpeningsError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    SerializationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    StorageError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for_error(error: ChessOpeningsError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR.items():
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def _handle_service_error(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, ChessOpeningsError):  # pragma: no cover - registration guard
        raise exc
    status_code = status_for_error(exc)
    if status_code >= 500:
        logger.warning(
            "Service error on %s %s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
    return JSONResponse({"detail": str(exc)}, status_code=status_code)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ChessOpeningsError, _handle_service_error)


__all__ = ["register_exception_handlers", "status_for_error"]
