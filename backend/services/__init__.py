"""Business logic services."""

from .errors import (
    ChessOpeningsError,
    ConflictError,
    NotFoundError,
    SerializationError,
    StorageError,
)

__all__ = [
    "ChessOpeningsError",
    "ConflictError",
    "NotFoundError",
    "SerializationError",
    "StorageError",
]
