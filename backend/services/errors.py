"""Service-layer error taxonomy.

Services raise these and never HTTP exceptions; ``api.errors`` maps each
class to a response status.
"""

from __future__ import annotations


class ChessOpeningsError(Exception):
    """Base class for service failures surfaced to callers."""


class NotFoundError(ChessOpeningsError):
    """A user or owner reference could not be resolved."""


class ConflictError(ChessOpeningsError):
    """A uniqueness rule was violated, e.g. a taken username."""


class SerializationError(ChessOpeningsError):
    """A favorites value could not be encoded; nothing was persisted."""


class StorageError(ChessOpeningsError):
    """The database rejected or failed a read or write."""


__all__ = [
    "ChessOpeningsError",
    "NotFoundError",
    "ConflictError",
    "SerializationError",
    "StorageError",
]
