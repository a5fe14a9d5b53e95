"""Codec and set operations for a user's favorite openings.

Favorites live in a single text column holding a JSON array of opening
identifiers. Decoding fails open: a missing or corrupted value reads as an
empty list so that profile reads are never blocked by it. Encoding failures
are raised as ``SerializationError`` before anything is written.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from .errors import SerializationError

logger = logging.getLogger(__name__)

_FAVORITES_ADAPTER: TypeAdapter[list[str]] = TypeAdapter(list[str])


def _unique(values: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(values))


def decode_favorites(raw: str | None) -> list[str]:
    """Return the stored identifiers in insertion order, without duplicates."""
    if raw is None or not raw.strip():
        return []
    try:
        values = _FAVORITES_ADAPTER.validate_json(raw, strict=True)
    except ValidationError:
        logger.warning(
            "Ignoring malformed favorites value",
            extra={"favorites_raw": raw[:200]},
        )
        return []
    return _unique(values)


def encode_favorites(values: Sequence[str]) -> str:
    try:
        payload = _FAVORITES_ADAPTER.dump_json(list(values), warnings="error")
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise SerializationError("Could not encode favorites") from exc
    return payload.decode("utf-8")


def add_favorite(raw: str | None, opening_id: str) -> tuple[str, list[str]]:
    """Append ``opening_id`` unless already present; adding twice is a no-op."""
    values = decode_favorites(raw)
    if opening_id not in values:
        values.append(opening_id)
    return encode_favorites(values), values


def remove_favorite(raw: str | None, opening_id: str) -> tuple[str, list[str]]:
    values = decode_favorites(raw)
    if opening_id in values:
        values.remove(opening_id)
    return encode_favorites(values), values


__all__ = [
    "decode_favorites",
    "encode_favorites",
    "add_favorite",
    "remove_favorite",
]
