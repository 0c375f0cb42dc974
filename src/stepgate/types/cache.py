"""Typed cache payload structures."""

from __future__ import annotations

from typing import TypedDict

from stepgate.types.common import JsonValue


class CacheRecord(TypedDict):
    """A single cache entry as persisted to disk."""

    version: int
    key: str
    written_at: float
    value: JsonValue
