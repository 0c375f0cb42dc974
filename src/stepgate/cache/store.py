"""Cache stores with logical expiry.

Caching is an optimization only: every failure inside a store degrades to a
cache miss and is never surfaced to callers.

File access is not bounded by a timeout; the cache directory is expected to
live on a local filesystem.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from pathlib import Path
from typing import NamedTuple, Protocol, TypeAlias

from stepgate.constants.cache import (
    CACHE_CLOCK_SKEW_SECONDS,
    CACHE_FILE_SUFFIX,
    CACHE_KEY_MAX_LENGTH,
    CACHE_KEY_SAFE_CHARS,
    CACHE_TEMP_PREFIX,
    CACHE_TEMP_SUFFIX,
    CACHE_VALIDITY_SECONDS,
    CACHE_VERSION,
)
from stepgate.exceptions import CacheUnavailableError
from stepgate.io import load_json_file, write_json_atomic
from stepgate.types import CacheRecord, JsonValue

logger = logging.getLogger(__name__)

Clock: TypeAlias = Callable[[], float]


class CacheLookup(NamedTuple):
    """Result of a cache read; ``age`` is in seconds and None on a miss."""

    value: JsonValue
    found: bool
    age: float | None

    @classmethod
    def miss(cls) -> CacheLookup:
        return cls(value=None, found=False, age=None)


class CacheStore(Protocol):
    """Read/write contract shared by every cache implementation."""

    def get(self, key: str) -> CacheLookup: ...

    def put(self, key: str, value: JsonValue) -> None: ...

    def invalidate(self, key: str) -> None: ...


def cache_file_name(key: str) -> str:
    """Map a cache key onto a safe, stable file name."""
    safe = "".join(char if char in CACHE_KEY_SAFE_CHARS else "_" for char in key.strip())
    safe = safe.lstrip(".")[:CACHE_KEY_MAX_LENGTH] or "_"
    return f"{safe}{CACHE_FILE_SUFFIX}"


def _fresh(written_at: float, now: float, validity_seconds: float) -> tuple[bool, float]:
    age = now - written_at
    if not math.isfinite(age) or age < -CACHE_CLOCK_SKEW_SECONDS:
        return False, age
    age = max(0.0, age)
    return age <= validity_seconds, age


class InMemoryCacheStore:
    """Process-local cache with the same expiry rules as :class:`FileCacheStore`."""

    def __init__(self, *, validity_seconds: float = CACHE_VALIDITY_SECONDS, clock: Clock = time.time) -> None:
        self._validity_seconds = validity_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, JsonValue]] = {}

    def get(self, key: str) -> CacheLookup:
        entry = self._entries.get(key)
        if entry is None:
            return CacheLookup.miss()
        written_at, value = entry
        fresh, age = _fresh(written_at, self._clock(), self._validity_seconds)
        if not fresh:
            return CacheLookup.miss()
        return CacheLookup(value=value, found=True, age=age)

    def put(self, key: str, value: JsonValue) -> None:
        self._entries[key] = (self._clock(), value)

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)


class FileCacheStore:
    """One JSON file per key under *directory*, replaced atomically on write.

    An expired entry stays on disk and is simply reported as missing; the next
    ``put`` overwrites it. Once the directory proves unusable the store stops
    touching the filesystem and every ``get`` misses.
    """

    def __init__(
        self,
        directory: Path,
        *,
        validity_seconds: float = CACHE_VALIDITY_SECONDS,
        clock: Clock = time.time,
    ) -> None:
        self._directory = directory
        self._validity_seconds = validity_seconds
        self._clock = clock
        self._disabled = False

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def disabled(self) -> bool:
        return self._disabled

    def path_for(self, key: str) -> Path:
        return self._directory / cache_file_name(key)

    def get(self, key: str) -> CacheLookup:
        if self._disabled:
            return CacheLookup.miss()
        try:
            record = self._read(key)
        except CacheUnavailableError as exc:
            logger.debug("Cache read miss for %s: %s", key, exc)
            return CacheLookup.miss()
        if record is None:
            return CacheLookup.miss()

        fresh, age = _fresh(record["written_at"], self._clock(), self._validity_seconds)
        if not fresh:
            logger.debug("Cache entry %s expired (age %.0fs)", key, age)
            return CacheLookup.miss()
        return CacheLookup(value=record["value"], found=True, age=age)

    def put(self, key: str, value: JsonValue) -> None:
        if self._disabled:
            return
        record: CacheRecord = {
            "version": CACHE_VERSION,
            "key": key,
            "written_at": self._clock(),
            "value": value,
        }
        try:
            self._write(key, record)
        except CacheUnavailableError as exc:
            self._disable(exc)

    def invalidate(self, key: str) -> None:
        if self._disabled:
            return
        try:
            self.path_for(key).unlink(missing_ok=True)
        except OSError as exc:
            self._disable(CacheUnavailableError(f"Cannot remove cache entry {key}: {exc}"))

    def _read(self, key: str) -> CacheRecord | None:
        path = self.path_for(key)
        try:
            if not path.is_file():
                return None
            payload = load_json_file(path)
        except (OSError, ValueError) as exc:
            raise CacheUnavailableError(f"Unreadable cache entry {path}: {exc}") from exc
        return _normalize_record(payload, key=key)

    def _write(self, key: str, record: CacheRecord) -> None:
        try:
            write_json_atomic(
                path=self.path_for(key),
                payload=record,
                temp_prefix=CACHE_TEMP_PREFIX,
                temp_suffix=CACHE_TEMP_SUFFIX,
            )
        except (OSError, TypeError, ValueError) as exc:
            raise CacheUnavailableError(f"Cannot write cache entry {key} under {self._directory}: {exc}") from exc

    def _disable(self, exc: CacheUnavailableError) -> None:
        logger.warning("Cache disabled for this run: %s", exc)
        self._disabled = True


def _normalize_record(payload: object, *, key: str) -> CacheRecord | None:
    """Return a valid cache record, or None for foreign or corrupted payloads."""
    if not isinstance(payload, dict):
        return None
    if payload.get("version") != CACHE_VERSION or payload.get("key") != key:
        return None
    written_at = payload.get("written_at")
    if isinstance(written_at, bool) or not isinstance(written_at, (int, float)):
        return None
    if not math.isfinite(written_at):
        return None
    return {
        "version": CACHE_VERSION,
        "key": key,
        "written_at": float(written_at),
        "value": payload.get("value"),
    }
