"""Cache-related exceptions."""

from __future__ import annotations

from stepgate.exceptions.base import StepgateError


class CacheUnavailableError(StepgateError, OSError):
    """Raised inside the cache store when its directory cannot be used.

    Never escapes the store: callers only ever observe cache misses.
    """
