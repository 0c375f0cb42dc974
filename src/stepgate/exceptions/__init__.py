"""Shared exception hierarchy for stepgate."""

from __future__ import annotations

from .base import StepgateError
from .cache import CacheUnavailableError
from .config import ConfigParseError
from .vcs import NoChangesError, NoRepositoryError

__all__ = [
    "CacheUnavailableError",
    "ConfigParseError",
    "NoChangesError",
    "NoRepositoryError",
    "StepgateError",
]
