"""Shared type aliases for stepgate."""

from .cache import CacheRecord
from .common import Category, DetectionSource, JsonObject, JsonScalar, JsonValue

__all__ = [
    "CacheRecord",
    "Category",
    "DetectionSource",
    "JsonObject",
    "JsonScalar",
    "JsonValue",
]
