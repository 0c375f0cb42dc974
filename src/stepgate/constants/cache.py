"""Constants used by the step cache store."""

from __future__ import annotations

CACHE_VERSION: int = 1
DEFAULT_CACHE_DIRNAME: str = ".stepgate-cache"
CACHE_FILE_SUFFIX: str = ".json"
CACHE_TEMP_PREFIX: str = ".cache-"
CACHE_TEMP_SUFFIX: str = ".tmp"

# Entries older than this are treated as missing, even when the file exists.
CACHE_VALIDITY_SECONDS: int = 24 * 60 * 60
# Entries stamped further than this in the future are treated as missing.
CACHE_CLOCK_SKEW_SECONDS: int = 60

# Keys are mapped onto file names; anything outside this set becomes "_".
CACHE_KEY_SAFE_CHARS: str = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789._-"
CACHE_KEY_MAX_LENGTH: int = 128

CHANGE_TYPE_CACHE_KEY: str = "change_type"
