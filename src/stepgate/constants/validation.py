"""Stable validation error codes and allowed-key sets for config validation."""

from __future__ import annotations

from stepgate.constants.patterns import CATEGORY_PRIORITY

CFG001: str = "CFG001"  # config file not found
CFG002: str = "CFG002"  # invalid YAML parse
CFG003: str = "CFG003"  # top-level value is not a mapping
CFG004: str = "CFG004"  # unknown key
CFG005: str = "CFG005"  # invalid value type
CFG006: str = "CFG006"  # invalid predicate
CFG007: str = "CFG007"  # unknown change type in routing
CFG008: str = "CFG008"  # invalid glob pattern

ALLOWED_CONFIG_KEYS: frozenset[str] = frozenset(
    {
        "diff_base",
        "cache_dir",
        "source_extensions",
        "change_patterns",
        "steps",
        "routing",
    }
)
ALLOWED_PATTERN_CATEGORIES: frozenset[str] = frozenset(CATEGORY_PRIORITY)
