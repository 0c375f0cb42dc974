"""Predicate kinds and reason codes for step conditions."""

from __future__ import annotations

PREDICATE_FLAG: str = "flag"
PREDICATE_PATTERN: str = "pattern"
PREDICATE_CACHE_AGE: str = "cache_age"
PREDICATE_CHANGE_TYPE: str = "change_type"

PREDICATE_KINDS: frozenset[str] = frozenset(
    {PREDICATE_FLAG, PREDICATE_PATTERN, PREDICATE_CACHE_AGE, PREDICATE_CHANGE_TYPE}
)
PREDICATE_SEPARATOR: str = ":"

REASON_NO_RULE: str = "no_rule"
REASON_DEFAULT_RUN: str = "default_run"
REASON_FAIL_OPEN: str = "fail_open"
REASON_NOT_ROUTED: str = "not_routed"

DURATION_UNITS: dict[str, int] = {
    "s": 1,
    "m": 60,
    "h": 60 * 60,
    "d": 24 * 60 * 60,
}
DURATION_PATTERN: str = r"^\s*(?P<amount>\d+)\s*(?P<unit>[smhd]?)\s*$"
