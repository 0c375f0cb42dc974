"""Parsing and evaluation of ``kind:argument`` step predicates.

Supported kinds:

* ``flag:<name>`` -- a classification flag is true;
* ``pattern:<glob>`` -- any changed path matches the glob;
* ``cache_age:<duration>`` -- the step has a cache entry younger than the
  duration and no new files were added;
* ``change_type:<label>`` -- the detected change type equals the label.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import lru_cache

from stepgate.cache import CacheStore
from stepgate.changes.patterns import GlobPattern
from stepgate.constants.change_types import CHANGE_TYPES
from stepgate.constants.patterns import FLAG_NAMES, FLAG_NO_NEW_FILES
from stepgate.constants.rules import (
    DURATION_PATTERN,
    DURATION_UNITS,
    PREDICATE_CACHE_AGE,
    PREDICATE_CHANGE_TYPE,
    PREDICATE_FLAG,
    PREDICATE_KINDS,
    PREDICATE_PATTERN,
    PREDICATE_SEPARATOR,
)
from stepgate.model import ChangeSet, Predicate

_DURATION_RE = re.compile(DURATION_PATTERN)


def parse_duration(text: str) -> int:
    """Parse ``90s``, ``30m``, ``24h``, ``7d`` or bare seconds into seconds."""
    match = _DURATION_RE.match(text)
    if match is None:
        raise ValueError(f"invalid duration {text!r} (expected e.g. 90s, 30m, 24h, 7d)")
    return int(match.group("amount")) * DURATION_UNITS[match.group("unit") or "s"]


def parse_predicate(raw: str) -> Predicate:
    """Parse and validate one predicate string.

    Raises ``ValueError`` describing the problem; the config loader turns it
    into a ``ConfigParseError``.
    """
    label = raw.strip()
    kind, separator, argument = label.partition(PREDICATE_SEPARATOR)
    kind = kind.strip()
    argument = argument.strip()
    if not separator or kind not in PREDICATE_KINDS:
        raise ValueError(f"unknown predicate {raw!r} (expected one of {', '.join(sorted(PREDICATE_KINDS))} prefixes)")
    if not argument:
        raise ValueError(f"predicate {raw!r} is missing its argument")

    if kind == PREDICATE_FLAG and argument not in FLAG_NAMES:
        raise ValueError(f"unknown flag {argument!r} in predicate {raw!r}")
    if kind == PREDICATE_PATTERN:
        _glob(argument)
    if kind == PREDICATE_CACHE_AGE:
        parse_duration(argument)
    if kind == PREDICATE_CHANGE_TYPE and argument not in CHANGE_TYPES:
        raise ValueError(f"unknown change type {argument!r} in predicate {raw!r}")

    return Predicate(kind=kind, argument=argument, label=f"{kind}{PREDICATE_SEPARATOR}{argument}")


def step_cache_key(step: str) -> str:
    """Cache key under which a step's last successful run is recorded."""
    return f"step.{step}"


@dataclass(frozen=True)
class PredicateContext:
    """Everything a predicate may read while deciding one step."""

    step: str
    flags: Mapping[str, bool]
    change_type: str
    change_set: ChangeSet
    cache: CacheStore | None = None


@lru_cache(maxsize=256)
def _glob(pattern: str) -> GlobPattern:
    return GlobPattern(pattern)


def _eval_flag(predicate: Predicate, context: PredicateContext) -> bool:
    return bool(context.flags.get(predicate.argument, False))


def _eval_pattern(predicate: Predicate, context: PredicateContext) -> bool:
    return _glob(predicate.argument).matches_any(context.change_set.paths)


def _eval_cache_age(predicate: Predicate, context: PredicateContext) -> bool:
    if context.cache is None or not context.flags.get(FLAG_NO_NEW_FILES, False):
        return False
    lookup = context.cache.get(step_cache_key(context.step))
    if not lookup.found or lookup.age is None:
        return False
    return lookup.age < parse_duration(predicate.argument)


def _eval_change_type(predicate: Predicate, context: PredicateContext) -> bool:
    return context.change_type == predicate.argument


PREDICATE_REGISTRY: dict[str, Callable[[Predicate, PredicateContext], bool]] = {
    PREDICATE_FLAG: _eval_flag,
    PREDICATE_PATTERN: _eval_pattern,
    PREDICATE_CACHE_AGE: _eval_cache_age,
    PREDICATE_CHANGE_TYPE: _eval_change_type,
}


def evaluate_predicate(predicate: Predicate, context: PredicateContext) -> bool:
    """Evaluate one predicate; unknown kinds evaluate to False."""
    handler = PREDICATE_REGISTRY.get(predicate.kind)
    if handler is None:
        return False
    return handler(predicate, context)
