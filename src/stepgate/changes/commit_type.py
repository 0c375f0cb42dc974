"""Commit-type detection from a commit subject, with file-based fallback."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping

from stepgate.constants.change_types import (
    CONVENTIONAL_PREFIX_PATTERN,
    DEFAULT_CHANGE_TYPE,
    DEFAULT_TEST_STRATEGY,
    DETECTION_SOURCE_CONVENTIONAL,
    DETECTION_SOURCE_DEFAULT,
    DETECTION_SOURCE_FILES,
    DETECTION_SOURCE_KEYWORD,
    KEYWORD_PATTERNS,
    TEST_STRATEGIES,
)
from stepgate.constants.patterns import FLAG_ONLY_DOCS_CHANGED, FLAG_ONLY_TESTS_CHANGED
from stepgate.model import ChangeTypeDetection

logger = logging.getLogger(__name__)

_CONVENTIONAL_RE = re.compile(CONVENTIONAL_PREFIX_PATTERN)
_KEYWORD_RULES: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(pattern), change_type) for pattern, change_type in KEYWORD_PATTERNS
)
_FILE_RULES: tuple[tuple[str, str], ...] = (
    (FLAG_ONLY_DOCS_CHANGED, "docs"),
    (FLAG_ONLY_TESTS_CHANGED, "test"),
)


def parse_conventional_subject(subject: str) -> tuple[str, str | None] | None:
    """Return ``(type, scope)`` for a conventional-commit subject, else None.

    The type label must match exactly and is case-sensitive.
    """
    match = _CONVENTIONAL_RE.match(subject.strip())
    if match is None:
        return None
    scope = (match.group("scope") or "").strip() or None
    return match.group("type"), scope


def detect_from_keywords(subject: str) -> str | None:
    """Return the change type of the first keyword rule matching *subject*."""
    lowered = subject.strip().lower()
    if not lowered:
        return None
    for regex, change_type in _KEYWORD_RULES:
        if regex.search(lowered):
            return change_type
    return None


def detect_from_flags(flags: Mapping[str, bool]) -> str | None:
    """Infer a change type from docs-only or tests-only change sets."""
    for flag_name, change_type in _FILE_RULES:
        if flags.get(flag_name, False):
            return change_type
    return None


def detect_change_type(subject: str, flags: Mapping[str, bool]) -> ChangeTypeDetection:
    """Detect the change type: conventional prefix, keywords, files, then default.

    Never raises; a subject carrying no signal resolves to the default type.
    """
    conventional = parse_conventional_subject(subject)
    if conventional is not None:
        change_type, scope = conventional
        logger.debug("Conventional commit type %s (scope=%s)", change_type, scope)
        return ChangeTypeDetection(change_type=change_type, source=DETECTION_SOURCE_CONVENTIONAL, scope=scope)

    keyword_type = detect_from_keywords(subject)
    if keyword_type is not None:
        logger.debug("Keyword heuristic matched %s", keyword_type)
        return ChangeTypeDetection(change_type=keyword_type, source=DETECTION_SOURCE_KEYWORD)

    file_type = detect_from_flags(flags)
    if file_type is not None:
        logger.debug("Inferred %s from changed files", file_type)
        return ChangeTypeDetection(change_type=file_type, source=DETECTION_SOURCE_FILES)

    logger.debug("No change-type signal in %r; using %s", subject, DEFAULT_CHANGE_TYPE)
    return ChangeTypeDetection(change_type=DEFAULT_CHANGE_TYPE, source=DETECTION_SOURCE_DEFAULT)


def strategy_for_change_type(change_type: str) -> str:
    """Return the test strategy label used by the driver for *change_type*."""
    return TEST_STRATEGIES.get(change_type, DEFAULT_TEST_STRATEGY)
