"""Classify changed paths into categories and derive classification flags."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from stepgate.changes.patterns import CategoryPatterns, normalize_path
from stepgate.constants.patterns import (
    CATEGORY_CODE,
    CATEGORY_CONFIG,
    CATEGORY_DOCS,
    CATEGORY_TEST,
    DEFAULT_SOURCE_EXTENSIONS,
)
from stepgate.model import ChangeSet, ClassificationFlags
from stepgate.types import Category

logger = logging.getLogger(__name__)


def classify_path(path: str, categories: CategoryPatterns) -> Category:
    """Return the category of a single path (code > test > config > docs > unmatched)."""
    return categories.category_of(path)


def classify_paths(paths: Iterable[str], categories: CategoryPatterns) -> dict[str, Category]:
    """Classify each path, preserving input order."""
    return {path: classify_path(path, categories) for path in paths}


def classify_change_set(
    change_set: ChangeSet,
    categories: CategoryPatterns,
    *,
    source_extensions: tuple[str, ...] = DEFAULT_SOURCE_EXTENSIONS,
) -> ClassificationFlags:
    """Derive classification flags from a change set.

    ``only_*`` flags are False for an empty change set so that nothing is
    skipped on the strength of an empty diff.
    """
    by_path = classify_paths(change_set.paths, categories)
    assigned = set(by_path.values())
    has_paths = bool(by_path)

    code_paths = [path for path, category in by_path.items() if category == CATEGORY_CODE]
    extensions = tuple(ext.lower() for ext in source_extensions)
    source_changed = any(normalize_path(path).lower().endswith(extensions) for path in code_paths)

    flags = ClassificationFlags(
        no_code_changes=not code_paths,
        only_docs_changed=has_paths and assigned == {CATEGORY_DOCS},
        no_js_changes=not source_changed,
        only_tests_changed=has_paths and assigned == {CATEGORY_TEST},
        no_new_files=not change_set.added,
        code_changed=bool(code_paths),
        tests_changed=CATEGORY_TEST in assigned,
        docs_changed=CATEGORY_DOCS in assigned,
        config_changed=CATEGORY_CONFIG in assigned,
    )
    logger.debug("Classified %d path(s): %s", len(by_path), flags.as_dict())
    return flags
