"""File categories, default glob patterns, and classification flag names."""

from __future__ import annotations

CATEGORY_CODE: str = "code"
CATEGORY_TEST: str = "test"
CATEGORY_CONFIG: str = "config"
CATEGORY_DOCS: str = "docs"
CATEGORY_UNMATCHED: str = "unmatched"

# A path belongs to the first category in this order whose patterns match it.
CATEGORY_PRIORITY: tuple[str, ...] = (CATEGORY_CODE, CATEGORY_TEST, CATEGORY_CONFIG, CATEGORY_DOCS)

DEFAULT_CATEGORY_PATTERNS: dict[str, tuple[str, ...]] = {
    CATEGORY_CODE: ("src/**/*.js", "src/**/*.css", "src/**/*.html"),
    CATEGORY_TEST: ("__tests__/**/*.js", "tests/**/*.py"),
    CATEGORY_CONFIG: ("package.json", "package-lock.json", "*.yml", "*.yaml"),
    CATEGORY_DOCS: ("*.md", "docs/**"),
}

DEFAULT_SOURCE_EXTENSIONS: tuple[str, ...] = (".js",)

FLAG_NO_CODE_CHANGES: str = "no_code_changes"
FLAG_ONLY_DOCS_CHANGED: str = "only_docs_changed"
FLAG_NO_JS_CHANGES: str = "no_js_changes"
FLAG_ONLY_TESTS_CHANGED: str = "only_tests_changed"
FLAG_NO_NEW_FILES: str = "no_new_files"
FLAG_CODE_CHANGED: str = "code_changed"
FLAG_TESTS_CHANGED: str = "tests_changed"
FLAG_DOCS_CHANGED: str = "docs_changed"
FLAG_CONFIG_CHANGED: str = "config_changed"

FLAG_NAMES: tuple[str, ...] = (
    FLAG_NO_CODE_CHANGES,
    FLAG_ONLY_DOCS_CHANGED,
    FLAG_NO_JS_CHANGES,
    FLAG_ONLY_TESTS_CHANGED,
    FLAG_NO_NEW_FILES,
    FLAG_CODE_CHANGED,
    FLAG_TESTS_CHANGED,
    FLAG_DOCS_CHANGED,
    FLAG_CONFIG_CHANGED,
)
