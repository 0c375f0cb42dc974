"""Tests for change-set classification flags."""

from __future__ import annotations

import pytest

from stepgate.changes import CategoryPatterns, classify_change_set, classify_paths
from stepgate.model import ChangeSet


@pytest.fixture
def categories() -> CategoryPatterns:
    return CategoryPatterns.default()


@pytest.mark.parametrize(
    "paths",
    [
        ["README.md"],
        ["docs/guide.md", "CHANGELOG.md"],
        ["docs/images/diagram.png", "docs/index.md"],
    ],
    ids=["readme", "several-markdown", "docs-tree"],
)
def test_docs_only_change_sets(categories: CategoryPatterns, paths: list[str]) -> None:
    flags = classify_change_set(ChangeSet(paths=tuple(paths)), categories)

    assert flags.only_docs_changed is True
    assert flags.no_code_changes is True
    assert flags.only_tests_changed is False


def test_code_and_tests(categories: CategoryPatterns) -> None:
    flags = classify_change_set(ChangeSet(paths=("src/app.js", "__tests__/app.test.js")), categories)

    assert flags.no_code_changes is False
    assert flags.code_changed is True
    assert flags.tests_changed is True
    assert flags.no_js_changes is False
    assert flags.only_docs_changed is False
    assert flags.only_tests_changed is False


def test_tests_only(categories: CategoryPatterns) -> None:
    flags = classify_change_set(ChangeSet(paths=("__tests__/a.test.js", "tests/test_b.py")), categories)

    assert flags.only_tests_changed is True
    assert flags.no_code_changes is True
    assert flags.no_js_changes is True


def test_empty_change_set_suppresses_vacuous_only_flags(categories: CategoryPatterns) -> None:
    flags = classify_change_set(ChangeSet(), categories)

    assert flags.no_code_changes is True
    assert flags.only_docs_changed is False
    assert flags.only_tests_changed is False
    assert flags.no_new_files is True


def test_unmatched_file_breaks_docs_only(categories: CategoryPatterns) -> None:
    flags = classify_change_set(ChangeSet(paths=("README.md", "Makefile")), categories)

    assert flags.only_docs_changed is False
    assert flags.docs_changed is True


def test_css_change_is_code_but_not_source_language(categories: CategoryPatterns) -> None:
    flags = classify_change_set(ChangeSet(paths=("src/styles/main.css",)), categories)

    assert flags.no_code_changes is False
    assert flags.no_js_changes is True


def test_source_extensions_are_configurable(categories: CategoryPatterns) -> None:
    flags = classify_change_set(
        ChangeSet(paths=("src/styles/main.css",)),
        categories,
        source_extensions=(".css",),
    )

    assert flags.no_js_changes is False


def test_new_files_clear_no_new_files(categories: CategoryPatterns) -> None:
    change_set = ChangeSet(paths=("src/app.js", "src/new.js"), added=frozenset({"src/new.js"}))

    flags = classify_change_set(change_set, categories)

    assert flags.no_new_files is False


def test_flags_behave_as_mapping(categories: CategoryPatterns) -> None:
    flags = classify_change_set(ChangeSet(paths=("README.md",)), categories)

    assert flags["only_docs_changed"] is True
    assert flags.get("not_a_flag") is None
    assert "no_new_files" in flags
    assert set(flags.as_dict()) == set(flags)


def test_classify_paths_keeps_order(categories: CategoryPatterns) -> None:
    result = classify_paths(["README.md", "src/app.js", "package.json"], categories)

    assert list(result.items()) == [("README.md", "docs"), ("src/app.js", "code"), ("package.json", "config")]


def test_change_set_deduplicates_paths() -> None:
    change_set = ChangeSet(paths=("a.md", "b.md", "a.md"), added=frozenset({"a.md", "ghost.md"}))

    assert change_set.paths == ("a.md", "b.md")
    assert change_set.added == frozenset({"a.md"})
