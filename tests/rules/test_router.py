"""Tests for change-type routing."""

from __future__ import annotations

import pytest

from stepgate.constants.change_types import CHANGE_TYPES, DEFAULT_ROUTING_TABLE
from stepgate.rules import steps_for
from stepgate.rules.router import full_step_list


def test_every_change_type_is_routed() -> None:
    for change_type in CHANGE_TYPES:
        assert steps_for(change_type)


def test_docs_route() -> None:
    assert steps_for("docs") == ("syntax_validation", "doc_validation")


def test_chore_route_is_subset_of_full_list() -> None:
    chore = steps_for("chore")

    assert chore == ("security_audit", "syntax_validation")
    assert set(chore) < set(steps_for("feat"))


@pytest.mark.parametrize("change_type", ["unknown", "revert", "", "FEAT"])
def test_unknown_change_type_gets_full_list(change_type: str) -> None:
    assert steps_for(change_type) == DEFAULT_ROUTING_TABLE["feat"]


def test_custom_table_lookup() -> None:
    table = {"feat": ("a", "b"), "docs": ("b",)}

    assert steps_for("docs", table) == ("b",)
    assert steps_for("perf", table) == ("a", "b")


def test_full_step_list_includes_every_routed_step() -> None:
    table = {"feat": ("a", "b"), "ci": ("c",)}

    assert full_step_list(table) == ("a", "b", "c")
