"""Tests for stepgate.yaml loading and validation."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from stepgate.config import StepgateConfig, load_config, validate_config_file
from stepgate.constants.change_types import DEFAULT_ROUTING_TABLE
from stepgate.exceptions import ConfigParseError


def _write_config(root: Path, content: str) -> Path:
    path = root / "stepgate.yaml"
    path.write_text(content, encoding="utf-8")
    return path


def test_load_reference_config(workflow_config: StepgateConfig, workflow_config_path: Path) -> None:
    assert workflow_config.path == workflow_config_path.resolve()
    assert workflow_config.diff_base == "HEAD~1"
    assert workflow_config.source_extensions == (".js",)
    assert set(workflow_config.rules) == {
        "syntax_validation",
        "directory_structure",
        "test_execution",
        "coverage_report",
        "quality_checks",
        "doc_validation",
    }
    coverage = workflow_config.rules["coverage_report"]
    assert [predicate.label for predicate in coverage.skip_if] == [
        "flag:only_docs_changed",
        "flag:only_tests_changed",
    ]
    assert [predicate.label for predicate in coverage.run_if] == ["pattern:src/**"]
    assert workflow_config.cached_steps == ("directory_structure",)


def test_routing_overlays_default_table(workflow_config: StepgateConfig) -> None:
    assert workflow_config.routing["chore"] == ("security_audit", "syntax_validation")
    assert workflow_config.routing["feat"] == DEFAULT_ROUTING_TABLE["feat"]


def test_config_is_discovered_in_root(tmp_path: Path) -> None:
    _write_config(tmp_path, "steps:\n  lint:\n    skip_if: ['flag:only_docs_changed']\n")

    config = load_config(tmp_path)

    assert config.path == (tmp_path / "stepgate.yaml").resolve()
    assert list(config.rules) == ["lint"]
    assert config.categories.as_globs()["docs"] == ["*.md", "docs/**"]


def test_empty_config_uses_defaults(tmp_path: Path) -> None:
    _write_config(tmp_path, "")

    config = load_config(tmp_path)

    assert config.rules == {}
    assert config.cache_dir == ".stepgate-cache"
    assert config.cache_path(tmp_path) == tmp_path / ".stepgate-cache"


def test_extensions_are_normalized(tmp_path: Path) -> None:
    _write_config(tmp_path, "source_extensions: [js, .TS, '.js']\n")

    assert load_config(tmp_path).source_extensions == (".js", ".ts")


def test_missing_config_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigParseError, match="not found"):
        load_config(tmp_path)


def test_invalid_yaml_raises(tmp_path: Path) -> None:
    _write_config(tmp_path, "steps: [unclosed\n")

    with pytest.raises(ConfigParseError, match="Invalid YAML"):
        load_config(tmp_path)


def test_non_mapping_config_raises(tmp_path: Path) -> None:
    _write_config(tmp_path, "- just\n- a list\n")

    with pytest.raises(ConfigParseError, match="must be a YAML mapping"):
        load_config(tmp_path)


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("steps:\n  lint:\n    skip_if: ['flag:no_python_changes']\n", "unknown flag"),
        ("steps:\n  lint:\n    skip_if: ['when:docs']\n", "unknown predicate"),
        ("steps:\n  lint:\n    unless: ['flag:only_docs_changed']\n", "unknown keys"),
        ("steps:\n  lint:\n    skip_if: flag:only_docs_changed\n", "list of strings"),
        ("change_patterns:\n  assets: ['*.png']\n", "unknown categories"),
        ("change_patterns:\n  code: ['src/[z-a].js']\n", "change_patterns"),
        ("routing:\n  release: [deploy]\n", "unknown change type"),
        ("diff_base: ''\n", "diff_base must be a non-empty string"),
    ],
)
def test_invalid_config_raises(tmp_path: Path, content: str, message: str) -> None:
    _write_config(tmp_path, content)

    with pytest.raises(ConfigParseError, match=message):
        load_config(tmp_path)


def test_config_parse_error_is_value_error(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        load_config(tmp_path, tmp_path / "missing.yaml")


def test_validate_reference_config_is_clean(tmp_path: Path, workflow_config_path: Path) -> None:
    assert validate_config_file(tmp_path, workflow_config_path) == []


def test_validate_missing_file(tmp_path: Path) -> None:
    errors = validate_config_file(tmp_path)

    assert [error.code for error in errors] == ["CFG001"]


def test_validate_invalid_yaml(tmp_path: Path) -> None:
    _write_config(tmp_path, "steps: [unclosed\n")

    assert [error.code for error in validate_config_file(tmp_path)] == ["CFG002"]


def test_validate_undecodable_file(tmp_path: Path) -> None:
    (tmp_path / "stepgate.yaml").write_bytes(b"steps:\n  a\xff: {}\n")

    errors = validate_config_file(tmp_path)

    assert [error.code for error in errors] == ["CFG002"]
    assert "cannot read" in errors[0].message


def test_load_undecodable_file_raises(tmp_path: Path) -> None:
    (tmp_path / "stepgate.yaml").write_bytes(b"steps:\n  a\xff: {}\n")

    with pytest.raises(ConfigParseError, match="Cannot read"):
        load_config(tmp_path)


def test_unknown_top_level_key_is_logged(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    _write_config(tmp_path, "step:\n  lint:\n    skip_if: ['flag:only_docs_changed']\n")

    with caplog.at_level(logging.WARNING, logger="stepgate.config.loader"):
        config = load_config(tmp_path)

    assert config.rules == {}
    assert "unknown config key(s)" in caplog.text
    assert "step" in caplog.text


def test_validate_non_mapping(tmp_path: Path) -> None:
    _write_config(tmp_path, "42\n")

    errors = validate_config_file(tmp_path)

    assert [error.code for error in errors] == ["CFG003"]
    assert "got int" in errors[0].message


def test_validate_collects_every_problem(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        "\n".join(
            [
                "diff_bsae: main",
                "cache_dir: 3",
                "change_patterns:",
                "  docs: ['docs/[z-a].md']",
                "steps:",
                "  lint:",
                "    skip_if: ['flag:only_doc_changed']",
                "    run_fi: ['flag:code_changed']",
                "routing:",
                "  fxi: [lint]",
                "",
            ]
        ),
    )

    errors = validate_config_file(tmp_path)
    by_field = {error.field: error for error in errors}

    assert sorted(error.code for error in errors) == ["CFG004", "CFG004", "CFG005", "CFG006", "CFG007", "CFG008"]
    assert by_field["diff_bsae"].hint == "did you mean 'diff_base'?"
    assert by_field["steps.lint.run_fi"].hint == "did you mean 'run_if'?"
    assert by_field["routing.fxi"].hint == "did you mean 'fix'?"
    assert by_field["cache_dir"].code == "CFG005"
    assert by_field["steps.lint.skip_if"].code == "CFG006"
    assert by_field["change_patterns.docs"].code == "CFG008"


def test_validation_error_format(tmp_path: Path) -> None:
    _write_config(tmp_path, "diff_bsae: main\n")

    (error,) = validate_config_file(tmp_path)

    formatted = error.format()
    assert "CFG004" in formatted
    assert "diff_bsae" in formatted
    assert "did you mean 'diff_base'?" in formatted
