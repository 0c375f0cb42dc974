"""Collect-all validation of ``stepgate.yaml``."""

from __future__ import annotations

import difflib
from pathlib import Path
from typing import Any

import yaml

from stepgate.changes.patterns import GlobPattern
from stepgate.constants.change_types import CHANGE_TYPES
from stepgate.constants.config import CONFIG_FILENAME, RULE_ALLOWED_KEYS
from stepgate.constants.validation import (
    ALLOWED_CONFIG_KEYS,
    ALLOWED_PATTERN_CATEGORIES,
    CFG001,
    CFG002,
    CFG003,
    CFG004,
    CFG005,
    CFG006,
    CFG007,
    CFG008,
)
from stepgate.exceptions.validation import ValidationError
from stepgate.rules.predicates import parse_predicate


def validate_config_file(root: Path, config_path: Path | None = None) -> list[ValidationError]:
    """Validate a stepgate.yaml file and return every problem found.

    Used by ``stepgate validate-config``. It never raises; each problem is
    returned as a :class:`ValidationError`.
    """
    root = root.resolve()
    path = config_path.resolve() if config_path else (root / CONFIG_FILENAME)
    path_str = str(path)

    if not path.is_file():
        return [ValidationError(code=CFG001, path=path_str, field="", message=f"config file not found: {path}")]

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        return [ValidationError(code=CFG002, path=path_str, field="", message=f"invalid YAML: {exc}")]
    except (OSError, UnicodeDecodeError) as exc:
        return [ValidationError(code=CFG002, path=path_str, field="", message=f"cannot read config file: {exc}")]

    if raw is None:
        return []
    if not isinstance(raw, dict):
        return [
            ValidationError(
                code=CFG003,
                path=path_str,
                field="",
                message=f"top-level value must be a mapping, got {type(raw).__name__}",
            )
        ]

    errors: list[ValidationError] = []
    for key in sorted(str(k) for k in raw):
        if key not in ALLOWED_CONFIG_KEYS:
            errors.append(_unknown_key(path_str, key, key, ALLOWED_CONFIG_KEYS))

    for key in ("diff_base", "cache_dir"):
        if key in raw and (not isinstance(raw[key], str) or not raw[key].strip()):
            errors.append(_type_error(path_str, key, "a non-empty string", raw[key]))

    if "source_extensions" in raw:
        errors.extend(_check_string_list(path_str, "source_extensions", raw["source_extensions"]))

    errors.extend(_check_patterns(path_str, raw.get("change_patterns")))
    errors.extend(_check_steps(path_str, raw.get("steps")))
    errors.extend(_check_routing(path_str, raw.get("routing")))
    return errors


def _suggest_key(key: str, allowed: frozenset[str]) -> str:
    """Return a 'did you mean' hint for an unknown key, or an empty string."""
    matches = difflib.get_close_matches(key, sorted(allowed), n=1, cutoff=0.6)
    return f"did you mean '{matches[0]}'?" if matches else ""


def _unknown_key(path: str, field: str, key: str, allowed: frozenset[str]) -> ValidationError:
    return ValidationError(
        code=CFG004,
        path=path,
        field=field,
        message=f"unknown key '{key}'",
        hint=_suggest_key(key, allowed),
    )


def _type_error(path: str, field: str, expected: str, value: Any) -> ValidationError:
    return ValidationError(
        code=CFG005,
        path=path,
        field=field,
        message=f"must be {expected}, got {type(value).__name__}",
    )


def _check_string_list(path: str, field: str, value: Any) -> list[ValidationError]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        return [_type_error(path, field, "a list of strings", value)]
    return []


def _check_mapping(path: str, field: str, value: Any) -> list[ValidationError]:
    if value is None or isinstance(value, dict):
        return []
    return [_type_error(path, field, "a mapping", value)]


def _check_patterns(path: str, value: Any) -> list[ValidationError]:
    errors = _check_mapping(path, "change_patterns", value)
    if errors or not value:
        return errors
    for category, globs in value.items():
        field = f"change_patterns.{category}"
        if category not in ALLOWED_PATTERN_CATEGORIES:
            errors.append(_unknown_key(path, field, str(category), ALLOWED_PATTERN_CATEGORIES))
            continue
        list_errors = _check_string_list(path, field, globs)
        errors.extend(list_errors)
        if list_errors or not globs:
            continue
        for glob in globs:
            try:
                GlobPattern(glob)
            except ValueError as exc:
                errors.append(ValidationError(code=CFG008, path=path, field=field, message=str(exc)))
    return errors


def _check_steps(path: str, value: Any) -> list[ValidationError]:
    errors = _check_mapping(path, "steps", value)
    if errors or not value:
        return errors
    for step, body in value.items():
        step_field = f"steps.{step}"
        if body is None:
            continue
        if not isinstance(body, dict):
            errors.append(_type_error(path, step_field, "a mapping", body))
            continue
        for key in sorted(str(k) for k in body):
            if key not in RULE_ALLOWED_KEYS:
                errors.append(_unknown_key(path, f"{step_field}.{key}", key, RULE_ALLOWED_KEYS))
        for key in sorted(RULE_ALLOWED_KEYS):
            field = f"{step_field}.{key}"
            predicates = body.get(key)
            list_errors = _check_string_list(path, field, predicates)
            errors.extend(list_errors)
            if list_errors or not predicates:
                continue
            for raw in predicates:
                try:
                    parse_predicate(raw)
                except ValueError as exc:
                    errors.append(ValidationError(code=CFG006, path=path, field=field, message=str(exc)))
    return errors


def _check_routing(path: str, value: Any) -> list[ValidationError]:
    errors = _check_mapping(path, "routing", value)
    if errors or not value:
        return errors
    for change_type, steps in value.items():
        field = f"routing.{change_type}"
        if change_type not in CHANGE_TYPES:
            errors.append(
                ValidationError(
                    code=CFG007,
                    path=path,
                    field=field,
                    message=f"unknown change type '{change_type}'",
                    hint=_suggest_key(str(change_type), frozenset(CHANGE_TYPES)),
                )
            )
            continue
        errors.extend(_check_string_list(path, field, steps))
    return errors
