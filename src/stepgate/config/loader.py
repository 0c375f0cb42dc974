"""Config loading and normalization for stepgate."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from stepgate.changes.patterns import CategoryPatterns
from stepgate.config.model import StepgateConfig
from stepgate.constants.cache import DEFAULT_CACHE_DIRNAME
from stepgate.constants.change_types import CHANGE_TYPES, DEFAULT_ROUTING_TABLE
from stepgate.constants.config import CONFIG_FILENAME, RULE_ALLOWED_KEYS
from stepgate.constants.patterns import CATEGORY_PRIORITY, DEFAULT_SOURCE_EXTENSIONS
from stepgate.constants.validation import ALLOWED_CONFIG_KEYS
from stepgate.constants.vcs import DEFAULT_DIFF_BASE
from stepgate.exceptions import ConfigParseError
from stepgate.model import Predicate, StepRule
from stepgate.rules.predicates import parse_predicate

logger = logging.getLogger(__name__)


def load_config(root: Path, config_path: Path | None = None) -> StepgateConfig:
    """Load step configuration from ``stepgate.yaml`` or an explicit path.

    There is no built-in rule set to fall back on, so a missing or malformed
    file raises ``ConfigParseError``.
    """
    root = root.resolve()
    path = config_path.resolve() if config_path else (root / CONFIG_FILENAME)
    if not path.is_file():
        raise ConfigParseError(f"Config file not found: {path}")

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigParseError(f"Invalid YAML config file at {path}: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigParseError(f"Cannot read config file at {path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigParseError(f"Config file at {path} must be a YAML mapping")

    unknown_keys = sorted(str(key) for key in raw if str(key) not in ALLOWED_CONFIG_KEYS)
    if unknown_keys:
        logger.warning("Ignoring unknown config key(s) in %s: %s", path, ", ".join(unknown_keys))

    config = StepgateConfig(
        path=path,
        diff_base=_ensure_string(raw.get("diff_base", DEFAULT_DIFF_BASE), "diff_base"),
        cache_dir=_ensure_string(raw.get("cache_dir", DEFAULT_CACHE_DIRNAME), "cache_dir"),
        source_extensions=_normalize_extensions(
            _ensure_string_list(raw.get("source_extensions", list(DEFAULT_SOURCE_EXTENSIONS)), "source_extensions")
        ),
        categories=_build_categories(_ensure_mapping(raw.get("change_patterns"), "change_patterns")),
        rules=_build_rules(_ensure_mapping(raw.get("steps"), "steps")),
        routing=_build_routing(_ensure_mapping(raw.get("routing"), "routing")),
    )
    logger.debug("Loaded %d step rule(s) from %s", len(config.rules), path)
    return config


def _ensure_string(value: Any, key_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigParseError(f"{key_name} must be a non-empty string")
    return value.strip()


def _ensure_mapping(value: Any, key_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigParseError(f"{key_name} must be a mapping")
    return {str(key): item for key, item in value.items()}


def _ensure_string_list(value: Any, key_name: str) -> list[str]:
    """Coerce a value to a list of strings, raising ConfigParseError on type mismatch."""
    if value is None:
        return []
    if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) for item in value):
        raise ConfigParseError(f"{key_name} must be a list of strings")
    return [item.strip() for item in value if item.strip()]


def _normalize_extensions(extensions: list[str]) -> tuple[str, ...]:
    normalized = (ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions)
    return tuple(dict.fromkeys(normalized))


def _build_categories(raw: dict[str, Any]) -> CategoryPatterns:
    unknown = sorted(set(raw) - set(CATEGORY_PRIORITY))
    if unknown:
        raise ConfigParseError(
            f"change_patterns has unknown categories {unknown}; expected {list(CATEGORY_PRIORITY)}"
        )
    globs = {category: _ensure_string_list(value, f"change_patterns.{category}") for category, value in raw.items()}
    try:
        return CategoryPatterns.from_globs(globs)
    except ValueError as exc:
        raise ConfigParseError(f"change_patterns: {exc}") from exc


def _build_rules(raw: dict[str, Any]) -> dict[str, StepRule]:
    rules: dict[str, StepRule] = {}
    for step, body in raw.items():
        entry = _ensure_mapping(body, f"steps.{step}")
        unknown = sorted(set(entry) - RULE_ALLOWED_KEYS)
        if unknown:
            raise ConfigParseError(f"steps.{step} has unknown keys {unknown}; expected skip_if and run_if")
        rules[step] = StepRule(
            step=step,
            skip_if=_parse_predicates(entry.get("skip_if"), f"steps.{step}.skip_if"),
            run_if=_parse_predicates(entry.get("run_if"), f"steps.{step}.run_if"),
        )
    return rules


def _parse_predicates(value: Any, key_name: str) -> tuple[Predicate, ...]:
    predicates: list[Predicate] = []
    for raw in _ensure_string_list(value, key_name):
        try:
            predicates.append(parse_predicate(raw))
        except ValueError as exc:
            raise ConfigParseError(f"{key_name}: {exc}") from exc
    return tuple(predicates)


def _build_routing(raw: dict[str, Any]) -> dict[str, tuple[str, ...]]:
    """Overlay configured routes on the default table."""
    routing = dict(DEFAULT_ROUTING_TABLE)
    for change_type, steps in raw.items():
        if change_type not in CHANGE_TYPES:
            raise ConfigParseError(f"routing has unknown change type {change_type!r}")
        routing[change_type] = tuple(dict.fromkeys(_ensure_string_list(steps, f"routing.{change_type}")))
    return routing
