"""Configuration defaults and filenames."""

from __future__ import annotations

CONFIG_FILENAME: str = "stepgate.yaml"

RULE_ALLOWED_KEYS: frozenset[str] = frozenset({"skip_if", "run_if"})
