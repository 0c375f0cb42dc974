"""Configuration loading and validation for stepgate.

This package facade re-exports the public names so callers can use
``from stepgate.config import ...``.
"""

from __future__ import annotations

from stepgate.config.loader import load_config
from stepgate.config.model import StepgateConfig
from stepgate.config.validator import validate_config_file

__all__ = [
    "StepgateConfig",
    "load_config",
    "validate_config_file",
]
