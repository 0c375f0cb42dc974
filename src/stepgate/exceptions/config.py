"""Configuration-related exceptions."""

from __future__ import annotations

from stepgate.exceptions.base import StepgateError


class ConfigParseError(StepgateError, ValueError):
    """Raised when the step configuration is missing or invalid.

    There is no safe default rule set, so this is fatal to an evaluation.
    """
