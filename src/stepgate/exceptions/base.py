"""Base exception type for stepgate."""

from __future__ import annotations


class StepgateError(Exception):
    """Base class for all stepgate errors."""
