"""Conditional CI-step execution engine."""

__version__ = "0.3.0"
