"""Core data models for stepgate."""

from .entities import (
    ChangeSet,
    ChangeTypeDetection,
    ClassificationFlags,
    Plan,
    Predicate,
    RunDecision,
    StepRule,
)

__all__ = [
    "ChangeSet",
    "ChangeTypeDetection",
    "ClassificationFlags",
    "Plan",
    "Predicate",
    "RunDecision",
    "StepRule",
]
