"""Step conditions, run/skip evaluation, and change-type routing."""

from .evaluator import ConditionEvaluator
from .predicates import PredicateContext, evaluate_predicate, parse_duration, parse_predicate, step_cache_key
from .router import steps_for

__all__ = [
    "ConditionEvaluator",
    "PredicateContext",
    "evaluate_predicate",
    "parse_duration",
    "parse_predicate",
    "step_cache_key",
    "steps_for",
]
