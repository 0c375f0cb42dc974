"""Run/skip decisions for individual pipeline steps."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from stepgate.cache import CacheStore
from stepgate.constants.rules import REASON_DEFAULT_RUN, REASON_NO_RULE
from stepgate.model import ChangeSet, Predicate, RunDecision, StepRule
from stepgate.rules.predicates import PredicateContext, evaluate_predicate

logger = logging.getLogger(__name__)


class ConditionEvaluator:
    """Applies configured step rules with a fail-open policy.

    A step runs unless a ``skip_if`` predicate holds. Missing rules and rules
    that match nothing both resolve to *run*, so ambiguity never drops work.
    The only side effects are reads from the cache store.
    """

    def __init__(self, rules: Mapping[str, StepRule], cache: CacheStore | None = None) -> None:
        self._rules = rules
        self._cache = cache

    def rule_for(self, step: str) -> StepRule | None:
        return self._rules.get(step)

    def should_run(
        self,
        step: str,
        flags: Mapping[str, bool],
        change_type: str,
        change_set: ChangeSet | None = None,
    ) -> RunDecision:
        """Decide whether *step* runs for the given flags and change type."""
        rule = self._rules.get(step)
        if rule is None:
            logger.debug("No rule for step %s; running", step)
            return RunDecision(step=step, run=True, reason=REASON_NO_RULE)

        context = PredicateContext(
            step=step,
            flags=flags,
            change_type=change_type,
            change_set=change_set if change_set is not None else ChangeSet(),
            cache=self._cache,
        )

        skip_hit = _first_match(rule.skip_if, context)
        if skip_hit is not None:
            logger.debug("Skipping %s: %s", step, skip_hit.label)
            return RunDecision(step=step, run=False, reason=skip_hit.label)

        run_hit = _first_match(rule.run_if, context)
        if run_hit is not None:
            logger.debug("Running %s: %s", step, run_hit.label)
            return RunDecision(step=step, run=True, reason=run_hit.label)

        return RunDecision(step=step, run=True, reason=REASON_DEFAULT_RUN)

    def decide_all(
        self,
        steps: Iterable[str],
        flags: Mapping[str, bool],
        change_type: str,
        change_set: ChangeSet | None = None,
    ) -> tuple[RunDecision, ...]:
        return tuple(self.should_run(step, flags, change_type, change_set) for step in steps)


def _first_match(predicates: Iterable[Predicate], context: PredicateContext) -> Predicate | None:
    for predicate in predicates:
        if evaluate_predicate(predicate, context):
            return predicate
    return None
