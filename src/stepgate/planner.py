"""End-to-end step planning for one pipeline invocation.

Runs collector, classifier, detector, evaluator and router in sequence.
``evaluate_plan`` propagates the fatal errors (``NoRepositoryError`` and
``ConfigParseError``); the ``*_safely`` variants turn them into a fail-open
result in which every step runs.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import NamedTuple, Protocol

from stepgate.cache import CacheStore, FileCacheStore, InMemoryCacheStore
from stepgate.changes import classify_change_set, detect_change_type, strategy_for_change_type
from stepgate.config import StepgateConfig, load_config
from stepgate.constants.cache import CHANGE_TYPE_CACHE_KEY
from stepgate.constants.change_types import (
    DEFAULT_ROUTING_TABLE,
    DETECTION_SOURCE_DEFAULT,
    DETECTION_SOURCE_OVERRIDE,
    UNKNOWN_CHANGE_TYPE,
)
from stepgate.constants.rules import REASON_FAIL_OPEN, REASON_NOT_ROUTED
from stepgate.exceptions import ConfigParseError, NoChangesError, NoRepositoryError
from stepgate.model import ChangeSet, ChangeTypeDetection, ClassificationFlags, Plan, RunDecision
from stepgate.rules import ConditionEvaluator, step_cache_key, steps_for
from stepgate.rules.router import full_step_list
from stepgate.vcs import GitCollector

logger = logging.getLogger(__name__)


class ChangeSetCollector(Protocol):
    """Anything that can produce a change set for a base reference."""

    def collect(self, base_ref: str) -> ChangeSet: ...


class _Evaluation(NamedTuple):
    config: StepgateConfig
    change_set: ChangeSet
    flags: ClassificationFlags
    detection: ChangeTypeDetection
    evaluator: ConditionEvaluator
    warnings: tuple[str, ...]


def open_cache(config: StepgateConfig, root: Path, *, no_cache: bool = False) -> CacheStore:
    """Return the cache store configured for *root*."""
    if no_cache:
        return InMemoryCacheStore()
    return FileCacheStore(config.cache_path(root.resolve()))


def evaluate_plan(
    *,
    root: Path,
    config: StepgateConfig | None = None,
    config_path: Path | None = None,
    base_ref: str | None = None,
    change_type_override: str | None = None,
    cache: CacheStore | None = None,
    collector: ChangeSetCollector | None = None,
    no_cache: bool = False,
) -> Plan:
    """Classify the pending change and decide every routed step."""
    evaluation = _evaluate(
        root=root,
        config=config,
        config_path=config_path,
        base_ref=base_ref,
        change_type_override=change_type_override,
        cache=cache,
        collector=collector,
        no_cache=no_cache,
    )
    change_type = evaluation.detection.change_type
    steps = steps_for(change_type, evaluation.config.routing)
    decisions = evaluation.evaluator.decide_all(steps, evaluation.flags, change_type, evaluation.change_set)
    plan = Plan(
        change_set=evaluation.change_set,
        flags=evaluation.flags,
        detection=evaluation.detection,
        steps=steps,
        decisions=decisions,
        test_strategy=strategy_for_change_type(change_type),
        warnings=evaluation.warnings,
    )
    logger.info(
        "Change type %s (%s): %d of %d routed step(s) run",
        change_type,
        evaluation.detection.source,
        len(plan.steps_to_run),
        len(steps),
    )
    return plan


def evaluate_step(
    step: str,
    *,
    root: Path,
    config: StepgateConfig | None = None,
    config_path: Path | None = None,
    base_ref: str | None = None,
    change_type_override: str | None = None,
    cache: CacheStore | None = None,
    collector: ChangeSetCollector | None = None,
    no_cache: bool = False,
    respect_routing: bool = False,
) -> RunDecision:
    """Decide a single step.

    With *respect_routing*, a step that the change type does not route to is
    skipped with reason ``not_routed``.
    """
    evaluation = _evaluate(
        root=root,
        config=config,
        config_path=config_path,
        base_ref=base_ref,
        change_type_override=change_type_override,
        cache=cache,
        collector=collector,
        no_cache=no_cache,
    )
    change_type = evaluation.detection.change_type
    if respect_routing and step not in steps_for(change_type, evaluation.config.routing):
        return RunDecision(step=step, run=False, reason=REASON_NOT_ROUTED)
    return evaluation.evaluator.should_run(step, evaluation.flags, change_type, evaluation.change_set)


def evaluate_plan_safely(*, root: Path, config_path: Path | None = None, **kwargs: object) -> Plan:
    """Like :func:`evaluate_plan`, but any failure yields a run-everything plan."""
    config: StepgateConfig | None = None
    try:
        config = load_config(root, config_path)
        return evaluate_plan(root=root, config=config, **kwargs)  # type: ignore[arg-type]
    except (NoRepositoryError, ConfigParseError) as exc:
        logger.error("Step evaluation failed; every step will run: %s", exc)
        return fail_open_plan(str(exc), config=config)
    except Exception as exc:
        logger.exception("Unexpected error during step evaluation; every step will run")
        return fail_open_plan(f"unexpected error: {exc!r}", config=config)


def evaluate_step_safely(step: str, *, root: Path, config_path: Path | None = None, **kwargs: object) -> RunDecision:
    """Like :func:`evaluate_step`, but any failure resolves to *run*."""
    try:
        config = load_config(root, config_path)
        return evaluate_step(step, root=root, config=config, **kwargs)  # type: ignore[arg-type]
    except (NoRepositoryError, ConfigParseError) as exc:
        logger.error("Step evaluation failed; %s will run: %s", step, exc)
        return RunDecision(step=step, run=True, reason=REASON_FAIL_OPEN)
    except Exception:
        logger.exception("Unexpected error while evaluating %s; it will run", step)
        return RunDecision(step=step, run=True, reason=REASON_FAIL_OPEN)


def fail_open_plan(error: str, *, config: StepgateConfig | None = None) -> Plan:
    """Plan used when evaluation cannot complete: every known step runs."""
    routing = config.routing if config is not None else DEFAULT_ROUTING_TABLE
    steps = full_step_list(routing)
    if config is not None:
        steps = tuple(dict.fromkeys((*steps, *config.rules)))
    return Plan(
        change_set=ChangeSet(),
        flags=ClassificationFlags(),
        detection=ChangeTypeDetection(change_type=UNKNOWN_CHANGE_TYPE, source=DETECTION_SOURCE_DEFAULT),
        steps=steps,
        decisions=tuple(RunDecision(step=step, run=True, reason=REASON_FAIL_OPEN) for step in steps),
        test_strategy=strategy_for_change_type(UNKNOWN_CHANGE_TYPE),
        fail_open=True,
        error=error,
    )


def record_step(step: str, cache: CacheStore, *, change_type: str | None = None) -> None:
    """Record that *step* ran successfully so ``cache_age`` predicates can skip it."""
    cache.put(
        step_cache_key(step),
        {
            "step": step,
            "change_type": change_type,
            "recorded_at": datetime.now(UTC).isoformat(),
        },
    )
    logger.info("Recorded cache entry for step %s", step)


def invalidate_step(step: str, cache: CacheStore) -> None:
    """Drop the cache entry of *step*."""
    cache.invalidate(step_cache_key(step))
    logger.info("Invalidated cache entry for step %s", step)


def record_detection(plan: Plan, cache: CacheStore) -> None:
    """Store the detected change type for later pipeline steps to read."""
    cache.put(
        CHANGE_TYPE_CACHE_KEY,
        {
            "change_type": plan.change_type,
            "steps": list(plan.steps),
            "test_strategy": plan.test_strategy,
            "subject": plan.change_set.subject,
            "detected_at": datetime.now(UTC).isoformat(),
        },
    )


def _evaluate(
    *,
    root: Path,
    config: StepgateConfig | None,
    config_path: Path | None,
    base_ref: str | None,
    change_type_override: str | None,
    cache: CacheStore | None,
    collector: ChangeSetCollector | None,
    no_cache: bool,
) -> _Evaluation:
    root = root.resolve()
    if config is None:
        config = load_config(root, config_path)
    if cache is None:
        cache = open_cache(config, root, no_cache=no_cache)
    if collector is None:
        collector = GitCollector(root)

    warnings: list[str] = []
    resolved_base = base_ref or config.diff_base
    try:
        change_set = collector.collect(resolved_base)
    except NoChangesError as exc:
        warning = f"{exc}; nothing to validate"
        warnings.append(warning)
        logger.info(warning)
        change_set = ChangeSet(subject=exc.subject, base_ref=exc.base_ref)

    flags = classify_change_set(change_set, config.categories, source_extensions=config.source_extensions)
    if not flags.no_new_files:
        for step in config.cached_steps:
            cache.invalidate(step_cache_key(step))

    if change_type_override:
        detection = ChangeTypeDetection(change_type=change_type_override, source=DETECTION_SOURCE_OVERRIDE)
    else:
        detection = detect_change_type(change_set.subject, flags)

    return _Evaluation(
        config=config,
        change_set=change_set,
        flags=flags,
        detection=detection,
        evaluator=ConditionEvaluator(config.rules, cache),
        warnings=tuple(warnings),
    )
