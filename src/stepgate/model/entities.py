"""Immutable value objects shared across the evaluation pipeline."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, fields

from stepgate.types import DetectionSource, JsonObject


@dataclass(frozen=True)
class ChangeSet:
    """Changed paths and the latest commit subject for one invocation."""

    paths: tuple[str, ...] = ()
    subject: str = ""
    added: frozenset[str] = frozenset()
    base_ref: str | None = None

    def __post_init__(self) -> None:
        # Deduplicate while keeping first-seen order.
        object.__setattr__(self, "paths", tuple(dict.fromkeys(self.paths)))
        object.__setattr__(self, "added", frozenset(path for path in self.added if path in self.paths))

    @property
    def is_empty(self) -> bool:
        return not self.paths


@dataclass(frozen=True)
class ClassificationFlags(Mapping[str, bool]):
    """Boolean facts derived from a change set, readable as a mapping."""

    no_code_changes: bool = True
    only_docs_changed: bool = False
    no_js_changes: bool = True
    only_tests_changed: bool = False
    no_new_files: bool = True
    code_changed: bool = False
    tests_changed: bool = False
    docs_changed: bool = False
    config_changed: bool = False

    def __getitem__(self, name: str) -> bool:
        if name not in self._names():
            raise KeyError(name)
        return bool(getattr(self, name))

    def __iter__(self) -> Iterator[str]:
        return iter(self._names())

    def __len__(self) -> int:
        return len(self._names())

    @classmethod
    def _names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def as_dict(self) -> dict[str, bool]:
        return {name: self[name] for name in self}


@dataclass(frozen=True)
class ChangeTypeDetection:
    """Detected change type together with the signal that produced it."""

    change_type: str
    source: DetectionSource
    scope: str | None = None


@dataclass(frozen=True)
class Predicate:
    """A parsed ``kind:argument`` condition from a step rule."""

    kind: str
    argument: str
    label: str


@dataclass(frozen=True)
class StepRule:
    """Ordered skip and run conditions for one pipeline step."""

    step: str
    skip_if: tuple[Predicate, ...] = ()
    run_if: tuple[Predicate, ...] = ()


@dataclass(frozen=True)
class RunDecision:
    """Whether a step runs, with a short machine-readable reason."""

    step: str
    run: bool
    reason: str

    @property
    def verdict(self) -> str:
        return "run" if self.run else "skip"

    def to_dict(self) -> JsonObject:
        return {"step": self.step, "run": self.run, "reason": self.reason}


@dataclass(frozen=True)
class Plan:
    """Full evaluation result handed to the pipeline driver."""

    change_set: ChangeSet
    flags: ClassificationFlags
    detection: ChangeTypeDetection
    steps: tuple[str, ...]
    decisions: tuple[RunDecision, ...]
    test_strategy: str
    fail_open: bool = False
    error: str | None = None
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def change_type(self) -> str:
        return self.detection.change_type

    @property
    def steps_to_run(self) -> tuple[str, ...]:
        return tuple(decision.step for decision in self.decisions if decision.run)

    def decision_for(self, step: str) -> RunDecision | None:
        for decision in self.decisions:
            if decision.step == step:
                return decision
        return None

    def to_dict(self) -> JsonObject:
        return {
            "change_type": self.detection.change_type,
            "detection_source": self.detection.source,
            "scope": self.detection.scope,
            "test_strategy": self.test_strategy,
            "base_ref": self.change_set.base_ref,
            "subject": self.change_set.subject,
            "changed_files": list(self.change_set.paths),
            "flags": self.flags.as_dict(),
            "steps": list(self.steps),
            "decisions": [decision.to_dict() for decision in self.decisions],
            "fail_open": self.fail_open,
            "error": self.error,
            "warnings": list(self.warnings),
        }
