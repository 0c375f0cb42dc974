"""Config data model for stepgate."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from stepgate.changes.patterns import CategoryPatterns
from stepgate.constants.cache import DEFAULT_CACHE_DIRNAME
from stepgate.constants.change_types import DEFAULT_ROUTING_TABLE
from stepgate.constants.patterns import DEFAULT_SOURCE_EXTENSIONS
from stepgate.constants.rules import PREDICATE_CACHE_AGE
from stepgate.constants.vcs import DEFAULT_DIFF_BASE
from stepgate.model import StepRule


@dataclass(frozen=True)
class StepgateConfig:
    """Resolved step configuration."""

    path: Path | None = None
    diff_base: str = DEFAULT_DIFF_BASE
    cache_dir: str = DEFAULT_CACHE_DIRNAME
    source_extensions: tuple[str, ...] = DEFAULT_SOURCE_EXTENSIONS
    categories: CategoryPatterns = field(default_factory=CategoryPatterns.default)
    rules: dict[str, StepRule] = field(default_factory=dict)
    routing: dict[str, tuple[str, ...]] = field(default_factory=lambda: dict(DEFAULT_ROUTING_TABLE))

    def cache_path(self, root: Path) -> Path:
        """Cache directory, resolved against *root* when relative."""
        path = Path(self.cache_dir).expanduser()
        return path if path.is_absolute() else root / path

    @property
    def cached_steps(self) -> tuple[str, ...]:
        """Steps whose rules consult the cache."""
        return tuple(
            step
            for step, rule in self.rules.items()
            if any(predicate.kind == PREDICATE_CACHE_AGE for predicate in (*rule.skip_if, *rule.run_if))
        )
