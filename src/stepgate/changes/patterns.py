"""Glob patterns and per-category pattern groups.

All path matching in stepgate goes through :class:`GlobPattern`:

* ``*`` and ``?`` never cross a ``/``;
* ``**`` spans any number of segments, and ``**/`` may match none;
* ``[...]`` is a character class (``[!...]`` negates);
* a pattern without ``/`` is matched against the basename at any depth.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from stepgate.constants.patterns import CATEGORY_PRIORITY, CATEGORY_UNMATCHED, DEFAULT_CATEGORY_PATTERNS
from stepgate.types import Category


def translate_glob(pattern: str) -> str:
    """Translate a path glob into a regular expression meant for ``fullmatch``."""
    parts: list[str] = []
    index = 0
    length = len(pattern)
    while index < length:
        char = pattern[index]
        if char == "*":
            if pattern.startswith("**", index):
                index += 2
                if index < length and pattern[index] == "/":
                    index += 1
                    parts.append("(?:.*/)?")
                else:
                    parts.append(".*")
                continue
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "[":
            end = pattern.find("]", index + 2)
            if end == -1:
                parts.append(re.escape(char))
            else:
                body = pattern[index + 1 : end].replace("\\", "\\\\")
                if body.startswith("!"):
                    body = "^" + body[1:]
                parts.append(f"[{body}]")
                index = end + 1
                continue
        else:
            parts.append(re.escape(char))
        index += 1
    return "".join(parts)


def normalize_path(path: str) -> str:
    """Return a relative POSIX form of *path* for matching."""
    normalized = path.replace("\\", "/").strip()
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized.lstrip("/")


@dataclass(frozen=True)
class GlobPattern:
    """A compiled path glob.

    Raises ``ValueError`` at construction time when the pattern is empty or
    does not compile.
    """

    pattern: str
    _regex: re.Pattern[str] = field(init=False, repr=False, compare=False)
    _basename_only: bool = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        cleaned = normalize_path(self.pattern)
        if not cleaned:
            raise ValueError("glob pattern must not be empty")
        try:
            regex = re.compile(translate_glob(cleaned))
        except re.error as exc:
            raise ValueError(f"invalid glob pattern {self.pattern!r}: {exc}") from exc
        object.__setattr__(self, "_regex", regex)
        object.__setattr__(self, "_basename_only", "/" not in cleaned)

    def matches(self, path: str) -> bool:
        """Return True when *path* matches this glob."""
        candidate = normalize_path(path)
        if self._basename_only:
            candidate = candidate.rsplit("/", 1)[-1]
        return self._regex.fullmatch(candidate) is not None

    def matches_any(self, paths: Iterable[str]) -> bool:
        return any(self.matches(path) for path in paths)


def compile_globs(patterns: Iterable[str]) -> tuple[GlobPattern, ...]:
    return tuple(GlobPattern(pattern) for pattern in patterns)


@dataclass(frozen=True)
class CategoryPatterns:
    """Ordered globs for each file category."""

    code: tuple[GlobPattern, ...] = ()
    test: tuple[GlobPattern, ...] = ()
    config: tuple[GlobPattern, ...] = ()
    docs: tuple[GlobPattern, ...] = ()

    @classmethod
    def from_globs(cls, globs: Mapping[str, Iterable[str]]) -> CategoryPatterns:
        """Build category patterns, filling omitted categories from the defaults."""
        resolved = {
            category: compile_globs(globs.get(category, DEFAULT_CATEGORY_PATTERNS[category]))
            for category in CATEGORY_PRIORITY
        }
        return cls(**resolved)

    @classmethod
    def default(cls) -> CategoryPatterns:
        return cls.from_globs(DEFAULT_CATEGORY_PATTERNS)

    def patterns_for(self, category: str) -> tuple[GlobPattern, ...]:
        return getattr(self, category, ())

    def category_of(self, path: str) -> Category:
        """Return the first category, in priority order, with a matching glob."""
        for category in CATEGORY_PRIORITY:
            if any(glob.matches(path) for glob in self.patterns_for(category)):
                return category  # type: ignore[return-value]
        return CATEGORY_UNMATCHED  # type: ignore[return-value]

    def as_globs(self) -> dict[str, list[str]]:
        return {category: [glob.pattern for glob in self.patterns_for(category)] for category in CATEGORY_PRIORITY}
