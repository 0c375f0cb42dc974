"""Constants for git interaction."""

from __future__ import annotations

GIT_EXECUTABLE: str = "git"
GIT_TIMEOUT_SECONDS: float = 5.0
DEFAULT_DIFF_BASE: str = "HEAD~1"
HEAD_REF: str = "HEAD"
