"""Change-set collection from a git working tree."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from stepgate.constants.vcs import DEFAULT_DIFF_BASE, GIT_EXECUTABLE, GIT_TIMEOUT_SECONDS, HEAD_REF
from stepgate.exceptions import NoChangesError, NoRepositoryError
from stepgate.model import ChangeSet

logger = logging.getLogger(__name__)


def run_git(
    args: list[str],
    *,
    cwd: Path,
    timeout: float = GIT_TIMEOUT_SECONDS,
) -> subprocess.CompletedProcess[str]:
    """Run a git command, turning a missing binary or a timeout into ``NoRepositoryError``.

    Output is decoded as UTF-8; undecodable bytes in path names become U+FFFD.
    """
    try:
        return subprocess.run(
            [GIT_EXECUTABLE, *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise NoRepositoryError(f"git executable not found: {exc}") from exc
    except subprocess.TimeoutExpired as exc:
        raise NoRepositoryError(f"git {' '.join(args)} timed out after {timeout}s") from exc
    except OSError as exc:
        raise NoRepositoryError(f"git {' '.join(args)} failed: {exc}") from exc


class GitCollector:
    """Collects changed paths and the latest commit subject from git.

    Read-only: it never touches the index or the working tree.
    """

    def __init__(self, root: Path, *, timeout: float = GIT_TIMEOUT_SECONDS) -> None:
        self._root = root
        self._timeout = timeout

    def collect(self, base_ref: str = DEFAULT_DIFF_BASE) -> ChangeSet:
        """Return the change set relative to *base_ref*.

        When *base_ref* cannot be resolved (shallow clone, first commit) the
        diff falls back to working-tree changes against ``HEAD``, and to the
        index when there is no ``HEAD`` either.

        Raises:
            NoRepositoryError: When git metadata is missing or git cannot run.
            NoChangesError: When the resulting diff is empty.
        """
        self._ensure_repository()
        subject = self.latest_subject()

        diff_target: list[str]
        resolved_base: str | None
        if self._resolves(base_ref):
            diff_target = [base_ref]
            resolved_base = base_ref
        elif self._resolves(HEAD_REF):
            logger.info("Base %s is not reachable; diffing working tree against HEAD", base_ref)
            diff_target = [HEAD_REF]
            resolved_base = None
        else:
            logger.info("Repository has no commits; diffing the index")
            diff_target = ["--cached"]
            resolved_base = None

        paths = self._diff_names(diff_target)
        if not paths:
            raise NoChangesError(
                f"No changes relative to {resolved_base or 'working tree'}",
                subject=subject,
                base_ref=resolved_base,
            )

        added = self._diff_names([*diff_target, "--diff-filter=A"])
        logger.debug("Collected %d changed path(s), %d added", len(paths), len(added))
        return ChangeSet(paths=tuple(paths), subject=subject, added=frozenset(added), base_ref=resolved_base)

    def latest_subject(self) -> str:
        """Return the subject line of ``HEAD``, or an empty string without commits."""
        result = self._git(["log", "-1", "--format=%s"])
        if result.returncode != 0:
            return ""
        return result.stdout.strip()

    def _ensure_repository(self) -> None:
        result = self._git(["rev-parse", "--git-dir"])
        if result.returncode != 0:
            raise NoRepositoryError(f"No git repository found at {self._root}: {result.stderr.strip()}")

    def _resolves(self, ref: str) -> bool:
        result = self._git(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"])
        return result.returncode == 0

    def _diff_names(self, target: list[str]) -> list[str]:
        result = self._git(["-c", "core.quotepath=off", "diff", "--name-only", "--no-renames", *target])
        if result.returncode != 0:
            raise NoRepositoryError(f"git diff failed: {result.stderr.strip()}")
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def _git(self, args: list[str]) -> subprocess.CompletedProcess[str]:
        return run_git(args, cwd=self._root, timeout=self._timeout)
