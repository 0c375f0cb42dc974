"""Shared pytest fixtures for repository-local test data."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from stepgate.config import StepgateConfig, load_config
from stepgate.exceptions import NoChangesError
from stepgate.model import ChangeSet


@pytest.fixture(scope="session")
def fixtures_root() -> Path:
    """Return root directory for test fixtures."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def workflow_config_path(fixtures_root: Path) -> Path:
    """Return the reference workflow configuration."""
    return fixtures_root / "configs" / "workflow.yaml"


@pytest.fixture
def workflow_config(tmp_path: Path, workflow_config_path: Path) -> StepgateConfig:
    return load_config(tmp_path, workflow_config_path)


class FakeCollector:
    """Collector returning a fixed change set; an empty one raises NoChangesError."""

    def __init__(self, paths: list[str], subject: str, *, added: tuple[str, ...] = ()) -> None:
        self.paths = paths
        self.subject = subject
        self.added = added
        self.calls: list[str] = []

    def collect(self, base_ref: str) -> ChangeSet:
        self.calls.append(base_ref)
        if not self.paths:
            raise NoChangesError("No changes", subject=self.subject, base_ref=base_ref)
        return ChangeSet(
            paths=tuple(self.paths),
            subject=self.subject,
            added=frozenset(self.added),
            base_ref=base_ref,
        )


@pytest.fixture
def fake_collector() -> type[FakeCollector]:
    return FakeCollector


class GitRepo:
    """Minimal helper driving a throwaway git repository."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def git(self, *args: str) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=self.root,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout

    def write(self, relative: str, content: str = "x\n") -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def commit(self, message: str, *paths: str) -> None:
        self.git("add", *(paths or (".",)))
        self.git("commit", "--quiet", "--no-verify", "-m", message)


@pytest.fixture
def git_repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> GitRepo:
    """Return an initialized, empty git repository under ``tmp_path``."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Step Gate")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "stepgate@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Step Gate")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "stepgate@example.com")
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
    root = tmp_path / "repo"
    root.mkdir()
    repo = GitRepo(root)
    repo.git("init", "--quiet")
    repo.git("config", "commit.gpgsign", "false")
    return repo
