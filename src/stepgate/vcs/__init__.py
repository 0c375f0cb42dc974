"""Version-control collaborators."""

from .git import GitCollector, run_git

__all__ = ["GitCollector", "run_git"]
