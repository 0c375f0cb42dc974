"""Change-set classification and change-type detection."""

from .classifier import classify_change_set, classify_path, classify_paths
from .commit_type import detect_change_type, parse_conventional_subject, strategy_for_change_type
from .patterns import CategoryPatterns, GlobPattern

__all__ = [
    "CategoryPatterns",
    "GlobPattern",
    "classify_change_set",
    "classify_path",
    "classify_paths",
    "detect_change_type",
    "parse_conventional_subject",
    "strategy_for_change_type",
]
