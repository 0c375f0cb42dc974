"""Change-type labels, commit heuristics, and the default step routing table."""

from __future__ import annotations

CHANGE_TYPES: tuple[str, ...] = (
    "feat",
    "fix",
    "docs",
    "refactor",
    "test",
    "style",
    "perf",
    "chore",
    "ci",
    "build",
)
UNKNOWN_CHANGE_TYPE: str = "unknown"

# Runs a mid-sized subset of steps: neither the minimal nor the full list.
DEFAULT_CHANGE_TYPE: str = "fix"

# Unknown labels route to the full step list.
ROUTING_FALLBACK_TYPE: str = "feat"

DETECTION_SOURCE_CONVENTIONAL: str = "conventional"
DETECTION_SOURCE_KEYWORD: str = "keyword"
DETECTION_SOURCE_FILES: str = "files"
DETECTION_SOURCE_DEFAULT: str = "default"
DETECTION_SOURCE_OVERRIDE: str = "override"

CONVENTIONAL_PREFIX_PATTERN: str = (
    r"^(?P<type>" + "|".join(CHANGE_TYPES) + r")(?:\((?P<scope>[^()\r\n]*)\))?(?P<breaking>!)?:"
)

# Matched against the lowercased subject, in order; first hit wins.
KEYWORD_PATTERNS: tuple[tuple[str, str], ...] = (
    (r"^(add|write|extend)\b.*\btests?\b", "test"),
    (r"^(add|implement|create|introduce)\b", "feat"),
    (r"^(fix|repair|correct|resolve|patch|hotfix)\b", "fix"),
    (r"^(docs?|document|readme)\b", "docs"),
    (r"^update\b.*\b(docs?|documentation|readme)\b", "docs"),
    (r"^(refactor|restructure|reorganize|rewrite|simplify)\b", "refactor"),
    (r"^(tests?|spec)\b", "test"),
    (r"^(style|format|lint|prettier)\b", "style"),
    (r"^(perf|optimi[sz]e|speed up)\b", "perf"),
    (r"^improve\b.*\bperformance\b", "perf"),
    (r"^(chore|maint|maintain|bump)\b", "chore"),
    (r"^update\b.*\b(deps|dependency|dependencies)\b", "chore"),
    (r"^(ci|workflow|pipeline)\b", "ci"),
    (r"^(build|webpack|rollup|vite)\b", "build"),
    (r"\b(bug|bugfix|crash|regression)\b", "fix"),
    (r"\b(readme|documentation|changelog)\b", "docs"),
    (r"\b(new|feature)\b", "feat"),
)

STEP_SECURITY_AUDIT: str = "security_audit"
STEP_SYNTAX_VALIDATION: str = "syntax_validation"
STEP_DIRECTORY_STRUCTURE: str = "directory_structure"
STEP_TEST_EXECUTION: str = "test_execution"
STEP_COVERAGE_REPORT: str = "coverage_report"
STEP_QUALITY_CHECKS: str = "quality_checks"
STEP_DOC_VALIDATION: str = "doc_validation"

DEFAULT_ROUTING_TABLE: dict[str, tuple[str, ...]] = {
    "feat": (
        STEP_SECURITY_AUDIT,
        STEP_SYNTAX_VALIDATION,
        STEP_DIRECTORY_STRUCTURE,
        STEP_TEST_EXECUTION,
        STEP_COVERAGE_REPORT,
        STEP_QUALITY_CHECKS,
        STEP_DOC_VALIDATION,
    ),
    "fix": (STEP_SECURITY_AUDIT, STEP_SYNTAX_VALIDATION, STEP_TEST_EXECUTION, STEP_QUALITY_CHECKS),
    "docs": (STEP_SYNTAX_VALIDATION, STEP_DOC_VALIDATION),
    "refactor": (
        STEP_SECURITY_AUDIT,
        STEP_SYNTAX_VALIDATION,
        STEP_TEST_EXECUTION,
        STEP_COVERAGE_REPORT,
        STEP_QUALITY_CHECKS,
    ),
    "test": (STEP_SYNTAX_VALIDATION, STEP_TEST_EXECUTION),
    "style": (STEP_SYNTAX_VALIDATION, STEP_QUALITY_CHECKS),
    "perf": (STEP_SECURITY_AUDIT, STEP_SYNTAX_VALIDATION, STEP_TEST_EXECUTION, STEP_COVERAGE_REPORT),
    "chore": (STEP_SECURITY_AUDIT, STEP_SYNTAX_VALIDATION),
    "ci": (STEP_SYNTAX_VALIDATION,),
    "build": (STEP_SECURITY_AUDIT, STEP_SYNTAX_VALIDATION, STEP_TEST_EXECUTION),
}

TEST_STRATEGIES: dict[str, str] = {
    "feat": "all",
    "perf": "all",
    "fix": "related",
    "refactor": "comprehensive",
    "test": "tests_only",
    "docs": "none",
    "style": "minimal",
    "chore": "minimal",
    "ci": "minimal",
    "build": "minimal",
}
DEFAULT_TEST_STRATEGY: str = "all"
