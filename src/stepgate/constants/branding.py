"""Branding constants for terminal output."""

from __future__ import annotations

BRAND_NAME: str = "STEPGATE"
ASCII_LOGO_LINES: tuple[str, ...] = (
    ">_ STEPGATE",
    "     // run only the CI steps a change needs",
)
PLAN_SUMMARY_TITLE: str = "Step plan"
CLI_DESCRIPTION: str = "\n".join((*ASCII_LOGO_LINES, "", f"{BRAND_NAME} conditional step evaluator"))
