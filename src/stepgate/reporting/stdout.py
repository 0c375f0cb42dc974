"""Human-readable stdout reporter for step plans."""

from __future__ import annotations

from stepgate.constants.branding import ASCII_LOGO_LINES, PLAN_SUMMARY_TITLE
from stepgate.constants.reporting import ANSI_CYAN, ANSI_GREEN, ANSI_RED, ANSI_RESET, ANSI_YELLOW
from stepgate.model import Plan, RunDecision


def _colorize(text: str, color: str) -> str:
    return f"{color}{text}{ANSI_RESET}"


def render_decision(decision: RunDecision) -> str:
    """Single-line ``run <reason>`` / ``skip <reason>`` form for scripts."""
    return f"{decision.verdict} {decision.reason}"


class PlanReporter:
    """Formats a plan as a short terminal report."""

    def __init__(self, plan: Plan, *, color: bool = True, verbose: bool = False) -> None:
        self._plan = plan
        self._color = color
        self._verbose = verbose

    def render(self) -> str:
        sections = [self._render_header(), self._render_decisions()]
        if self._verbose:
            sections.append(self._render_details())
        return "\n".join(section for section in sections if section)

    def _render_header(self) -> str:
        plan = self._plan
        sep = "  " + "─" * 38
        change_type = _colorize(plan.change_type, ANSI_CYAN) if self._color else plan.change_type
        lines = [
            "",
            f"  {ASCII_LOGO_LINES[0]}",
            f"  {PLAN_SUMMARY_TITLE}",
            sep,
            "",
            f"  Change type  {change_type} ({plan.detection.source})",
            f"  Strategy     {plan.test_strategy}",
            f"  Files        {len(plan.change_set.paths)} changed",
            f"  Steps        {len(plan.steps_to_run)} run / {len(plan.steps) - len(plan.steps_to_run)} skipped",
        ]
        if plan.fail_open:
            warning = f"  Fail-open    {plan.error}"
            lines.append(_colorize(warning, ANSI_RED) if self._color else warning)
        for warning in plan.warnings:
            lines.append(f"  Note         {warning}")
        lines.append("")
        return "\n".join(lines)

    def _render_decisions(self) -> str:
        if not self._plan.decisions:
            return "  No steps routed."
        width = max(len(decision.step) for decision in self._plan.decisions)
        lines = []
        for decision in self._plan.decisions:
            verdict = decision.verdict.upper()
            if self._color:
                verdict = _colorize(verdict, ANSI_GREEN if decision.run else ANSI_YELLOW)
            lines.append(f"  {decision.step.ljust(width)}  {verdict}  {decision.reason}")
        return "\n".join(lines)

    def _render_details(self) -> str:
        plan = self._plan
        lines = ["", f"  Subject      {plan.change_set.subject or '-'}"]
        active = [name for name, value in plan.flags.items() if value]
        lines.append(f"  Flags        {', '.join(active) or '-'}")
        for path in plan.change_set.paths:
            marker = "+" if path in plan.change_set.added else " "
            lines.append(f"    {marker} {path}")
        return "\n".join(lines)
