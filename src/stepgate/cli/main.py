"""CLI entrypoint for stepgate."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from stepgate import __version__
from stepgate.config import load_config, validate_config_file
from stepgate.constants.branding import CLI_DESCRIPTION
from stepgate.constants.change_types import CHANGE_TYPES
from stepgate.constants.reporting import OUTPUT_FORMAT_JSON, OUTPUT_FORMAT_TEXT, VALID_OUTPUT_FORMATS
from stepgate.exceptions import ConfigParseError, NoRepositoryError
from stepgate.exceptions.validation import format_errors
from stepgate.planner import (
    evaluate_plan,
    evaluate_plan_safely,
    evaluate_step,
    evaluate_step_safely,
    invalidate_step,
    open_cache,
    record_detection,
    record_step,
)
from stepgate.reporting import PlanReporter, plan_to_json, render_decision

EXIT_RUN: int = 0
EXIT_SKIP: int = 1
EXIT_CONFIG_ERROR: int = 2


def _add_common_arguments(parser: argparse.ArgumentParser, *, evaluation: bool = True) -> None:
    parser.add_argument("-r", "--root", type=Path, default=Path("."), help="Repository root (default: .)")
    parser.add_argument("-c", "--config", type=Path, help="Explicit config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug diagnostics")
    if not evaluation:
        return
    parser.add_argument("-b", "--base", default=None, help="Diff base reference (default: config diff_base)")
    parser.add_argument(
        "-t",
        "--change-type",
        choices=CHANGE_TYPES,
        default=None,
        help="Use this change type instead of detecting it",
    )
    parser.add_argument("-n", "--no-cache", action="store_true", help="Disable cache reads/writes")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 2 on repository or configuration errors instead of failing open",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build top-level CLI parser."""
    parser = argparse.ArgumentParser(
        prog="stepgate",
        description=CLI_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    detect = subparsers.add_parser("detect", help="Detect the change type of the pending change")
    _add_common_arguments(detect)
    detect.add_argument(
        "--format",
        choices=sorted(VALID_OUTPUT_FORMATS),
        default=OUTPUT_FORMAT_TEXT,
        help="Output format (default: text)",
    )

    plan = subparsers.add_parser("plan", help="Decide every step routed for the pending change")
    _add_common_arguments(plan)
    plan.add_argument(
        "--format",
        choices=sorted(VALID_OUTPUT_FORMATS),
        default=OUTPUT_FORMAT_TEXT,
        help="Output format (default: text)",
    )
    plan.add_argument("--no-color", action="store_true", help="Disable colored output")

    should_run = subparsers.add_parser(
        "should-run",
        help="Decide one step; exit 0 to run it, 1 to skip it",
    )
    should_run.add_argument("step", help="Step name")
    _add_common_arguments(should_run)
    should_run.add_argument(
        "--respect-routing",
        action="store_true",
        help="Skip the step when the change type does not route to it",
    )

    record = subparsers.add_parser("record", help="Record a successful step run in the cache")
    record.add_argument("step", help="Step name")
    _add_common_arguments(record, evaluation=False)
    record.add_argument(
        "-t",
        "--change-type",
        choices=CHANGE_TYPES,
        default=None,
        help="Change type to store with the entry",
    )

    invalidate = subparsers.add_parser("invalidate", help="Drop the cache entry of a step")
    invalidate.add_argument("step", help="Step name")
    _add_common_arguments(invalidate, evaluation=False)

    validate = subparsers.add_parser("validate-config", help="Validate configuration without evaluating")
    validate.add_argument("-r", "--root", type=Path, default=Path("."), help="Repository root (default: .)")
    validate.add_argument("-c", "--config", type=Path, help="Explicit config file")

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    verbose = getattr(args, "verbose", False)
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(levelname)s %(message)s")

    handlers = {
        "detect": _handle_detect,
        "plan": _handle_plan,
        "should-run": _handle_should_run,
        "record": _handle_record,
        "invalidate": _handle_invalidate,
        "validate-config": _handle_validate_config,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.error(f"Unsupported command: {args.command}")
    return handler(args)


def _evaluation_kwargs(args: argparse.Namespace) -> dict[str, object]:
    return {
        "base_ref": args.base,
        "change_type_override": args.change_type,
        "no_cache": args.no_cache,
    }


def _handle_detect(args: argparse.Namespace) -> int:
    if args.strict:
        try:
            plan = evaluate_plan(root=args.root, config_path=args.config, **_evaluation_kwargs(args))
        except Exception as exc:
            return _report_fatal(exc)
    else:
        plan = evaluate_plan_safely(root=args.root, config_path=args.config, **_evaluation_kwargs(args))

    if not plan.fail_open and not args.no_cache:
        record_detection(plan, open_cache(load_config(args.root, args.config), args.root))

    if args.format == OUTPUT_FORMAT_JSON:
        print(plan_to_json(plan))
    else:
        print(plan.change_type)
        print(f"steps: {' '.join(plan.steps)}", file=sys.stderr)
        print(f"test strategy: {plan.test_strategy}", file=sys.stderr)
    return 0


def _handle_plan(args: argparse.Namespace) -> int:
    if args.strict:
        try:
            plan = evaluate_plan(root=args.root, config_path=args.config, **_evaluation_kwargs(args))
        except Exception as exc:
            return _report_fatal(exc)
    else:
        plan = evaluate_plan_safely(root=args.root, config_path=args.config, **_evaluation_kwargs(args))

    if args.format == OUTPUT_FORMAT_JSON:
        print(plan_to_json(plan))
    else:
        use_color = not args.no_color and sys.stdout.isatty()
        print(PlanReporter(plan, color=use_color, verbose=args.verbose).render())
    return 0


def _handle_should_run(args: argparse.Namespace) -> int:
    kwargs = {**_evaluation_kwargs(args), "respect_routing": args.respect_routing}
    if args.strict:
        try:
            decision = evaluate_step(args.step, root=args.root, config_path=args.config, **kwargs)
        except Exception as exc:
            return _report_fatal(exc)
    else:
        decision = evaluate_step_safely(args.step, root=args.root, config_path=args.config, **kwargs)

    print(render_decision(decision))
    return EXIT_RUN if decision.run else EXIT_SKIP


def _handle_record(args: argparse.Namespace) -> int:
    try:
        config = load_config(args.root, args.config)
    except ConfigParseError as exc:
        return _report_fatal(exc)
    record_step(args.step, open_cache(config, args.root), change_type=args.change_type)
    return 0


def _handle_invalidate(args: argparse.Namespace) -> int:
    try:
        config = load_config(args.root, args.config)
    except ConfigParseError as exc:
        return _report_fatal(exc)
    invalidate_step(args.step, open_cache(config, args.root))
    return 0


def _handle_validate_config(args: argparse.Namespace) -> int:
    """Run config validation and report results."""
    errors = validate_config_file(args.root, args.config)
    if errors:
        print(format_errors(errors), file=sys.stderr)
        return EXIT_CONFIG_ERROR

    print("Configuration is valid.")
    return 0


def _report_fatal(exc: Exception) -> int:
    if isinstance(exc, ConfigParseError):
        label = "Configuration error"
    elif isinstance(exc, NoRepositoryError):
        label = "Repository error"
    else:
        label = "Unexpected error"
    print(f"{label}: {exc}", file=sys.stderr)
    return EXIT_CONFIG_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
