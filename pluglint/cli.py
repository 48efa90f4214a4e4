"""Command-line entry point for the plugin convention linter."""

from __future__ import annotations

import argparse
import concurrent.futures
import logging
import sys
from pathlib import Path
from typing import List

from . import __version__
from .config import LintConfig, load_config
from .engine import all_rules, run_lint
from .errors import PluglintError
from .report import render_json, render_text, should_color, write_report
from .result import Report
from .severity import Severity
from .utils import CancelToken

logger = logging.getLogger(__name__)

EXIT_FATAL = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pluglint",
        description="Check a Neovim/Vim plugin tree against plugin authoring conventions.",
    )
    parser.add_argument("root", nargs="?", help="Root directory of the plugin to lint.")
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Report format (defaults to text).",
    )
    parser.add_argument(
        "--fail-on",
        choices=[Severity.ERROR.value, Severity.WARN.value],
        default=None,
        help="Minimum severity that causes a non-zero exit code (default: error).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a YAML config file (default: <root>/.pluglint.yaml if present).",
    )
    parser.add_argument(
        "--out",
        "--output",
        dest="output_path",
        default=None,
        help="Write the report to this file instead of stdout.",
    )
    parser.add_argument("--workers", type=int, default=None, help="Maximum concurrent file reads.")
    parser.add_argument("--timeout", type=float, default=None, help="Seconds allowed per file read.")
    parser.add_argument(
        "--disable",
        action="append",
        default=[],
        metavar="RULE",
        help="Disable a rule by name (repeatable).",
    )
    parser.add_argument(
        "--color",
        choices=["auto", "always", "never"],
        default="auto",
        help="Colorize text output (auto honours NO_COLOR and tty detection).",
    )
    parser.add_argument("--list-rules", action="store_true", help="List the available rules and exit.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug information to stderr.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def resolve_config(args: argparse.Namespace, root: Path) -> LintConfig:
    config = load_config(root, args.config)
    if args.workers is not None and args.workers < 1:
        raise PluglintError("--workers must be at least 1")
    if args.timeout is not None and args.timeout <= 0:
        raise PluglintError("--timeout must be positive")
    return config.with_overrides(
        fail_on=Severity.parse(args.fail_on) if args.fail_on else None,
        workers=args.workers,
        timeout=args.timeout,
        disable=tuple(config.disable) + tuple(args.disable) if args.disable else None,
    )


def run_cancellable(root: Path, config: LintConfig) -> Report:
    """Run the lint in a worker thread so Ctrl-C cancels it into a partial report."""

    cancel = CancelToken()
    with concurrent.futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="pluglint-main") as executor:
        future = executor.submit(run_lint, root, config, cancel)
        try:
            return future.result()
        except KeyboardInterrupt:
            logger.warning("interrupted; finishing with a partial report")
            cancel.cancel()
            return future.result()


def list_rules() -> None:
    for rule in all_rules():
        print(f"{rule.name:<16} {rule.description}")


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.list_rules:
        list_rules()
        return 0
    if args.root is None:
        parser.error("the following arguments are required: root")

    root = Path(args.root)
    try:
        config = resolve_config(args, root)
        report = run_cancellable(root, config)
        if args.format == "json":
            payload = render_json(report)
        else:
            target = None if args.output_path else sys.stdout
            payload = render_text(report, config.fail_on, color=should_color(args.color, target))
        if args.output_path:
            write_report(payload, args.output_path)
            write_report(render_text(report, config.fail_on), sys.stdout)
            print(f"\nReport written to {args.output_path}")
        else:
            write_report(payload, sys.stdout)
    except PluglintError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_FATAL

    return report.exit_code(config.fail_on)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
