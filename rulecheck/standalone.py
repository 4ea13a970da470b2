"""Argparse CLI for running checks without the typer application."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import click

from rulecheck import __version__
from rulecheck.errors import RulecheckError
from rulecheck.output import render
from rulecheck.runner import EXIT_ERROR, exit_code_for, run_check


def main(argv: list[str] | None = None) -> int:
    """Program entrypoint."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return 0

    if args.project_root is None:
        parser.print_help()
        return EXIT_ERROR

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )

    try:
        ctx = run_check(
            Path(args.project_root),
            ruleset_path=Path(args.ruleset) if args.ruleset else None,
            exclude=args.exclude,
            jobs=args.jobs,
        )
        output = render(ctx.report, (args.format or ctx.config.format).lower())
    except RulecheckError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    click.echo(output)
    return exit_code_for(ctx.report)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rulecheck-standalone",
        description="Check an agent project tree against its development rules.",
    )
    parser.add_argument("project_root", nargs="?", help="Project root to check.")
    parser.add_argument("--ruleset", help="Path to ruleset TOML file.")
    parser.add_argument("--format", help="Output format: structured|human.")
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        help="Extra glob of paths to leave out of the scan.",
    )
    parser.add_argument(
        "--jobs", type=_positive_int, default=1, help="Evaluate rules on N threads."
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output.")
    parser.add_argument("--version", action="store_true", help="Show version and exit.")
    return parser


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return parsed


if __name__ == "__main__":
    raise SystemExit(main())
