"""CLI entrypoint for rulecheck."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Annotated, NoReturn

import typer

from rulecheck import __version__
from rulecheck.config import default_ruleset_template
from rulecheck.errors import RulecheckError
from rulecheck.output import render
from rulecheck.rules import list_check_kinds
from rulecheck.runner import EXIT_ERROR, exit_code_for, load_rule_set, run_check

app = typer.Typer(
    name="rulecheck",
    no_args_is_help=True,
    help="Check an agent project tree against its development rules.",
)


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=version_callback),
    ] = False,
) -> None:
    """Root command callback."""
    _ = version


@app.command("check")
def check_command(
    project_root: Annotated[Path, typer.Argument(help="Project root to check.")] = Path("."),
    ruleset: Annotated[
        Path | None,
        typer.Option("--ruleset", help="Path to ruleset TOML file."),
    ] = None,
    format: Annotated[
        str | None,
        typer.Option(help="Output format: structured|human.", show_default="human"),
    ] = None,
    exclude: Annotated[
        list[str] | None,
        typer.Option(help="Extra glob of paths to leave out of the scan."),
    ] = None,
    jobs: Annotated[int, typer.Option(min=1, help="Evaluate rules on N threads.")] = 1,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output.")] = False,
) -> None:
    """Scan a project and report rule violations."""
    _configure_logging(verbose)
    try:
        ctx = run_check(project_root, ruleset_path=ruleset, exclude=exclude, jobs=jobs)
        output = render(ctx.report, (format or ctx.config.format).lower())
    except RulecheckError as exc:
        _fail(exc)

    typer.echo(output)
    raise typer.Exit(code=exit_code_for(ctx.report))


@app.command("rules")
def rules_command(
    project_root: Annotated[Path, typer.Argument(help="Project root.")] = Path("."),
    ruleset: Annotated[
        Path | None,
        typer.Option("--ruleset", help="Path to ruleset TOML file."),
    ] = None,
    format: Annotated[str, typer.Option(help="Output format: structured|human.")] = "human",
    kinds: Annotated[
        bool,
        typer.Option("--kinds", help="List supported rule kinds instead of rules."),
    ] = False,
) -> None:
    """List the resolved rules in evaluation order."""
    output_format = format.lower()
    if output_format not in {"structured", "human"}:
        raise typer.BadParameter("format must be one of: structured, human", param_hint="--format")

    if kinds:
        kind_info = list_check_kinds()
        if output_format == "structured":
            payload = {
                "kinds": [
                    {"kind": item.kind, "name": item.name, "description": item.description}
                    for item in kind_info
                ]
            }
            typer.echo(json.dumps(payload, sort_keys=True))
            return
        lines = ["Rule kinds:"]
        lines.extend(f"- {item.kind} - {item.description}" for item in kind_info)
        typer.echo("\n".join(lines))
        return

    try:
        _, rule_set = load_rule_set(project_root, ruleset)
    except RulecheckError as exc:
        _fail(exc)

    if output_format == "structured":
        payload = {
            "rules": [rule.to_dict() for rule in rule_set],
            "meta": {"source": rule_set.source},
        }
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = [f"Rules ({rule_set.source or 'defaults'}):"]
    for rule in rule_set:
        lines.append(
            f"- {rule.rule_id} [{rule.severity} {rule.category}] {rule.kind} - {rule.description}"
        )
    typer.echo("\n".join(lines))


@app.command("init")
def init_command(
    out: Annotated[Path, typer.Option(help="Output path for starter ruleset TOML.")] = Path(
        ".rulecheck.toml"
    ),
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite if file already exists."),
    ] = False,
) -> None:
    """Create a starter ruleset file."""
    out_path = out.resolve()
    if out_path.exists() and not force:
        raise typer.BadParameter(
            f"Refusing to overwrite existing file: {out_path}. Use --force to overwrite."
        )
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(default_ruleset_template(), encoding="utf-8")
    typer.echo(f"Wrote starter ruleset: {out_path}")


@app.command("validate")
def validate_command(
    ruleset: Annotated[
        Path,
        typer.Option("--ruleset", help="Path to ruleset TOML file to validate."),
    ] = Path(".rulecheck.toml"),
    format: Annotated[str, typer.Option(help="Output format: structured|human.")] = "human",
) -> None:
    """Validate a ruleset file and report the rules it activates."""
    output_format = format.lower()
    if output_format not in {"structured", "human"}:
        raise typer.BadParameter("format must be one of: structured, human", param_hint="--format")

    try:
        app_config, rule_set = load_rule_set(Path.cwd(), ruleset)
    except RulecheckError as exc:
        _fail(exc)

    payload = {
        "ok": True,
        "source": app_config.source,
        "config": app_config.to_dict(),
        "rule_ids": rule_set.ids(),
    }
    if output_format == "structured":
        typer.echo(json.dumps(payload, sort_keys=True))
        return
    typer.echo(
        "\n".join(
            [
                "Ruleset is valid.",
                f"- source: {payload['source']}",
                f"- format: {app_config.format}",
                f"- exclude: {app_config.exclude}",
                f"- max_text_bytes: {app_config.max_text_bytes}",
                f"- rule_ids: {payload['rule_ids']}",
            ]
        )
    )


def main() -> None:
    """Console script entrypoint."""
    app()


def _fail(exc: RulecheckError) -> NoReturn:
    typer.echo(f"error: {exc}", err=True)
    raise typer.Exit(code=EXIT_ERROR)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )
