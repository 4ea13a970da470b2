"""Load → scan → evaluate pipeline shared by the command-line entry points."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from rulecheck.config import AppConfig, load_app_config
from rulecheck.engine import ComplianceReport, evaluate
from rulecheck.ruleset import RuleSet
from rulecheck.scanner import ProjectSnapshot, scan

EXIT_PASS = 0
EXIT_FAIL = 1
EXIT_ERROR = 2


@dataclass(slots=True)
class CheckContext:
    """Resolved inputs and outputs of one check run."""

    config: AppConfig
    rule_set: RuleSet
    snapshot: ProjectSnapshot
    report: ComplianceReport


def load_rule_set(
    project_root: Path,
    ruleset_path: Path | None = None,
) -> tuple[AppConfig, RuleSet]:
    """Resolve config and build the ruleset; raises ``ConfigError`` before any scanning."""
    app_config = load_app_config(project_root, ruleset_path=ruleset_path)
    rule_set = RuleSet.from_config(app_config.ruleset, source=app_config.source)
    return (app_config, rule_set)


def run_check(
    project_root: Path,
    *,
    ruleset_path: Path | None = None,
    exclude: list[str] | None = None,
    jobs: int = 1,
) -> CheckContext:
    app_config, rule_set = load_rule_set(project_root, ruleset_path)
    exclude_patterns = [*app_config.exclude, *(exclude or [])]
    snapshot = scan(
        project_root,
        exclude=exclude_patterns,
        max_text_bytes=app_config.max_text_bytes,
    )
    report = evaluate(rule_set, snapshot, jobs=jobs)
    return CheckContext(config=app_config, rule_set=rule_set, snapshot=snapshot, report=report)


def exit_code_for(report: ComplianceReport) -> int:
    return EXIT_PASS if report.passed else EXIT_FAIL
