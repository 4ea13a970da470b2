"""Report rendering."""

from __future__ import annotations

import json
from typing import Any

import click

from rulecheck import __version__
from rulecheck.engine import ComplianceReport
from rulecheck.errors import UnsupportedFormatError
from rulecheck.rules.base import CATEGORIES, INTERNAL_CATEGORY, SEVERITIES, Violation

FORMATS = ("structured", "human")


def render(report: ComplianceReport, format: str) -> str:
    """Render a report as ``structured`` JSON or a ``human`` summary."""
    if format == "structured":
        return render_structured(report)
    if format == "human":
        return render_human(report)
    choices = ", ".join(FORMATS)
    raise UnsupportedFormatError(f"Unsupported format '{format}'. Expected one of: {choices}")


def render_structured(report: ComplianceReport) -> str:
    """Render stable JSON output for CI and automation."""
    return json.dumps(build_structured_payload(report), sort_keys=True)


def build_structured_payload(report: ComplianceReport) -> dict[str, Any]:
    payload = report.to_dict()
    payload["meta"] = {
        "version": __version__,
        "rule_count": payload.pop("rule_count"),
    }
    return payload


def render_human(report: ComplianceReport) -> str:
    """Render violations grouped by category and severity with a trailing verdict."""
    verdict, color = _verdict(report)
    counts = ", ".join(f"{report.counts.get(severity, 0)} {severity}" for severity in SEVERITIES)
    lines: list[str] = [
        click.style(f"Compliance check: {verdict} ({counts})", fg=color, bold=True)
    ]

    if not report.violations:
        lines.append(f"No violations across {report.rule_count} rules.")

    for category, by_severity in _group(report.violations):
        lines.append(click.style(f"{category}:", bold=True))
        for severity, violations in by_severity:
            lines.append(f"  {severity}:")
            for violation in violations:
                lines.append(f"    - {_describe(violation)}")

    if report.warnings:
        lines.append(click.style("Warnings:", bold=True))
        for warning in report.warnings:
            lines.append(f"  - {warning}")

    lines.append(click.style(f"Result: {verdict}", fg=color, bold=True))
    return "\n".join(lines)


def _group(
    violations: tuple[Violation, ...],
) -> list[tuple[str, list[tuple[str, list[Violation]]]]]:
    category_order = [*CATEGORIES, INTERNAL_CATEGORY]
    extra = sorted({item.category for item in violations} - set(category_order))
    grouped: list[tuple[str, list[tuple[str, list[Violation]]]]] = []
    for category in [*category_order, *extra]:
        in_category = [item for item in violations if item.category == category]
        if not in_category:
            continue
        by_severity: list[tuple[str, list[Violation]]] = []
        for severity in SEVERITIES:
            matching = [item for item in in_category if item.severity == severity]
            if matching:
                by_severity.append((severity, matching))
        grouped.append((category, by_severity))
    return grouped


def _describe(violation: Violation) -> str:
    if violation.path:
        return f"[{violation.rule_id}] {violation.path}: {violation.message}"
    return f"[{violation.rule_id}] {violation.message}"


def _verdict(report: ComplianceReport) -> tuple[str, str]:
    if not report.passed:
        return ("FAIL", "red")
    if report.violations:
        return ("PASS", "yellow")
    return ("PASS", "green")
