"""Compliance evaluation orchestration."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from rulecheck.rules.base import INTERNAL_CATEGORY, SEVERITIES, Rule, Violation
from rulecheck.ruleset import RuleSet
from rulecheck.scanner import ProjectSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ComplianceReport:
    """Ordered violations plus the pass/fail verdict for one evaluation."""

    violations: tuple[Violation, ...]
    warnings: tuple[str, ...] = ()
    rule_count: int = 0
    counts: Mapping[str, int] = field(init=False, compare=False)
    passed: bool = field(init=False)

    def __post_init__(self) -> None:
        counts = {severity: 0 for severity in SEVERITIES}
        for violation in self.violations:
            counts[violation.severity] = counts.get(violation.severity, 0) + 1
        object.__setattr__(self, "counts", MappingProxyType(counts))
        object.__setattr__(self, "passed", counts.get("MUST", 0) == 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "counts": dict(self.counts),
            "violations": [violation.to_dict() for violation in self.violations],
            "warnings": list(self.warnings),
            "rule_count": self.rule_count,
        }


def evaluate(rule_set: RuleSet, snapshot: ProjectSnapshot, *, jobs: int = 1) -> ComplianceReport:
    """Apply every rule to the snapshot in declaration order.

    A rule whose check raises yields a single ``internal`` violation and the
    remaining rules still run. With ``jobs > 1`` rules run on a thread pool
    and results are reassembled in declaration order.
    """
    rules = rule_set.rules()
    if jobs > 1 and len(rules) > 1:
        with ThreadPoolExecutor(max_workers=jobs) as executor:
            per_rule = list(executor.map(lambda rule: _evaluate_rule(rule, snapshot), rules))
    else:
        per_rule = [_evaluate_rule(rule, snapshot) for rule in rules]

    violations: list[Violation] = []
    for rule_violations in per_rule:
        violations.extend(rule_violations)

    return ComplianceReport(
        violations=tuple(violations),
        warnings=snapshot.warnings,
        rule_count=len(rules),
    )


def _evaluate_rule(rule: Rule, snapshot: ProjectSnapshot) -> list[Violation]:
    try:
        return rule.evaluate(snapshot)
    except Exception as exc:
        logger.warning("Rule %s failed: %s: %s", rule.rule_id, exc.__class__.__name__, exc)
        return [
            Violation(
                rule_id=rule.rule_id,
                severity=rule.severity,
                category=INTERNAL_CATEGORY,
                message=f"Rule could not be evaluated: {exc.__class__.__name__}: {exc}",
            )
        ]
