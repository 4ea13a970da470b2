"""Base rule types, check protocol, and violation model."""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from rulecheck.scanner import ProjectSnapshot

CATEGORIES = ("structure", "style", "testing", "workflow", "deployment")
INTERNAL_CATEGORY = "internal"
SEVERITIES = ("MUST", "SHOULD")


@dataclass(frozen=True, slots=True)
class Finding:
    """A single failed constraint emitted by a check, before rule metadata is attached."""

    message: str
    path: str | None = None


@dataclass(frozen=True, slots=True)
class Violation:
    """A failed constraint scoped to a rule and optionally a file."""

    rule_id: str
    severity: str
    category: str
    message: str
    path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "severity": self.severity,
            "category": self.category,
            "path": self.path,
            "message": self.message,
        }


class Check(Protocol):
    """Protocol for predicate shapes evaluated against a project snapshot."""

    kind: str

    def check(self, snapshot: ProjectSnapshot) -> list[Finding]:
        """Return findings for every place the snapshot breaks the constraint."""

    def params(self) -> dict[str, Any]:
        """Return the parameters the check was built from."""


@dataclass(frozen=True, slots=True)
class Rule:
    """A loaded, immutable rule: metadata plus the check implementing its predicate."""

    rule_id: str
    category: str
    severity: str
    description: str
    check: Check

    @property
    def kind(self) -> str:
        return self.check.kind

    def evaluate(self, snapshot: ProjectSnapshot) -> list[Violation]:
        """Run the check and attach rule metadata to each finding."""
        return [
            Violation(
                rule_id=self.rule_id,
                severity=self.severity,
                category=self.category,
                message=finding.message,
                path=finding.path,
            )
            for finding in self.check.check(snapshot)
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.rule_id,
            "kind": self.kind,
            "category": self.category,
            "severity": self.severity,
            "description": self.description,
            "params": self.check.params(),
        }


def matches_glob(path: str, pattern: str) -> bool:
    """Match a relative POSIX path against a glob; a leading ``**/`` also matches the root."""
    if fnmatch.fnmatchcase(path, pattern):
        return True
    return pattern.startswith("**/") and fnmatch.fnmatchcase(path, pattern[3:])


def matches_any(path: str, patterns: list[str] | tuple[str, ...]) -> bool:
    return any(matches_glob(path, pattern) for pattern in patterns)


def clip_line(content: str, max_len: int = 80) -> str:
    stripped = content.strip()
    if len(stripped) <= max_len:
        return stripped
    return stripped[: max_len - 3] + "..."
