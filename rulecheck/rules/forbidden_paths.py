"""Forbidden file pattern check."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from rulecheck.config import as_str_list, reject_unknown_keys
from rulecheck.errors import ConfigError
from rulecheck.rules.base import Finding, matches_glob

if TYPE_CHECKING:
    from rulecheck.scanner import ProjectSnapshot


class ForbiddenPathCheck:
    """Flags every file whose path matches a forbidden glob."""

    kind = "forbidden_path"

    def __init__(self, globs: list[str]) -> None:
        self._globs = tuple(globs)

    @classmethod
    def from_params(cls, params: Mapping[str, Any], field_name: str) -> ForbiddenPathCheck:
        reject_unknown_keys(params, {"globs"}, field_name)
        globs = as_str_list(params.get("globs"), f"{field_name}.globs")
        if not globs:
            raise ConfigError(f"{field_name}.globs must not be empty")
        return cls(globs)

    def check(self, snapshot: ProjectSnapshot) -> list[Finding]:
        findings: list[Finding] = []
        for path in snapshot.paths:
            pattern = next((item for item in self._globs if matches_glob(path, item)), None)
            if pattern is None:
                continue
            findings.append(
                Finding(message=f"Forbidden file present (matches '{pattern}').", path=path)
            )
        return findings

    def params(self) -> dict[str, Any]:
        return {"globs": list(self._globs)}
