"""Forbidden content pattern check."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from rulecheck.config import as_str, as_str_list, reject_unknown_keys
from rulecheck.errors import ConfigError
from rulecheck.rules.base import Finding, clip_line

if TYPE_CHECKING:
    from rulecheck.scanner import ProjectSnapshot


class ForbiddenContentCheck:
    """Flags files matching the globs that contain a line matching a forbidden regex.

    The pattern is searched line by line; only the first matching line per file
    is reported.
    """

    kind = "forbidden_content"

    def __init__(self, globs: list[str], pattern: str) -> None:
        self._globs = tuple(globs)
        self._pattern = pattern
        self._regex = re.compile(pattern)

    @classmethod
    def from_params(cls, params: Mapping[str, Any], field_name: str) -> ForbiddenContentCheck:
        reject_unknown_keys(params, {"globs", "pattern"}, field_name)
        globs = as_str_list(params.get("globs"), f"{field_name}.globs")
        if not globs:
            raise ConfigError(f"{field_name}.globs must not be empty")
        pattern = as_str(params.get("pattern"), f"{field_name}.pattern")
        try:
            return cls(globs, pattern)
        except re.error as exc:
            raise ConfigError(f"{field_name}.pattern is not a valid regex: {exc}") from exc

    def check(self, snapshot: ProjectSnapshot) -> list[Finding]:
        findings: list[Finding] = []
        for path in snapshot.match_any(self._globs):
            hit = next(
                (
                    (line_no, line)
                    for line_no, line in enumerate(snapshot.text(path).splitlines(), start=1)
                    if self._regex.search(line)
                ),
                None,
            )
            if hit is None:
                continue
            line_no, line = hit
            findings.append(
                Finding(
                    message=f"Forbidden content on line {line_no}: `{clip_line(line)}`",
                    path=path,
                )
            )
        return findings

    def params(self) -> dict[str, Any]:
        return {"globs": list(self._globs), "pattern": self._pattern}
