"""Line-length limit check."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from rulecheck.config import as_int, as_str_list, reject_unknown_keys
from rulecheck.errors import ConfigError
from rulecheck.rules.base import Finding

if TYPE_CHECKING:
    from rulecheck.scanner import ProjectSnapshot


class LineLengthCheck:
    """Flags files matching the globs that contain lines longer than the limit."""

    kind = "max_line_length"

    def __init__(self, globs: list[str], max_length: int) -> None:
        self._globs = tuple(globs)
        self._max_length = max_length

    @classmethod
    def from_params(cls, params: Mapping[str, Any], field_name: str) -> LineLengthCheck:
        reject_unknown_keys(params, {"globs", "max"}, field_name)
        globs = as_str_list(params.get("globs"), f"{field_name}.globs")
        if not globs:
            raise ConfigError(f"{field_name}.globs must not be empty")
        max_length = as_int(params.get("max"), f"{field_name}.max")
        if max_length <= 0:
            raise ConfigError(f"{field_name}.max must be > 0")
        return cls(globs, max_length)

    def check(self, snapshot: ProjectSnapshot) -> list[Finding]:
        findings: list[Finding] = []
        for path in snapshot.match_any(self._globs):
            too_long = [
                (line_no, len(line))
                for line_no, line in enumerate(snapshot.text(path).splitlines(), start=1)
                if len(line) > self._max_length
            ]
            if not too_long:
                continue
            first_line, first_length = too_long[0]
            findings.append(
                Finding(
                    message=(
                        f"{len(too_long)} line(s) exceed {self._max_length} characters "
                        f"(first: line {first_line}, {first_length} characters)."
                    ),
                    path=path,
                )
            )
        return findings

    def params(self) -> dict[str, Any]:
        return {"globs": list(self._globs), "max": self._max_length}
