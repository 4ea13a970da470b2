"""Numeric threshold check over a TOML setting."""

from __future__ import annotations

import math
import tomllib
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from rulecheck.config import as_float, as_str, reject_unknown_keys
from rulecheck.errors import ConfigError
from rulecheck.rules.base import Finding

if TYPE_CHECKING:
    from rulecheck.scanner import ProjectSnapshot


class ConfigThresholdCheck:
    """Requires a numeric TOML setting, addressed by a dotted key, to meet a minimum.

    Used for the coverage gate, e.g. ``tool.coverage.report.fail_under`` in
    ``pyproject.toml``.
    """

    kind = "min_config_value"

    def __init__(self, path: str, key: str, minimum: float) -> None:
        self._path = path
        self._key = key
        self._minimum = minimum

    @classmethod
    def from_params(cls, params: Mapping[str, Any], field_name: str) -> ConfigThresholdCheck:
        reject_unknown_keys(params, {"file", "key", "min"}, field_name)
        key = as_str(params.get("key"), f"{field_name}.key")
        if not key or any(not part for part in key.split(".")):
            raise ConfigError(f"{field_name}.key must be a dotted key like 'tool.section.name'")
        return cls(
            as_str(params.get("file"), f"{field_name}.file"),
            key,
            as_float(params.get("min"), f"{field_name}.min"),
        )

    def check(self, snapshot: ProjectSnapshot) -> list[Finding]:
        if not snapshot.has_file(self._path):
            return [Finding(message=f"Config file '{self._path}' is missing.", path=self._path)]

        try:
            table: Any = tomllib.loads(snapshot.text(self._path))
        except tomllib.TOMLDecodeError as exc:
            return [Finding(message=f"Config file is not valid TOML: {exc}", path=self._path)]

        for part in self._key.split("."):
            if not isinstance(table, dict) or part not in table:
                return [
                    Finding(
                        message=(
                            f"Setting '{self._key}' is not set; "
                            f"expected >= {_format_number(self._minimum)}."
                        ),
                        path=self._path,
                    )
                ]
            table = table[part]

        if isinstance(table, bool) or not isinstance(table, (int, float)) or math.isnan(table):
            return [Finding(message=f"Setting '{self._key}' must be a number.", path=self._path)]
        if table < self._minimum:
            return [
                Finding(
                    message=(
                        f"Setting '{self._key}' is {_format_number(table)}; "
                        f"expected >= {_format_number(self._minimum)}."
                    ),
                    path=self._path,
                )
            ]
        return []

    def params(self) -> dict[str, Any]:
        return {"file": self._path, "key": self._key, "min": self._minimum}


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)
