"""Required file content check."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from rulecheck.config import as_str, as_str_list, reject_unknown_keys
from rulecheck.errors import ConfigError
from rulecheck.rules.base import Finding

if TYPE_CHECKING:
    from rulecheck.scanner import ProjectSnapshot


class RequiredContentCheck:
    """Requires a file to exist and contain every listed substring."""

    kind = "required_content"

    def __init__(self, path: str, substrings: list[str]) -> None:
        self._path = path
        self._substrings = tuple(substrings)

    @classmethod
    def from_params(cls, params: Mapping[str, Any], field_name: str) -> RequiredContentCheck:
        reject_unknown_keys(params, {"path", "substrings"}, field_name)
        substrings = as_str_list(params.get("substrings"), f"{field_name}.substrings")
        if not substrings:
            raise ConfigError(f"{field_name}.substrings must not be empty")
        return cls(as_str(params.get("path"), f"{field_name}.path"), substrings)

    def check(self, snapshot: ProjectSnapshot) -> list[Finding]:
        if not snapshot.has_file(self._path):
            return [Finding(message=f"Required file '{self._path}' is missing.", path=self._path)]

        text = snapshot.text(self._path)
        missing = [item for item in self._substrings if item not in text]
        if not missing:
            return []
        joined = ", ".join(f"'{item}'" for item in missing)
        return [Finding(message=f"Missing required content: {joined}.", path=self._path)]

    def params(self) -> dict[str, Any]:
        return {"path": self._path, "substrings": list(self._substrings)}
