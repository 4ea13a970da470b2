"""Required path structure check."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from rulecheck.config import as_choice, as_str, reject_unknown_keys
from rulecheck.errors import ConfigError
from rulecheck.rules.base import Finding

if TYPE_CHECKING:
    from rulecheck.scanner import ProjectSnapshot

PATH_TYPES = {"any", "dir", "file"}


class PathExistsCheck:
    """Requires a file or directory to exist, or at least one file to match a glob."""

    kind = "path_exists"

    def __init__(
        self,
        *,
        path: str | None = None,
        glob: str | None = None,
        path_type: str = "any",
    ) -> None:
        if (path is None) == (glob is None):
            raise ConfigError("path_exists needs exactly one of 'path' or 'glob'")
        self._path = path.strip("/") if path is not None else None
        self._glob = glob
        self._path_type = path_type

    @classmethod
    def from_params(cls, params: Mapping[str, Any], field_name: str) -> PathExistsCheck:
        reject_unknown_keys(params, {"path", "glob", "type"}, field_name)
        path = params.get("path")
        glob = params.get("glob")
        if (path is None) == (glob is None):
            raise ConfigError(f"{field_name} needs exactly one of 'path' or 'glob'")
        return cls(
            path=as_str(path, f"{field_name}.path") if path is not None else None,
            glob=as_str(glob, f"{field_name}.glob") if glob is not None else None,
            path_type=as_choice(params.get("type", "any"), PATH_TYPES, f"{field_name}.type"),
        )

    def check(self, snapshot: ProjectSnapshot) -> list[Finding]:
        if self._glob is not None:
            if snapshot.match(self._glob):
                return []
            return [Finding(message=f"No file matches required pattern '{self._glob}'.")]

        path = self._path or ""
        if self._path_type == "dir":
            if snapshot.has_dir(path):
                return []
            return [Finding(message=f"Required directory '{path}' is missing.", path=path)]
        if self._path_type == "file":
            if snapshot.has_file(path):
                return []
            return [Finding(message=f"Required file '{path}' is missing.", path=path)]
        if snapshot.has_dir(path) or snapshot.has_file(path):
            return []
        return [Finding(message=f"Required path '{path}' is missing.", path=path)]

    def params(self) -> dict[str, Any]:
        if self._glob is not None:
            return {"glob": self._glob}
        return {"path": self._path, "type": self._path_type}
