"""Configuration loading for rulecheck."""

from __future__ import annotations

import math
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rulecheck.errors import ConfigError

CONFIG_FILENAMES = (".rulecheck.toml", "rulecheck.toml")
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TOOL_KEYS = ("rulecheck",)
OUTPUT_FORMATS = ("structured", "human")
DEFAULT_MAX_TEXT_BYTES = 1_000_000
CONFIG_KEYS = {"format", "exclude", "max_text_bytes", "include_defaults", "disable", "rules"}


@dataclass(slots=True)
class RuleSetConfig:
    """Rule declarations resolved from a ruleset file."""

    include_defaults: bool = True
    disable: list[str] = field(default_factory=list)
    definitions: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "include_defaults": self.include_defaults,
            "disable": list(self.disable),
            "rules": [dict(item) for item in self.definitions],
        }


@dataclass(slots=True)
class AppConfig:
    """Runtime configuration values resolved from project files."""

    format: str = "human"
    exclude: list[str] = field(default_factory=list)
    max_text_bytes: int = DEFAULT_MAX_TEXT_BYTES
    ruleset: RuleSetConfig = field(default_factory=RuleSetConfig)
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format,
            "exclude": list(self.exclude),
            "max_text_bytes": self.max_text_bytes,
            "ruleset": self.ruleset.to_dict(),
            "source": self.source,
        }


def load_app_config(project_root: Path, ruleset_path: Path | None = None) -> AppConfig:
    """Load config from an explicit ruleset path or project-local files with precedence."""
    project_root = project_root.resolve()
    if ruleset_path is not None:
        resolved = ruleset_path if ruleset_path.is_absolute() else (Path.cwd() / ruleset_path)
        if not resolved.exists():
            raise ConfigError(f"Ruleset file does not exist: {resolved}")
        mapping = extract_config_mapping(load_toml(resolved), source_path=resolved)
        return config_from_mapping(mapping, source=str(resolved))

    for filename in CONFIG_FILENAMES:
        resolved = project_root / filename
        if resolved.exists():
            mapping = extract_config_mapping(load_toml(resolved), source_path=resolved)
            return config_from_mapping(mapping, source=str(resolved))

    pyproject_path = project_root / PYPROJECT_FILENAME
    if pyproject_path.exists():
        try:
            loaded = load_toml(pyproject_path)
        except ConfigError:
            # A broken pyproject is reported by the rules that read it.
            return AppConfig()
        mapping = extract_config_mapping(loaded, source_path=pyproject_path)
        if mapping:
            return config_from_mapping(mapping, source=str(pyproject_path))

    return AppConfig()


def default_ruleset_template() -> str:
    """Return a starter ruleset that users can customize."""
    return "\n".join(
        [
            'format = "human"',
            'exclude = ["build/**", "dist/**"]',
            "",
            "# Keep the built-in agent project conventions and add rules below.",
            "include_defaults = true",
            "disable = []",
            "",
            "[[rules]]",
            'id = "workflow.readme"',
            'kind = "path_exists"',
            'category = "workflow"',
            'severity = "SHOULD"',
            'description = "Projects document setup and usage in a README."',
            'path = "README.md"',
            'type = "file"',
            "",
            "[[rules]]",
            'id = "deployment.no-secrets-in-notebooks"',
            'kind = "forbidden_content"',
            'category = "deployment"',
            'severity = "MUST"',
            'description = "Deployment notebooks must not embed API keys."',
            'globs = ["**/*.ipynb"]',
            "pattern = '(?i)(api[_-]?key|secret)\\s*=\\s*\\S{16,}'",
            "",
            "[[rules]]",
            'id = "style.scripts-line-length"',
            'kind = "max_line_length"',
            'category = "style"',
            'severity = "SHOULD"',
            'description = "Helper scripts may use a wider line limit."',
            'globs = ["scripts/**/*.py"]',
            "max = 120",
            "",
        ]
    )


def load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as file_obj:
            loaded = tomllib.load(file_obj)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc.strerror or exc}") from exc
    if not isinstance(loaded, dict):
        return {}
    return loaded


def extract_config_mapping(loaded: Mapping[str, Any], *, source_path: Path) -> dict[str, Any]:
    if source_path.name == PYPROJECT_FILENAME:
        section = _find_pyproject_tool_section(loaded)
        return section if section is not None else {}

    tool_section = _find_pyproject_tool_section(loaded)
    if tool_section is not None:
        return tool_section
    return dict(loaded)


def _find_pyproject_tool_section(loaded: Mapping[str, Any]) -> dict[str, Any] | None:
    tool = loaded.get("tool")
    if not isinstance(tool, dict):
        return None
    for key in PYPROJECT_TOOL_KEYS:
        section = tool.get(key)
        if isinstance(section, dict):
            return section
    return None


def config_from_mapping(mapping: Mapping[str, Any], *, source: str | None) -> AppConfig:
    """Validate a raw config table and build an ``AppConfig``."""
    max_text_bytes = as_int(
        mapping.get("max_text_bytes", DEFAULT_MAX_TEXT_BYTES),
        "max_text_bytes",
    )
    if max_text_bytes <= 0:
        raise ConfigError("max_text_bytes must be > 0")

    return AppConfig(
        format=as_choice(mapping.get("format", "human"), set(OUTPUT_FORMATS), "format"),
        exclude=as_str_list(mapping.get("exclude"), "exclude"),
        max_text_bytes=max_text_bytes,
        ruleset=parse_ruleset_config(mapping),
        source=source,
    )


def parse_ruleset_config(mapping: Mapping[str, Any]) -> RuleSetConfig:
    reject_unknown_keys(mapping, CONFIG_KEYS, "ruleset")
    return RuleSetConfig(
        include_defaults=as_bool(mapping.get("include_defaults", True), "include_defaults"),
        disable=as_str_list(mapping.get("disable"), "disable"),
        definitions=as_table_list(mapping.get("rules"), "rules"),
    )


def as_table_list(value: Any, field_name: str) -> list[dict[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"{field_name} must be a list of tables")
    output: list[dict[str, Any]] = []
    for item in value:
        if not isinstance(item, dict):
            raise ConfigError(f"{field_name} must be a list of tables")
        output.append(item)
    return output


def as_str_list(value: Any, field_name: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"{field_name} must be a list of strings")
    items: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ConfigError(f"{field_name} must be a list of strings")
        items.append(item)
    return items


def as_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"{field_name} must be a string")
    return value


def as_choice(raw: Any, allowed: set[str], field_name: str) -> str:
    value = str(raw).lower()
    if value not in allowed:
        choices = ", ".join(sorted(allowed))
        raise ConfigError(f"{field_name} must be one of: {choices}")
    return value


def as_int(raw: Any, field_name: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ConfigError(f"{field_name} must be an integer")
    return raw


def as_bool(raw: Any, field_name: str) -> bool:
    if not isinstance(raw, bool):
        raise ConfigError(f"{field_name} must be a boolean")
    return raw


def as_float(raw: Any, field_name: str) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)) or math.isnan(raw):
        raise ConfigError(f"{field_name} must be a number")
    return float(raw)


def reject_unknown_keys(params: Mapping[str, Any], allowed: set[str], field_name: str) -> None:
    unknown = [key for key in params if key not in allowed]
    if unknown:
        joined = ", ".join(sorted(unknown))
        raise ConfigError(f"{field_name} has unknown keys: {joined}")
