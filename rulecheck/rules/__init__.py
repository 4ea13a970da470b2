"""Rules package."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from rulecheck.config import as_choice, as_str
from rulecheck.errors import ConfigError
from rulecheck.rules.base import CATEGORIES, SEVERITIES, Check, Rule
from rulecheck.rules.config_threshold import ConfigThresholdCheck
from rulecheck.rules.forbidden_content import ForbiddenContentCheck
from rulecheck.rules.forbidden_paths import ForbiddenPathCheck
from rulecheck.rules.line_length import LineLengthCheck
from rulecheck.rules.path_exists import PathExistsCheck
from rulecheck.rules.required_content import RequiredContentCheck

RULE_KEYS = {"id", "kind", "category", "severity", "description"}


@dataclass(frozen=True, slots=True)
class CheckKindInfo:
    """Metadata for a predicate shape usable in ruleset files."""

    kind: str
    name: str
    description: str


@dataclass(frozen=True, slots=True)
class _CheckSpec:
    kind: str
    factory: Callable[[Mapping[str, Any], str], Check]
    name: str
    description: str


def _spec(check_cls: Any) -> _CheckSpec:
    return _CheckSpec(
        kind=check_cls.kind,
        factory=check_cls.from_params,
        name=check_cls.__name__,
        description=(check_cls.__doc__ or "").strip().splitlines()[0],
    )


_CHECK_SPECS: dict[str, _CheckSpec] = {
    spec.kind: spec
    for spec in (
        _spec(PathExistsCheck),
        _spec(ForbiddenPathCheck),
        _spec(ForbiddenContentCheck),
        _spec(RequiredContentCheck),
        _spec(LineLengthCheck),
        _spec(ConfigThresholdCheck),
    )
}

DEFAULT_RULE_DEFINITIONS: tuple[dict[str, Any], ...] = (
    {
        "id": "structure.agents-dir",
        "kind": "path_exists",
        "category": "structure",
        "severity": "MUST",
        "description": "Agent definitions live under src/agents/.",
        "path": "src/agents",
        "type": "dir",
    },
    {
        "id": "structure.tools-dir",
        "kind": "path_exists",
        "category": "structure",
        "severity": "MUST",
        "description": "Tool implementations live under src/tools/.",
        "path": "src/tools",
        "type": "dir",
    },
    {
        "id": "structure.tests-dir",
        "kind": "path_exists",
        "category": "structure",
        "severity": "MUST",
        "description": "Tests live under tests/.",
        "path": "tests",
        "type": "dir",
    },
    {
        "id": "structure.pyproject",
        "kind": "required_content",
        "category": "structure",
        "severity": "MUST",
        "description": "pyproject.toml declares the project, build system, and pytest settings.",
        "path": "pyproject.toml",
        "substrings": ["[project]", "[build-system]", "[tool.pytest.ini_options]"],
    },
    {
        "id": "style.line-length",
        "kind": "max_line_length",
        "category": "style",
        "severity": "SHOULD",
        "description": "Python lines stay within 100 characters.",
        "globs": ["**/*.py"],
        "max": 100,
    },
    {
        "id": "style.no-magic-commands",
        "kind": "forbidden_content",
        "category": "style",
        "severity": "MUST",
        "description": "Python modules do not contain notebook magic or shell escape commands.",
        "globs": ["**/*.py"],
        "pattern": r"^\s*[%!](pip|uv|conda|load_ext|run|cd|env|sh)\b",
    },
    {
        "id": "deployment.notebook-no-agent-code",
        "kind": "forbidden_content",
        "category": "deployment",
        "severity": "MUST",
        "description": "Deployment notebooks import agents from src/ instead of defining them.",
        "globs": ["**/*.ipynb"],
        "pattern": r"\bclass\s+\w+\s*[(:]",
    },
    {
        "id": "deployment.no-env-file",
        "kind": "forbidden_path",
        "category": "deployment",
        "severity": "MUST",
        "description": "Environment files with credentials are never committed.",
        "globs": ["**/.env"],
    },
    {
        "id": "testing.coverage-threshold",
        "kind": "min_config_value",
        "category": "testing",
        "severity": "SHOULD",
        "description": "Coverage reports fail under 80 percent.",
        "file": "pyproject.toml",
        "key": "tool.coverage.report.fail_under",
        "min": 80,
    },
)


def build_rule(definition: Mapping[str, Any]) -> Rule:
    """Validate one rule definition table and build its ``Rule``."""
    rule_id = as_str(definition.get("id"), "rules.id").strip()
    if not rule_id:
        raise ConfigError("rules.id must not be empty")
    field_name = f"rules[{rule_id}]"

    kind = as_str(definition.get("kind"), f"{field_name}.kind")
    spec = _CHECK_SPECS.get(kind)
    if spec is None:
        choices = ", ".join(sorted(_CHECK_SPECS))
        raise ConfigError(f"{field_name}.kind must be one of: {choices}")

    category = as_choice(definition.get("category"), set(CATEGORIES), f"{field_name}.category")
    severity = as_choice(
        definition.get("severity"),
        {item.lower() for item in SEVERITIES},
        f"{field_name}.severity",
    ).upper()
    description = as_str(definition.get("description", ""), f"{field_name}.description")

    params = {key: value for key, value in definition.items() if key not in RULE_KEYS}
    check = spec.factory(params, field_name)
    return Rule(
        rule_id=rule_id,
        category=category,
        severity=severity,
        description=description,
        check=check,
    )


def default_rules() -> list[Rule]:
    """Return the built-in rules mirroring the agent project conventions."""
    return [build_rule(definition) for definition in DEFAULT_RULE_DEFINITIONS]


def default_rule_ids() -> list[str]:
    return [str(definition["id"]) for definition in DEFAULT_RULE_DEFINITIONS]


def list_check_kinds() -> list[CheckKindInfo]:
    """Return metadata for every supported predicate shape."""
    return [
        CheckKindInfo(kind=spec.kind, name=spec.name, description=spec.description)
        for spec in _CHECK_SPECS.values()
    ]

