"""Loaded, ordered collections of rules."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

from rulecheck.config import (
    RuleSetConfig,
    extract_config_mapping,
    load_toml,
    parse_ruleset_config,
)
from rulecheck.errors import ConfigError
from rulecheck.rules import DEFAULT_RULE_DEFINITIONS, build_rule, default_rule_ids
from rulecheck.rules.base import Rule


class RuleSet:
    """Immutable, declaration-ordered set of rules with unique identifiers."""

    def __init__(self, rules: Iterable[Rule], *, source: str | None = None) -> None:
        ordered = tuple(rules)
        seen: set[str] = set()
        duplicates: list[str] = []
        for rule in ordered:
            if rule.rule_id in seen:
                duplicates.append(rule.rule_id)
            seen.add(rule.rule_id)
        if duplicates:
            joined = ", ".join(sorted(set(duplicates)))
            raise ConfigError(f"Duplicate rule ids: {joined}")
        self._rules = ordered
        self.source = source

    @classmethod
    def load(cls, source: Path | str | Mapping[str, Any] | None = None) -> RuleSet:
        """Load a ruleset from a TOML file path, a parsed table, or the built-in defaults."""
        if source is None:
            return cls.from_config(RuleSetConfig(), source=None)

        if isinstance(source, Mapping):
            return cls.from_config(parse_ruleset_config(source), source=None)

        path = Path(source)
        if not path.is_file():
            raise ConfigError(f"Ruleset file does not exist: {path}")
        mapping = extract_config_mapping(load_toml(path), source_path=path)
        return cls.from_config(parse_ruleset_config(mapping), source=str(path))

    @classmethod
    def from_config(cls, config: RuleSetConfig, *, source: str | None = None) -> RuleSet:
        """Build rules from resolved config.

        Built-in rules come first unless ``include_defaults`` is false. ``disable``
        removes built-in rules by id, which also lets a custom rule reuse the id.
        """
        known_defaults = set(default_rule_ids())
        unknown = [rule_id for rule_id in config.disable if rule_id not in known_defaults]
        if unknown:
            joined = ", ".join(sorted(set(unknown)))
            raise ConfigError(f"disable lists unknown built-in rule ids: {joined}")

        disabled = set(config.disable)
        definitions: list[Mapping[str, Any]] = []
        if config.include_defaults:
            definitions.extend(
                definition
                for definition in DEFAULT_RULE_DEFINITIONS
                if definition["id"] not in disabled
            )
        definitions.extend(config.definitions)
        return cls([build_rule(definition) for definition in definitions], source=source)

    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def ids(self) -> list[str]:
        return [rule.rule_id for rule in self._rules]

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RuleSet({len(self._rules)} rules, source={self.source!r})"
