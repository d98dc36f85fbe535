"""Named rule registry with JSON persistence and an on-disk rule cache."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Iterable

from diskcache import Cache

from factfire.errors import RuleRegistryError, SchemaError
from factfire.ir.rule import Rule
from factfire.rules.validator import RuleValidator


_RULE_CACHE_ENV = "FACTFIRE_RULE_CACHE_DIR"
_CACHE_ENV = "FACTFIRE_CACHE_DIR"


def _rule_cache_dir() -> Path:
    env_dir = os.environ.get(_RULE_CACHE_ENV) or os.environ.get(_CACHE_ENV)
    if env_dir:
        return Path(env_dir).expanduser()
    return Path(tempfile.gettempdir()) / "factfire" / "rule_cache"


def _open_rule_cache() -> Cache:
    return Cache(str(_rule_cache_dir()))


def cache_rule(rule: Rule) -> None:
    cache = _open_rule_cache()
    try:
        cache.set(rule.name, rule.to_dict())
    finally:
        cache.close()


def load_rules_from_cache() -> list[Rule]:
    cache = _open_rule_cache()
    try:
        items = [cache[key] for key in sorted(cache.iterkeys())]
    finally:
        cache.close()
    rules: list[Rule] = []
    for item in items:
        try:
            rules.append(Rule.from_dict(item))
        except SchemaError as exc:
            raise RuleRegistryError(f"Cached rule could not be decoded: {exc}") from exc
    return rules


def clear_rule_cache() -> None:
    cache = _open_rule_cache()
    try:
        cache.clear()
    finally:
        cache.close()


class RuleRegistry:
    """Manage rules by name."""

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: dict[str, Rule] = {}
        self._validator = RuleValidator()
        for rule in rules:
            self.add(rule)

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def add(self, rule: Rule) -> None:
        if not isinstance(rule, Rule):
            raise RuleRegistryError("Registry entries must be Rule instances.")
        if rule.name in self._rules:
            raise RuleRegistryError(f"Rule {rule.name} already registered.")
        self._validator.validate(rule)
        self._rules[rule.name] = rule

    def get(self, name: str) -> Rule:
        rule = self._rules.get(name)
        if rule is None:
            raise RuleRegistryError(f"Rule not found: {name}")
        return rule

    def names(self) -> list[str]:
        return list(self._rules)

    def all_rules(self) -> list[Rule]:
        return list(self._rules.values())

    def to_dict(self) -> dict[str, object]:
        return {"rules": [rule.to_dict() for rule in self._rules.values()]}

    def save(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            json.dump(self.to_dict(), handle, ensure_ascii=False, indent=2)

    def cache_all(self) -> None:
        for rule in self._rules.values():
            cache_rule(rule)

    @staticmethod
    def from_dict(data: dict[str, object]) -> "RuleRegistry":
        items = data.get("rules", [])
        if not isinstance(items, list):
            raise RuleRegistryError("Registry rules must be a list.")
        registry = RuleRegistry()
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                raise RuleRegistryError(f"Registry entry {index} must be a dict.")
            try:
                rule = Rule.from_dict(item)
            except SchemaError as exc:
                raise RuleRegistryError(f"Registry entry {index} is invalid: {exc}") from exc
            registry.add(rule)
        return registry

    @staticmethod
    def load(path: Path) -> "RuleRegistry":
        path = Path(path)
        if not path.exists():
            raise RuleRegistryError(f"Registry file not found: {path}")
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        return RuleRegistry.from_dict(data)

    @staticmethod
    def from_cache() -> "RuleRegistry":
        return RuleRegistry(load_rules_from_cache())
