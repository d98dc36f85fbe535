"""Pydantic models for ledger and rule documents.

Documents are JSON-shaped payloads: a ledger seeds a store with weighted
facts, a rule set carries rule definitions. Shape errors surface as
pydantic ``ValidationError``; rules that parse but refer to unbound names
raise ``RuleValidationError``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

from factfire.errors import SchemaError
from factfire.fact_store.store import Store
from factfire.ir.fact import Fact
from factfire.ir.rule import Rule
from factfire.ir.values import VRecord, value_from_dict
from factfire.rules.validator import RuleValidator


class FactEntryModel(BaseModel):
    name: str = Field(min_length=1)
    value: dict[str, dict[str, Any]] = Field(default_factory=dict)
    by: list[str] = Field(default_factory=list)
    obs: list[str] = Field(default_factory=list)
    rules: list[str] = Field(default_factory=list)
    weight: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def _check_fact(self):
        self.to_fact()
        return self

    def to_fact(self) -> Fact:
        try:
            fields = [(name, value_from_dict(item)) for name, item in self.value.items()]
            return Fact(
                name=self.name,
                value=VRecord(fields),
                by=self.by,
                obs=self.obs,
                rules=self.rules,
            )
        except SchemaError as exc:
            raise ValueError(f"Invalid fact '{self.name}': {exc}") from exc


class LedgerDocument(BaseModel):
    facts: list[FactEntryModel] = Field(default_factory=list)

    def to_store(self) -> Store:
        return Store((entry.to_fact(), entry.weight) for entry in self.facts)


class GatherModel(BaseModel):
    fact_name: str = Field(min_length=1)
    predicates: list[dict[str, Any]] = Field(default_factory=list)


class SelectModel(BaseModel):
    kind: Literal["any", "first", "last"] = "any"
    key: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _check_key(self):
        if self.kind == "any" and self.key is not None:
            raise ValueError("Select 'any' takes no key.")
        if self.kind != "any" and self.key is None:
            raise ValueError(f"Select '{self.kind}' requires a key.")
        return self


class ConsumeModel(BaseModel):
    kind: Literal["retain", "weight"] = "retain"
    weight: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _check_weight(self):
        if (self.kind == "weight") != (self.weight is not None):
            raise ValueError("Consume 'weight' requires a weight term; 'retain' takes none.")
        return self


class GainModel(BaseModel):
    kind: Literal["none", "term"] = "none"
    auth: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _check_auth(self):
        if (self.kind == "term") != (self.auth is not None):
            raise ValueError("Gain 'term' requires an auth term; 'none' takes none.")
        return self


class MatchModel(BaseModel):
    binder: str = Field(min_length=1)
    gather: GatherModel
    select: SelectModel = Field(default_factory=SelectModel)
    consume: ConsumeModel = Field(default_factory=ConsumeModel)
    gain: GainModel = Field(default_factory=GainModel)


class RuleModel(BaseModel):
    name: str = Field(min_length=1)
    matches: list[MatchModel] = Field(default_factory=list)
    body: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _check_terms(self):
        try:
            self.to_rule()
        except SchemaError as exc:
            raise ValueError(f"Invalid rule '{self.name}': {exc}") from exc
        return self

    def to_rule(self) -> Rule:
        return Rule.from_dict(self.model_dump(exclude_none=True))


class RuleDocument(BaseModel):
    rules: list[RuleModel] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique(self):
        names = [rule.name for rule in self.rules]
        dupes = sorted({name for name in names if names.count(name) > 1})
        if dupes:
            raise ValueError(f"Duplicate rule names: {', '.join(dupes)}")
        return self

    def to_rules(self) -> list[Rule]:
        rules = [model.to_rule() for model in self.rules]
        validator = RuleValidator()
        for rule in rules:
            validator.validate(rule)
        return rules


def load_ledger(payload: dict[str, Any]) -> Store:
    return LedgerDocument.model_validate(payload).to_store()


def load_rules(payload: dict[str, Any]) -> list[Rule]:
    return RuleDocument.model_validate(payload).to_rules()


def load_ledger_file(path: Path) -> Store:
    with Path(path).open("r", encoding="utf-8") as handle:
        return load_ledger(json.load(handle))


def load_rules_file(path: Path) -> list[Rule]:
    with Path(path).open("r", encoding="utf-8") as handle:
        return load_rules(json.load(handle))
