"""Rule definitions: matches and the body that produces new facts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from factfire.errors import SchemaError
from factfire.ir.terms import Lit, Term, term_from_dict
from factfire.ir.values import UNIT


@dataclass(frozen=True, init=False)
class Gather:
    """Facts of one kind satisfying every predicate."""

    fact_name: str
    predicates: tuple[Term, ...]

    def __init__(self, fact_name: str, predicates: Iterable[Term] = ()) -> None:
        if not isinstance(fact_name, str) or not fact_name:
            raise SchemaError("Gather fact_name must be a non-empty string.")
        preds = tuple(predicates)
        for pred in preds:
            if not isinstance(pred, Term):
                raise SchemaError("Gather predicates must be Terms.")
        object.__setattr__(self, "fact_name", fact_name)
        object.__setattr__(self, "predicates", preds)

    def to_dict(self) -> dict[str, Any]:
        return {
            "fact_name": self.fact_name,
            "predicates": [pred.to_dict() for pred in self.predicates],
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Gather":
        if not isinstance(data, dict):
            raise SchemaError("Gather payload must be a dict.")
        preds = data.get("predicates", [])
        if not isinstance(preds, list):
            raise SchemaError("Gather predicates must be a list.")
        return Gather(data.get("fact_name"), [term_from_dict(pred) for pred in preds])


class Select:
    """Base class for selection strategies."""

    def to_dict(self) -> dict[str, Any]:  # pragma: no cover - interface
        raise NotImplementedError


@dataclass(frozen=True)
class SelectAny(Select):
    def to_dict(self) -> dict[str, Any]:
        return {"kind": "any"}


@dataclass(frozen=True)
class SelectFirst(Select):
    """Candidate with the smallest key; the earliest one among equal keys."""

    key: Term

    def __post_init__(self) -> None:
        if not isinstance(self.key, Term):
            raise SchemaError("SelectFirst key must be a Term.")

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "first", "key": self.key.to_dict()}


@dataclass(frozen=True)
class SelectLast(Select):
    """Candidate with the largest key; the latest one among equal keys."""

    key: Term

    def __post_init__(self) -> None:
        if not isinstance(self.key, Term):
            raise SchemaError("SelectLast key must be a Term.")

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "last", "key": self.key.to_dict()}


def select_from_dict(data: dict[str, Any]) -> Select:
    if not isinstance(data, dict):
        raise SchemaError("Select payload must be a dict.")
    kind = data.get("kind")
    if kind == "any":
        return SelectAny()
    if kind == "first":
        return SelectFirst(term_from_dict(data.get("key", {})))
    if kind == "last":
        return SelectLast(term_from_dict(data.get("key", {})))
    raise SchemaError(f"Unknown Select kind: {kind}")


class Consume:
    """Base class for consumption strategies."""

    def to_dict(self) -> dict[str, Any]:  # pragma: no cover - interface
        raise NotImplementedError


@dataclass(frozen=True)
class ConsumeRetain(Consume):
    def to_dict(self) -> dict[str, Any]:
        return {"kind": "retain"}


@dataclass(frozen=True)
class ConsumeWeight(Consume):
    weight: Term

    def __post_init__(self) -> None:
        if not isinstance(self.weight, Term):
            raise SchemaError("ConsumeWeight weight must be a Term.")

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "weight", "weight": self.weight.to_dict()}


def consume_from_dict(data: dict[str, Any]) -> Consume:
    if not isinstance(data, dict):
        raise SchemaError("Consume payload must be a dict.")
    kind = data.get("kind")
    if kind == "retain":
        return ConsumeRetain()
    if kind == "weight":
        return ConsumeWeight(term_from_dict(data.get("weight", {})))
    raise SchemaError(f"Unknown Consume kind: {kind}")


class Gain:
    """Base class for authority gain strategies."""

    def to_dict(self) -> dict[str, Any]:  # pragma: no cover - interface
        raise NotImplementedError


@dataclass(frozen=True)
class GainNone(Gain):
    def to_dict(self) -> dict[str, Any]:
        return {"kind": "none"}


@dataclass(frozen=True)
class GainTerm(Gain):
    auth: Term

    def __post_init__(self) -> None:
        if not isinstance(self.auth, Term):
            raise SchemaError("GainTerm auth must be a Term.")

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "term", "auth": self.auth.to_dict()}


def gain_from_dict(data: dict[str, Any]) -> Gain:
    if not isinstance(data, dict):
        raise SchemaError("Gain payload must be a dict.")
    kind = data.get("kind")
    if kind == "none":
        return GainNone()
    if kind == "term":
        return GainTerm(term_from_dict(data.get("auth", {})))
    raise SchemaError(f"Unknown Gain kind: {kind}")


@dataclass(frozen=True)
class Match:
    binder: str
    gather: Gather
    select: Select = SelectAny()
    consume: Consume = ConsumeRetain()
    gain: Gain = GainNone()

    def __post_init__(self) -> None:
        if not isinstance(self.binder, str) or not self.binder:
            raise SchemaError("Match binder must be a non-empty string.")
        if not isinstance(self.gather, Gather):
            raise SchemaError("Match gather must be a Gather.")
        if not isinstance(self.select, Select):
            raise SchemaError("Match select must be a Select.")
        if not isinstance(self.consume, Consume):
            raise SchemaError("Match consume must be a Consume.")
        if not isinstance(self.gain, Gain):
            raise SchemaError("Match gain must be a Gain.")

    def to_dict(self) -> dict[str, Any]:
        return {
            "binder": self.binder,
            "gather": self.gather.to_dict(),
            "select": self.select.to_dict(),
            "consume": self.consume.to_dict(),
            "gain": self.gain.to_dict(),
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Match":
        if not isinstance(data, dict):
            raise SchemaError("Match payload must be a dict.")
        return Match(
            binder=data.get("binder"),
            gather=Gather.from_dict(data.get("gather", {})),
            select=select_from_dict(data.get("select", {"kind": "any"})),
            consume=consume_from_dict(data.get("consume", {"kind": "retain"})),
            gain=gain_from_dict(data.get("gain", {"kind": "none"})),
        )


@dataclass(frozen=True, init=False)
class Rule:
    name: str
    matches: tuple[Match, ...]
    body: Term

    def __init__(self, name: str, matches: Iterable[Match] = (), body: Term | None = None) -> None:
        if not isinstance(name, str) or not name:
            raise SchemaError("Rule name must be a non-empty string.")
        items = tuple(matches)
        for item in items:
            if not isinstance(item, Match):
                raise SchemaError("Rule matches must be Match instances.")
        if body is None:
            body = Lit(UNIT)
        if not isinstance(body, Term):
            raise SchemaError("Rule body must be a Term.")
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "matches", items)
        object.__setattr__(self, "body", body)

    def binders(self) -> list[str]:
        return [match.binder for match in self.matches]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "matches": [match.to_dict() for match in self.matches],
            "body": self.body.to_dict(),
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Rule":
        if not isinstance(data, dict):
            raise SchemaError("Rule payload must be a dict.")
        matches = data.get("matches", [])
        if not isinstance(matches, list):
            raise SchemaError("Rule matches must be a list.")
        body = data.get("body")
        return Rule(
            name=data.get("name"),
            matches=[Match.from_dict(item) for item in matches],
            body=term_from_dict(body) if body is not None else None,
        )
