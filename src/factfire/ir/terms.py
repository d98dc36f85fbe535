"""Term language used by predicates, keys, weights, authority and rule bodies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from factfire.errors import SchemaError
from factfire.ir.values import (
    Value,
    VAuth,
    VNat,
    VParty,
    VRules,
    VSym,
    value_from_dict,
)


CMP_OPS = ("lt", "le", "gt", "ge")


class Term:
    """Base class for terms."""

    def to_dict(self) -> dict[str, Any]:  # pragma: no cover - interface
        raise NotImplementedError

    def children(self) -> tuple["Term", ...]:
        return ()


@dataclass(frozen=True)
class Lit(Term):
    value: Value

    def __post_init__(self) -> None:
        if not isinstance(self.value, Value):
            raise SchemaError("Lit value must be a Value.")

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "lit", "value": self.value.to_dict()}


@dataclass(frozen=True)
class Var(Term):
    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise SchemaError("Var name must be a non-empty string.")

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "var", "name": self.name}


@dataclass(frozen=True)
class Field(Term):
    """Projection of a named field out of a fact payload or record."""

    term: Term
    name: str

    def __post_init__(self) -> None:
        _require_term(self.term, "Field term")
        if not isinstance(self.name, str) or not self.name:
            raise SchemaError("Field name must be a non-empty string.")

    def children(self) -> tuple[Term, ...]:
        return (self.term,)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "field", "term": self.term.to_dict(), "name": self.name}


@dataclass(frozen=True, init=False)
class Record(Term):
    fields: tuple[tuple[str, Term], ...]

    def __init__(self, fields: Iterable[tuple[str, Term]] | dict[str, Term] = ()) -> None:
        object.__setattr__(self, "fields", _normalize_fields(fields, "Record"))

    def children(self) -> tuple[Term, ...]:
        return tuple(term for _, term in self.fields)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": "record",
            "fields": [[name, term.to_dict()] for name, term in self.fields],
        }


@dataclass(frozen=True)
class Eq(Term):
    lhs: Term
    rhs: Term

    def __post_init__(self) -> None:
        _require_term(self.lhs, "Eq lhs")
        _require_term(self.rhs, "Eq rhs")

    def children(self) -> tuple[Term, ...]:
        return (self.lhs, self.rhs)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "eq", "lhs": self.lhs.to_dict(), "rhs": self.rhs.to_dict()}


@dataclass(frozen=True)
class Cmp(Term):
    """Ordering comparison between two naturals."""

    op: str
    lhs: Term
    rhs: Term

    def __post_init__(self) -> None:
        if self.op not in CMP_OPS:
            raise SchemaError(f"Cmp op must be one of {', '.join(CMP_OPS)}: {self.op}")
        _require_term(self.lhs, "Cmp lhs")
        _require_term(self.rhs, "Cmp rhs")

    def children(self) -> tuple[Term, ...]:
        return (self.lhs, self.rhs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": "cmp",
            "op": self.op,
            "lhs": self.lhs.to_dict(),
            "rhs": self.rhs.to_dict(),
        }


@dataclass(frozen=True, init=False)
class And(Term):
    items: tuple[Term, ...]

    def __init__(self, items: Iterable[Term] = ()) -> None:
        object.__setattr__(self, "items", _normalize_terms(items, "And"))

    def children(self) -> tuple[Term, ...]:
        return self.items

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "and", "items": [item.to_dict() for item in self.items]}


@dataclass(frozen=True)
class Not(Term):
    term: Term

    def __post_init__(self) -> None:
        _require_term(self.term, "Not term")

    def children(self) -> tuple[Term, ...]:
        return (self.term,)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "not", "term": self.term.to_dict()}


@dataclass(frozen=True)
class AuthOne(Term):
    """Singleton authority built from a party."""

    term: Term

    def __post_init__(self) -> None:
        _require_term(self.term, "AuthOne term")

    def children(self) -> tuple[Term, ...]:
        return (self.term,)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "auth_one", "term": self.term.to_dict()}


@dataclass(frozen=True)
class AuthUnion(Term):
    lhs: Term
    rhs: Term

    def __post_init__(self) -> None:
        _require_term(self.lhs, "AuthUnion lhs")
        _require_term(self.rhs, "AuthUnion rhs")

    def children(self) -> tuple[Term, ...]:
        return (self.lhs, self.rhs)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "auth_union", "lhs": self.lhs.to_dict(), "rhs": self.rhs.to_dict()}


@dataclass(frozen=True, init=False)
class Say(Term):
    """Produce a new fact with the given weight."""

    name: str
    fields: tuple[tuple[str, Term], ...]
    by: Term
    obs: Term
    rules: Term
    weight: Term

    def __init__(
        self,
        name: str,
        fields: Iterable[tuple[str, Term]] | dict[str, Term] = (),
        by: Term | None = None,
        obs: Term | None = None,
        rules: Term | None = None,
        weight: Term | None = None,
    ) -> None:
        if not isinstance(name, str) or not name:
            raise SchemaError("Say name must be a non-empty string.")
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "fields", _normalize_fields(fields, "Say"))
        object.__setattr__(self, "by", _require_term(by or Lit(VAuth()), "Say by"))
        object.__setattr__(self, "obs", _require_term(obs or Lit(VAuth()), "Say obs"))
        object.__setattr__(self, "rules", _require_term(rules or Lit(VRules()), "Say rules"))
        object.__setattr__(self, "weight", _require_term(weight or Lit(VNat(1)), "Say weight"))

    def children(self) -> tuple[Term, ...]:
        return tuple(term for _, term in self.fields) + (
            self.by,
            self.obs,
            self.rules,
            self.weight,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": "say",
            "name": self.name,
            "fields": [[name, term.to_dict()] for name, term in self.fields],
            "by": self.by.to_dict(),
            "obs": self.obs.to_dict(),
            "rules": self.rules.to_dict(),
            "weight": self.weight.to_dict(),
        }


@dataclass(frozen=True, init=False)
class Seq(Term):
    items: tuple[Term, ...]

    def __init__(self, items: Iterable[Term] = ()) -> None:
        object.__setattr__(self, "items", _normalize_terms(items, "Seq"))

    def children(self) -> tuple[Term, ...]:
        return self.items

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "seq", "items": [item.to_dict() for item in self.items]}


def nat(value: int) -> Lit:
    return Lit(VNat(value))


def sym(value: str) -> Lit:
    return Lit(VSym(value))


def party(value: str) -> Lit:
    return Lit(VParty(value))


def rules(names: Iterable[str]) -> Lit:
    return Lit(VRules(names))


def term_from_dict(data: dict[str, Any]) -> Term:
    if not isinstance(data, dict):
        raise SchemaError("Term payload must be a dict.")
    kind = data.get("kind")
    if kind == "lit":
        return Lit(value_from_dict(data.get("value", {})))
    if kind == "var":
        return Var(name=data.get("name"))
    if kind == "field":
        return Field(term=term_from_dict(data.get("term", {})), name=data.get("name"))
    if kind == "record":
        return Record(_fields_from_payload(data.get("fields", []), "record"))
    if kind == "eq":
        return Eq(lhs=term_from_dict(data.get("lhs", {})), rhs=term_from_dict(data.get("rhs", {})))
    if kind == "cmp":
        return Cmp(
            op=data.get("op"),
            lhs=term_from_dict(data.get("lhs", {})),
            rhs=term_from_dict(data.get("rhs", {})),
        )
    if kind == "and":
        return And([term_from_dict(item) for item in _require_list(data.get("items", []), "and")])
    if kind == "not":
        return Not(term=term_from_dict(data.get("term", {})))
    if kind == "auth_one":
        return AuthOne(term=term_from_dict(data.get("term", {})))
    if kind == "auth_union":
        return AuthUnion(
            lhs=term_from_dict(data.get("lhs", {})),
            rhs=term_from_dict(data.get("rhs", {})),
        )
    if kind == "say":
        return Say(
            name=data.get("name"),
            fields=_fields_from_payload(data.get("fields", []), "say"),
            by=_optional_term(data.get("by")),
            obs=_optional_term(data.get("obs")),
            rules=_optional_term(data.get("rules")),
            weight=_optional_term(data.get("weight")),
        )
    if kind == "seq":
        return Seq([term_from_dict(item) for item in _require_list(data.get("items", []), "seq")])
    raise SchemaError(f"Unknown Term kind: {kind}")


def free_vars(term: Term) -> set[str]:
    """Names referenced by a term."""

    if isinstance(term, Var):
        return {term.name}
    found: set[str] = set()
    for child in term.children():
        found |= free_vars(child)
    return found


def _require_term(value: Any, label: str) -> Term:
    if not isinstance(value, Term):
        raise SchemaError(f"{label} must be a Term.")
    return value


def _normalize_terms(items: Iterable[Term], label: str) -> tuple[Term, ...]:
    return tuple(_require_term(item, f"{label} item") for item in items)


def _normalize_fields(
    fields: Iterable[tuple[str, Term]] | dict[str, Term], label: str
) -> tuple[tuple[str, Term], ...]:
    items = list(fields.items()) if isinstance(fields, dict) else list(fields)
    seen: set[str] = set()
    normalized: list[tuple[str, Term]] = []
    for item in items:
        if not isinstance(item, tuple) or len(item) != 2:
            raise SchemaError(f"{label} fields must be (name, term) pairs.")
        name, term = item
        if not isinstance(name, str) or not name:
            raise SchemaError(f"{label} field names must be non-empty strings.")
        if name in seen:
            raise SchemaError(f"Duplicate {label} field: {name}")
        seen.add(name)
        normalized.append((name, _require_term(term, f"{label} field {name}")))
    return tuple(normalized)


def _fields_from_payload(payload: Any, kind: str) -> list[tuple[str, Term]]:
    if isinstance(payload, dict):
        return [(name, term_from_dict(item)) for name, item in payload.items()]
    pairs: list[tuple[str, Term]] = []
    for item in _require_list(payload, kind):
        if not isinstance(item, (list, tuple)) or len(item) != 2:
            raise SchemaError(f"{kind} fields must be [name, term] pairs.")
        pairs.append((item[0], term_from_dict(item[1])))
    return pairs


def _optional_term(payload: Any) -> Term | None:
    if payload is None:
        return None
    return term_from_dict(payload)


def _require_list(value: Any, kind: str) -> list[Any]:
    if not isinstance(value, list):
        raise SchemaError(f"{kind} items must be a list.")
    return value
