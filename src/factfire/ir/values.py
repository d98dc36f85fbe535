"""Runtime values shared by fact payloads, predicates and produced terms."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable

from factfire.errors import EvaluationError, SchemaError

if TYPE_CHECKING:
    from factfire.ir.fact import Fact


class Value:
    """Base class for values."""

    kind: str = ""

    def to_dict(self) -> dict[str, Any]:  # pragma: no cover - interface
        raise NotImplementedError


@dataclass(frozen=True)
class VNat(Value):
    value: int
    kind = "nat"

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise SchemaError(f"VNat value must be int: {self.value!r}")
        if self.value < 0:
            raise SchemaError(f"VNat value must be non-negative: {self.value}")

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "nat", "value": self.value}


@dataclass(frozen=True)
class VSym(Value):
    value: str
    kind = "sym"

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise SchemaError(f"VSym value must be str: {self.value!r}")

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "sym", "value": self.value}


@dataclass(frozen=True)
class VParty(Value):
    value: str
    kind = "party"

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value:
            raise SchemaError("VParty value must be a non-empty string.")

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "party", "value": self.value}


@dataclass(frozen=True, init=False)
class VAuth(Value):
    value: frozenset[str]
    kind = "auth"

    def __init__(self, value: Iterable[str] = ()) -> None:
        if isinstance(value, str):
            raise SchemaError("VAuth value must be a collection of parties, not a string.")
        parties = frozenset(value)
        for party in parties:
            if not isinstance(party, str) or not party:
                raise SchemaError("VAuth parties must be non-empty strings.")
        object.__setattr__(self, "value", parties)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "auth", "value": sorted(self.value)}


@dataclass(frozen=True)
class VBool(Value):
    value: bool
    kind = "bool"

    def __post_init__(self) -> None:
        if not isinstance(self.value, bool):
            raise SchemaError(f"VBool value must be bool: {self.value!r}")

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "bool", "value": self.value}


@dataclass(frozen=True)
class VUnit(Value):
    kind = "unit"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "unit"}


@dataclass(frozen=True, init=False)
class VRules(Value):
    """Ordered set of rule names, used for a fact's rule whitelist."""

    value: tuple[str, ...]
    kind = "rules"

    def __init__(self, value: Iterable[str] = ()) -> None:
        if isinstance(value, str):
            raise SchemaError("VRules value must be a collection of rule names, not a string.")
        names: list[str] = []
        for name in value:
            if not isinstance(name, str) or not name:
                raise SchemaError("VRules names must be non-empty strings.")
            if name not in names:
                names.append(name)
        object.__setattr__(self, "value", tuple(names))

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "rules", "value": list(self.value)}


@dataclass(frozen=True, init=False)
class VRecord(Value):
    """Aggregate of named fields; field order is significant."""

    fields: tuple[tuple[str, Value], ...]
    kind = "record"

    def __init__(self, fields: Iterable[tuple[str, Value]] | dict[str, Value] = ()) -> None:
        items = list(fields.items()) if isinstance(fields, dict) else list(fields)
        seen: set[str] = set()
        normalized: list[tuple[str, Value]] = []
        for item in items:
            if not isinstance(item, tuple) or len(item) != 2:
                raise SchemaError("VRecord fields must be (name, value) pairs.")
            name, value = item
            if not isinstance(name, str) or not name:
                raise SchemaError("VRecord field names must be non-empty strings.")
            if name in seen:
                raise SchemaError(f"Duplicate VRecord field: {name}")
            if not isinstance(value, Value):
                raise SchemaError(f"VRecord field {name} must hold a Value.")
            seen.add(name)
            normalized.append((name, value))
        object.__setattr__(self, "fields", tuple(normalized))

    def get(self, name: str) -> Value | None:
        for field_name, value in self.fields:
            if field_name == name:
                return value
        return None

    def names(self) -> list[str]:
        return [name for name, _ in self.fields]

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": "record",
            "fields": [[name, value.to_dict()] for name, value in self.fields],
        }


@dataclass(frozen=True)
class VFact(Value):
    fact: "Fact"
    kind = "fact"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "fact", "fact": self.fact.to_dict()}


UNIT = VUnit()
TRUE = VBool(True)
FALSE = VBool(False)


def value_from_dict(data: dict[str, Any]) -> Value:
    if not isinstance(data, dict):
        raise SchemaError("Value payload must be a dict.")
    kind = data.get("kind")
    if kind == "nat":
        return VNat(data.get("value"))
    if kind == "sym":
        return VSym(data.get("value"))
    if kind == "party":
        return VParty(data.get("value"))
    if kind == "auth":
        return VAuth(_require_list(data.get("value", []), "auth"))
    if kind == "bool":
        return VBool(data.get("value"))
    if kind == "unit":
        return UNIT
    if kind == "rules":
        return VRules(_require_list(data.get("value", []), "rules"))
    if kind == "record":
        fields = data.get("fields", [])
        if isinstance(fields, dict):
            return VRecord({name: value_from_dict(item) for name, item in fields.items()})
        pairs: list[tuple[str, Value]] = []
        for item in _require_list(fields, "record"):
            if not isinstance(item, (list, tuple)) or len(item) != 2:
                raise SchemaError("record fields must be [name, value] pairs.")
            pairs.append((item[0], value_from_dict(item[1])))
        return VRecord(pairs)
    if kind == "fact":
        from factfire.ir.fact import Fact

        return VFact(Fact.from_dict(data.get("fact", {})))
    raise SchemaError(f"Unknown Value kind: {kind}")


def sort_key(value: Value) -> tuple[Any, ...]:
    """Ordering key for a value used as a selection key."""

    if isinstance(value, VNat):
        return ("nat", value.value)
    if isinstance(value, VSym):
        return ("sym", value.value)
    if isinstance(value, VParty):
        return ("party", value.value)
    if isinstance(value, VBool):
        return ("bool", value.value)
    if isinstance(value, VRecord):
        return ("record", tuple((name, sort_key(item)) for name, item in value.fields))
    raise EvaluationError(f"Value of kind '{value.kind}' cannot be used as an ordering key.")


def _require_list(value: Any, kind: str) -> list[Any]:
    if not isinstance(value, list):
        raise SchemaError(f"{kind} value must be a list.")
    return value
