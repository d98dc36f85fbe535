"""Facts: immutable, owned resources held in the store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from factfire.errors import SchemaError
from factfire.ir.values import Value, VRecord, value_from_dict


Party = str
Auth = frozenset[str]


def make_auth(parties: Iterable[Party] = ()) -> Auth:
    if isinstance(parties, str):
        raise SchemaError("Authority must be a collection of parties, not a string.")
    auth = frozenset(parties)
    for party in auth:
        if not isinstance(party, str) or not party:
            raise SchemaError("Authority parties must be non-empty strings.")
    return auth


@dataclass(frozen=True, init=False)
class Fact:
    """A typed fact with visibility, authority and a rule whitelist.

    Attributes:
        name: Kind tag of the fact.
        value: Record payload.
        by: Authority granted by this fact.
        obs: Additional observers.
        rules: Names of the rules allowed to match this fact.

    Two facts with the same content are the same fact.
    """

    name: str
    value: VRecord
    by: Auth
    obs: Auth
    rules: tuple[str, ...]

    def __init__(
        self,
        name: str,
        value: VRecord | dict[str, Value] | Iterable[tuple[str, Value]] = (),
        by: Iterable[Party] = (),
        obs: Iterable[Party] = (),
        rules: Iterable[str] = (),
    ) -> None:
        if not isinstance(name, str) or not name:
            raise SchemaError("Fact name must be a non-empty string.")
        if not isinstance(value, VRecord):
            value = VRecord(value)
        if isinstance(rules, str):
            raise SchemaError("Fact rules must be a collection of rule names, not a string.")
        names: list[str] = []
        for rule_name in rules:
            if not isinstance(rule_name, str) or not rule_name:
                raise SchemaError("Fact rule names must be non-empty strings.")
            if rule_name not in names:
                names.append(rule_name)
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "by", make_auth(by))
        object.__setattr__(self, "obs", make_auth(obs))
        object.__setattr__(self, "rules", tuple(names))

    def field(self, name: str) -> Value | None:
        return self.value.get(name)

    @property
    def digest(self) -> str:
        from factfire.protocol.canon import fact_digest

        return fact_digest(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "value": [[name, item.to_dict()] for name, item in self.value.fields],
            "by": sorted(self.by),
            "obs": sorted(self.obs),
            "rules": list(self.rules),
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Fact":
        if not isinstance(data, dict):
            raise SchemaError("Fact payload must be a dict.")
        raw_value = data.get("value", [])
        if isinstance(raw_value, dict):
            fields = [(name, value_from_dict(item)) for name, item in raw_value.items()]
        elif isinstance(raw_value, list):
            fields = []
            for item in raw_value:
                if not isinstance(item, (list, tuple)) or len(item) != 2:
                    raise SchemaError("Fact value entries must be [name, value] pairs.")
                fields.append((item[0], value_from_dict(item[1])))
        else:
            raise SchemaError("Fact value must be a dict or a list of pairs.")
        for key in ("by", "obs", "rules"):
            if not isinstance(data.get(key, []), list):
                raise SchemaError(f"Fact {key} must be a list.")
        return Fact(
            name=data.get("name"),
            value=VRecord(fields),
            by=data.get("by", []),
            obs=data.get("obs", []),
            rules=data.get("rules", []),
        )


@dataclass(frozen=True)
class Factoid:
    """A fact paired with a weight (amount spent or amount said)."""

    fact: Fact
    weight: int

    def __post_init__(self) -> None:
        if not isinstance(self.fact, Fact):
            raise SchemaError("Factoid fact must be a Fact.")
        if isinstance(self.weight, bool) or not isinstance(self.weight, int):
            raise SchemaError("Factoid weight must be int.")

    def __iter__(self):
        yield self.fact
        yield self.weight

    def to_dict(self) -> dict[str, Any]:
        return {"fact": self.fact.to_dict(), "weight": self.weight}
