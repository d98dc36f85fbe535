"""The fact store: a ledger mapping facts to weights."""

from __future__ import annotations

from typing import Any, Iterable, Iterator

from factfire.errors import SchemaError, StoreError
from factfire.ir.fact import Auth, Fact, Factoid


def is_visible(auth: Auth, fact: Fact) -> bool:
    """True when some party of auth holds or observes the fact."""

    return not auth.isdisjoint(fact.by | fact.obs)


class Store:
    """Mapping from fact to weight.

    Entries keep insertion order, which fixes the order candidates are
    gathered in. Operations return new stores; a store is never mutated
    once handed out.
    """

    def __init__(self, entries: Iterable[tuple[Fact, int]] | dict[Fact, int] = ()) -> None:
        items = entries.items() if isinstance(entries, dict) else entries
        self._weights: dict[Fact, int] = {}
        for fact, weight in items:
            _check_entry(fact, weight)
            self._weights[fact] = self._weights.get(fact, 0) + weight

    @classmethod
    def from_factoids(cls, factoids: Iterable[Factoid]) -> "Store":
        return cls((factoid.fact, factoid.weight) for factoid in factoids)

    def __len__(self) -> int:
        return len(self._weights)

    def __iter__(self) -> Iterator[tuple[Fact, int]]:
        return iter(list(self._weights.items()))

    def __contains__(self, fact: object) -> bool:
        return fact in self._weights

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Store):
            return NotImplemented
        return self._weights == other._weights

    def __repr__(self) -> str:
        return f"Store({len(self._weights)} entries)"

    def items(self) -> list[tuple[Fact, int]]:
        return list(self._weights.items())

    def facts(self) -> list[Fact]:
        return list(self._weights)

    def lookup_weight(self, fact: Fact) -> int:
        return self._weights.get(fact, 0)

    def set_weight(self, fact: Fact, weight: int) -> "Store":
        """Copy of this store with the entry for fact replaced."""

        _check_entry(fact, weight)
        out = self._copy()
        out._weights[fact] = weight
        return out

    def merge(self, factoids: Iterable[Factoid | tuple[Fact, int]]) -> "Store":
        """Add each weight onto the matching entry, creating it when absent."""

        out = self._copy()
        for fact, weight in factoids:
            _check_entry(fact, weight)
            out._weights[fact] = out._weights.get(fact, 0) + weight
        return out

    def prune(self) -> "Store":
        """Drop every entry whose weight is not positive."""

        out = Store()
        out._weights = {fact: weight for fact, weight in self._weights.items() if weight > 0}
        return out

    def visible(self, auth: Auth) -> "Store":
        out = Store()
        out._weights = {
            fact: weight for fact, weight in self._weights.items() if is_visible(auth, fact)
        }
        return out

    def to_dict(self) -> dict[str, Any]:
        return {
            "facts": [
                {"id": fact.digest, "fact": fact.to_dict(), "weight": weight}
                for fact, weight in self._weights.items()
            ]
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Store":
        if not isinstance(data, dict):
            raise SchemaError("Store payload must be a dict.")
        rows = data.get("facts", [])
        if not isinstance(rows, list):
            raise SchemaError("Store facts must be a list.")
        entries: list[tuple[Fact, int]] = []
        for index, row in enumerate(rows):
            if not isinstance(row, dict):
                raise SchemaError(f"Store entry {index} must be a dict.")
            fact = Fact.from_dict(row.get("fact", {}))
            expected = row.get("id")
            if expected is not None and expected != fact.digest:
                raise StoreError(f"Store entry {index} id mismatch: {expected} vs {fact.digest}")
            entries.append((fact, row.get("weight", 1)))
        return Store(entries)

    def _copy(self) -> "Store":
        out = Store()
        out._weights = dict(self._weights)
        return out


def lookup_weight(store: Store, fact: Fact) -> int:
    return store.lookup_weight(fact)


def merge(store: Store, factoids: Iterable[Factoid | tuple[Fact, int]]) -> Store:
    return store.merge(factoids)


def prune(store: Store) -> Store:
    return store.prune()


def _check_entry(fact: Any, weight: Any) -> None:
    if not isinstance(fact, Fact):
        raise StoreError("store keys must be Fact")
    if isinstance(weight, bool) or not isinstance(weight, int):
        raise StoreError(f"weight for fact '{fact.name}' must be int")
