"""A single-store host that applies one firing at a time."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from factfire.engine.fire import Firing, apply_fire
from factfire.errors import SessionError
from factfire.fact_store.store import Store
from factfire.ir.fact import Auth, Factoid, Party, make_auth
from factfire.rules.registry import RuleRegistry


logger = logging.getLogger(__name__)

Chooser = Callable[[list[Firing]], Firing | None]


def choose_first(firings: list[Firing]) -> Firing | None:
    return firings[0] if firings else None


@dataclass(frozen=True)
class JournalEntry:
    rule_name: str
    submitter: Auth
    spent: tuple[Factoid, ...]
    said: tuple[Factoid, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "rule": self.rule_name,
            "submitter": sorted(self.submitter),
            "spent": [factoid.to_dict() for factoid in self.spent],
            "said": [factoid.to_dict() for factoid in self.said],
        }


class Session:
    """Serializes submissions against one authoritative store.

    Each submission fires a registered rule, commits the chosen outcome and
    journals it. A rule that cannot fire leaves the store untouched.
    """

    def __init__(
        self,
        store: Store,
        registry: RuleRegistry,
        choose: Chooser = choose_first,
    ) -> None:
        self._store = store
        self.registry = registry
        self.choose = choose
        self._journal: list[JournalEntry] = []

    @property
    def store(self) -> Store:
        return self._store

    @property
    def journal(self) -> list[JournalEntry]:
        return list(self._journal)

    def preview(self, submitter: Iterable[Party], rule_name: str) -> list[Firing]:
        rule = self.registry.get(rule_name)
        return apply_fire(make_auth(submitter), self._store, rule)

    def submit(self, submitter: Iterable[Party], rule_name: str) -> Firing | None:
        auth = make_auth(submitter)
        firings = self.preview(auth, rule_name)
        chosen = self.choose(firings)
        if chosen is None:
            logger.info(f"{rule_name}: nothing committed for {sorted(auth)}")
            return None
        if chosen not in firings:
            raise SessionError(f"chooser returned a firing not produced by {rule_name}")
        self._store = chosen.store
        self._journal.append(
            JournalEntry(
                rule_name=rule_name,
                submitter=auth,
                spent=chosen.spent,
                said=chosen.said,
            )
        )
        logger.info(
            f"{rule_name}: committed firing {len(self._journal)} "
            f"(spent {len(chosen.spent)}, said {len(chosen.said)})"
        )
        return chosen
