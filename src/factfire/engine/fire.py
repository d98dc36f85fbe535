"""Firing a rule: every valid way to run its matches and body against a store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Sequence

from factfire.engine.match import EMPTY_AUTH, apply_match
from factfire.errors import AmbiguousFiringError, EvaluationError
from factfire.eval.term import Env, exec_term
from factfire.fact_store.store import Store
from factfire.ir.fact import Auth, Factoid, make_auth
from factfire.ir.rule import Match, Rule
from factfire.ir.values import VUnit
from factfire.rules.validator import RuleValidator


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Firing:
    """Outcome of one firing: facts spent, facts said, resulting store."""

    spent: tuple[Factoid, ...]
    said: tuple[Factoid, ...]
    store: Store

    def __iter__(self):
        yield self.spent
        yield self.said
        yield self.store


def iter_matches(
    rule_name: str,
    auth: Auth,
    has: Auth,
    spent: tuple[Factoid, ...],
    store: Store,
    env: Env,
    matches: Sequence[Match],
) -> Iterator[tuple[Auth, tuple[Factoid, ...], Store, Env]]:
    """Thread matches left to right, branching on every surviving candidate."""

    if not matches:
        yield has, spent, store, env
        return
    match, rest = matches[0], matches[1:]
    for result in apply_match(rule_name, auth, store, env, match):
        yield from iter_matches(
            rule_name,
            auth,
            has | result.gained,
            spent + (result.spent,),
            result.store,
            result.env,
            rest,
        )


def iter_firings(auth: Auth, store: Store, rule: Rule) -> Iterator[Firing]:
    """Lazily enumerate firings in a fixed order."""

    auth = make_auth(auth)
    RuleValidator().validate(rule)
    for has, spent, matched_store, env in iter_matches(
        rule.name, auth, EMPTY_AUTH, (), store, {}, rule.matches
    ):
        result, said = exec_term(env, rule.body)
        if not isinstance(result, VUnit):
            raise EvaluationError(f"rule '{rule.name}' body must yield unit, got {result.kind}")

        uncovered = [factoid.fact for factoid in said if not factoid.fact.by <= has]
        if uncovered:
            logger.debug(
                f"{rule.name}: dropped firing, '{uncovered[0].name}' claims authority "
                f"{sorted(uncovered[0].by)} beyond {sorted(has)}"
            )
            continue

        yield Firing(
            spent=spent,
            said=tuple(said),
            store=matched_store.merge(said).prune(),
        )


def apply_fire(auth: Auth, store: Store, rule: Rule) -> list[Firing]:
    """All firings of rule by a submitter holding auth."""

    firings = list(iter_firings(auth, store, rule))
    logger.info(f"{rule.name}: {len(firings)} firing(s) for {sorted(auth)}")
    return firings


def fire_first(auth: Auth, store: Store, rule: Rule) -> Firing | None:
    return next(iter_firings(auth, store, rule), None)


def fire_unique(auth: Auth, store: Store, rule: Rule) -> Firing | None:
    """The only firing, None when there is none, error when there are several."""

    firings = iter_firings(auth, store, rule)
    first = next(firings, None)
    if first is None:
        return None
    if next(firings, None) is not None:
        raise AmbiguousFiringError(f"rule '{rule.name}' has more than one firing")
    return first
