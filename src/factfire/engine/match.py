"""Matching a single pattern against the store.

Each step narrows or branches the set of outcomes. A step that cannot
proceed returns nothing for that branch; it never raises. Evaluation
errors from malformed terms do propagate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from factfire.errors import EvaluationError, SchemaError
from factfire.eval.term import Env, env_bind, eval_term, is_true
from factfire.fact_store.store import Store, is_visible
from factfire.ir.fact import Auth, Fact, Factoid
from factfire.ir.rule import (
    Consume,
    ConsumeRetain,
    ConsumeWeight,
    Gain,
    GainNone,
    GainTerm,
    Gather,
    Match,
    Select,
    SelectAny,
    SelectFirst,
    SelectLast,
)
from factfire.ir.terms import Term
from factfire.ir.values import Value, VAuth, VFact, VNat, sort_key


logger = logging.getLogger(__name__)

EMPTY_AUTH: Auth = frozenset()


@dataclass(frozen=True)
class MatchResult:
    """One surviving branch of a match."""

    gained: Auth
    spent: Factoid
    store: Store
    env: dict[str, Value]


def apply_gather(
    auth: Auth,
    store: Store,
    env: Env,
    binder: str,
    gather: Gather,
) -> list[Fact]:
    """Visible facts of the gathered kind that satisfy every predicate, in store order."""

    out: list[Fact] = []
    for fact, weight in store:
        if weight < 0:
            continue
        if fact.name != gather.fact_name:
            continue
        if not is_visible(auth, fact):
            continue
        fact_env = env_bind(env, binder, VFact(fact))
        if all(is_true(eval_term(fact_env, pred)) for pred in gather.predicates):
            out.append(fact)
    return out


def apply_select(facts: list[Fact], env: Env, binder: str, select: Select) -> list[Fact]:
    if isinstance(select, SelectAny):
        return list(facts)
    if isinstance(select, SelectFirst):
        ordered = _sorted_by_key(facts, env, binder, select.key)
        return [ordered[0][1]] if ordered else []
    if isinstance(select, SelectLast):
        ordered = _sorted_by_key(facts, env, binder, select.key)
        ordered.reverse()
        return [ordered[0][1]] if ordered else []
    raise SchemaError(f"unsupported select: {type(select).__name__}")


def apply_consume(
    fact: Fact,
    store: Store,
    env: Env,
    consume: Consume,
) -> tuple[int, Store] | None:
    """Weight spent and the updated store, or None when too little is available."""

    if isinstance(consume, ConsumeRetain):
        return 0, store
    if isinstance(consume, ConsumeWeight):
        want = eval_term(env, consume.weight)
        if not isinstance(want, VNat):
            raise EvaluationError(f"consume weight expects nat, got {want.kind}")
        avail = store.lookup_weight(fact)
        if avail < want.value:
            return None
        return want.value, store.set_weight(fact, avail - want.value)
    raise SchemaError(f"unsupported consume: {type(consume).__name__}")


def apply_gain(fact: Fact, env: Env, gain: Gain) -> Auth | None:
    """Authority delegated by the fact, or None when it does not carry it."""

    if isinstance(gain, GainNone):
        return EMPTY_AUTH
    if isinstance(gain, GainTerm):
        value = eval_term(env, gain.auth)
        if not isinstance(value, VAuth):
            raise EvaluationError(f"gain expects auth, got {value.kind}")
        if not value.value <= fact.by:
            return None
        return value.value
    raise SchemaError(f"unsupported gain: {type(gain).__name__}")


def apply_match(
    rule_name: str,
    auth: Auth,
    store: Store,
    env: Env,
    match: Match,
) -> list[MatchResult]:
    """Every way the match can succeed, in candidate order."""

    gathered = apply_gather(auth, store, env, match.binder, match.gather)
    selected = apply_select(gathered, env, match.binder, match.select)

    results: list[MatchResult] = []
    for fact in selected:
        if rule_name not in fact.rules:
            logger.debug(f"{rule_name}/{match.binder}: '{fact.name}' does not allow this rule")
            continue

        next_env = env_bind(env, match.binder, VFact(fact))
        consumed = apply_consume(fact, store, next_env, match.consume)
        if consumed is None:
            logger.debug(f"{rule_name}/{match.binder}: not enough weight of '{fact.name}'")
            continue
        weight, next_store = consumed

        gained = apply_gain(fact, next_env, match.gain)
        if gained is None:
            logger.debug(f"{rule_name}/{match.binder}: '{fact.name}' does not carry the authority")
            continue

        results.append(
            MatchResult(
                gained=gained,
                spent=Factoid(fact, weight),
                store=next_store,
                env=next_env,
            )
        )
    return results


def _sorted_by_key(
    facts: list[Fact],
    env: Env,
    binder: str,
    key: Term,
) -> list[tuple[tuple, Fact]]:
    keyed: list[tuple[tuple, Fact]] = []
    kinds: set[str] = set()
    for fact in facts:
        value = eval_term(env_bind(env, binder, VFact(fact)), key)
        kinds.add(value.kind)
        keyed.append((sort_key(value), fact))
    if len(kinds) > 1:
        raise EvaluationError(f"selection keys mix kinds: {', '.join(sorted(kinds))}")
    # Stable: equal keys keep candidate order.
    return sorted(keyed, key=lambda item: item[0])
