"""Evaluation of terms against a binding environment."""

from __future__ import annotations

from typing import Mapping

from factfire.errors import EvaluationError
from factfire.ir.fact import Fact, Factoid
from factfire.ir.terms import (
    And,
    AuthOne,
    AuthUnion,
    Cmp,
    Eq,
    Field,
    Lit,
    Not,
    Record,
    Say,
    Seq,
    Term,
    Var,
)
from factfire.ir.values import (
    FALSE,
    TRUE,
    UNIT,
    Value,
    VAuth,
    VBool,
    VFact,
    VNat,
    VParty,
    VRecord,
    VRules,
)


Env = Mapping[str, Value]


def env_bind(env: Env, name: str, value: Value) -> dict[str, Value]:
    """Copy of env with name bound to value."""

    next_env = dict(env)
    next_env[name] = value
    return next_env


def eval_term(env: Env, term: Term) -> Value:
    """Evaluate a pure term. Producing facts here is an error."""

    return _eval(env, term, None)


def exec_term(env: Env, term: Term) -> tuple[Value, list[Factoid]]:
    """Evaluate a term, collecting the facts it says in order."""

    said: list[Factoid] = []
    value = _eval(env, term, said)
    return value, said


def is_true(value: Value) -> bool:
    if not isinstance(value, VBool):
        raise EvaluationError(f"expected bool, got {value.kind}")
    return value.value


def _eval(env: Env, term: Term, said: list[Factoid] | None) -> Value:
    if isinstance(term, Lit):
        return term.value

    if isinstance(term, Var):
        if term.name not in env:
            raise EvaluationError(f"unbound name: {term.name}")
        return env[term.name]

    if isinstance(term, Field):
        return _project(_eval(env, term.term, said), term.name)

    if isinstance(term, Record):
        return VRecord([(name, _eval(env, item, said)) for name, item in term.fields])

    if isinstance(term, Eq):
        lhs = _eval(env, term.lhs, said)
        rhs = _eval(env, term.rhs, said)
        if lhs.kind != rhs.kind:
            raise EvaluationError(f"eq compares {lhs.kind} with {rhs.kind}")
        return TRUE if lhs == rhs else FALSE

    if isinstance(term, Cmp):
        lhs_n = _expect_nat(_eval(env, term.lhs, said), term.op)
        rhs_n = _expect_nat(_eval(env, term.rhs, said), term.op)
        return TRUE if _cmp_holds(term.op, lhs_n, rhs_n) else FALSE

    if isinstance(term, And):
        for item in term.items:
            if not is_true(_eval(env, item, said)):
                return FALSE
        return TRUE

    if isinstance(term, Not):
        return FALSE if is_true(_eval(env, term.term, said)) else TRUE

    if isinstance(term, AuthOne):
        value = _eval(env, term.term, said)
        if not isinstance(value, VParty):
            raise EvaluationError(f"auth_one expects party, got {value.kind}")
        return VAuth([value.value])

    if isinstance(term, AuthUnion):
        lhs_a = _expect_auth(_eval(env, term.lhs, said), "auth_union")
        rhs_a = _expect_auth(_eval(env, term.rhs, said), "auth_union")
        return VAuth(lhs_a | rhs_a)

    if isinstance(term, Say):
        if said is None:
            raise EvaluationError(f"say '{term.name}' is only allowed in a rule body")
        fields = [(name, _eval(env, item, said)) for name, item in term.fields]
        by = _expect_auth(_eval(env, term.by, said), "say by")
        obs = _expect_auth(_eval(env, term.obs, said), "say obs")
        rules = _eval(env, term.rules, said)
        if not isinstance(rules, VRules):
            raise EvaluationError(f"say rules expects rules, got {rules.kind}")
        weight = _expect_nat(_eval(env, term.weight, said), "say weight")
        fact = Fact(name=term.name, value=VRecord(fields), by=by, obs=obs, rules=rules.value)
        said.append(Factoid(fact, weight))
        return UNIT

    if isinstance(term, Seq):
        result: Value = UNIT
        for item in term.items:
            result = _eval(env, item, said)
        return result

    raise EvaluationError(f"unsupported term: {type(term).__name__}")


def _project(value: Value, name: str) -> Value:
    if isinstance(value, VFact):
        found = value.fact.field(name)
        if found is None:
            raise EvaluationError(f"fact '{value.fact.name}' has no field '{name}'")
        return found
    if isinstance(value, VRecord):
        found = value.get(name)
        if found is None:
            raise EvaluationError(f"record has no field '{name}'")
        return found
    raise EvaluationError(f"cannot project field '{name}' from {value.kind}")


def _expect_nat(value: Value, context: str) -> int:
    if not isinstance(value, VNat):
        raise EvaluationError(f"{context} expects nat, got {value.kind}")
    return value.value


def _expect_auth(value: Value, context: str) -> frozenset[str]:
    if not isinstance(value, VAuth):
        raise EvaluationError(f"{context} expects auth, got {value.kind}")
    return value.value


def _cmp_holds(op: str, lhs: int, rhs: int) -> bool:
    if op == "lt":
        return lhs < rhs
    if op == "le":
        return lhs <= rhs
    if op == "gt":
        return lhs > rhs
    if op == "ge":
        return lhs >= rhs
    raise EvaluationError(f"unsupported comparison: {op}")
