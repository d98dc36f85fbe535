"""Authority-checked rule firing over a ledger of weighted facts."""

from factfire.engine import (
    Firing,
    Session,
    apply_fire,
    apply_match,
    fire_first,
    fire_unique,
    iter_firings,
)
from factfire.errors import (
    AmbiguousFiringError,
    EvaluationError,
    FactFireError,
    RuleRegistryError,
    RuleValidationError,
    SchemaError,
    SessionError,
    StoreError,
)
from factfire.fact_store import Store, is_visible
from factfire.ir import Fact, Factoid, Match, Rule
from factfire.rules import RuleRegistry, RuleValidator, load_ledger, load_rules

__all__ = [
    "Firing",
    "Session",
    "apply_fire",
    "apply_match",
    "fire_first",
    "fire_unique",
    "iter_firings",
    "AmbiguousFiringError",
    "EvaluationError",
    "FactFireError",
    "RuleRegistryError",
    "RuleValidationError",
    "SchemaError",
    "SessionError",
    "StoreError",
    "Store",
    "is_visible",
    "Fact",
    "Factoid",
    "Match",
    "Rule",
    "RuleRegistry",
    "RuleValidator",
    "load_ledger",
    "load_rules",
]
