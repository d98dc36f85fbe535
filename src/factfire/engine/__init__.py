"""Rule matching and firing."""

from factfire.engine.fire import (
    Firing,
    apply_fire,
    fire_first,
    fire_unique,
    iter_firings,
    iter_matches,
)
from factfire.engine.match import (
    MatchResult,
    apply_consume,
    apply_gain,
    apply_gather,
    apply_match,
    apply_select,
)
from factfire.engine.session import JournalEntry, Session, choose_first

__all__ = [
    "Firing",
    "apply_fire",
    "fire_first",
    "fire_unique",
    "iter_firings",
    "iter_matches",
    "MatchResult",
    "apply_consume",
    "apply_gain",
    "apply_gather",
    "apply_match",
    "apply_select",
    "JournalEntry",
    "Session",
    "choose_first",
]
