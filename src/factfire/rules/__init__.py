"""Rule validation, documents and registry."""

from factfire.rules.documents import (
    LedgerDocument,
    RuleDocument,
    load_ledger,
    load_ledger_file,
    load_rules,
    load_rules_file,
)
from factfire.rules.registry import (
    RuleRegistry,
    cache_rule,
    clear_rule_cache,
    load_rules_from_cache,
)
from factfire.rules.validator import RuleValidator

__all__ = [
    "LedgerDocument",
    "RuleDocument",
    "load_ledger",
    "load_ledger_file",
    "load_rules",
    "load_rules_file",
    "RuleRegistry",
    "cache_rule",
    "clear_rule_cache",
    "load_rules_from_cache",
    "RuleValidator",
]
