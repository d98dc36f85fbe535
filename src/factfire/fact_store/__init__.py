"""Fact store."""

from factfire.fact_store.store import Store, is_visible, lookup_weight, merge, prune

__all__ = ["Store", "is_visible", "lookup_weight", "merge", "prune"]
