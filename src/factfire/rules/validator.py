"""Validation utilities for rules."""

from __future__ import annotations

from factfire.errors import RuleValidationError
from factfire.ir.rule import ConsumeWeight, GainTerm, Match, Rule, SelectFirst, SelectLast
from factfire.ir.terms import Say, Term, free_vars


class RuleValidator:
    """Check that a rule only refers to names bound before use."""

    def validate(self, rule: Rule) -> None:
        bound: list[str] = []
        for index, match in enumerate(rule.matches):
            if match.binder in bound:
                raise RuleValidationError(
                    f"Rule '{rule.name}' binds '{match.binder}' twice (match {index})."
                )
            bound.append(match.binder)
            self._validate_match(rule.name, index, match, set(bound))
        self._validate_terms(rule.name, "body", [rule.body], set(bound), allow_say=True)

    def _validate_match(self, rule_name: str, index: int, match: Match, bound: set[str]) -> None:
        terms: list[Term] = list(match.gather.predicates)
        if isinstance(match.select, (SelectFirst, SelectLast)):
            terms.append(match.select.key)
        if isinstance(match.consume, ConsumeWeight):
            terms.append(match.consume.weight)
        if isinstance(match.gain, GainTerm):
            terms.append(match.gain.auth)
        self._validate_terms(rule_name, f"match {index} ('{match.binder}')", terms, bound)

    def _validate_terms(
        self,
        rule_name: str,
        where: str,
        terms: list[Term],
        bound: set[str],
        allow_say: bool = False,
    ) -> None:
        for term in terms:
            missing = sorted(free_vars(term) - bound)
            if missing:
                raise RuleValidationError(
                    f"Rule '{rule_name}' {where} refers to unbound names: {', '.join(missing)}"
                )
            if not allow_say and _contains_say(term):
                raise RuleValidationError(
                    f"Rule '{rule_name}' {where} may not say facts outside the body."
                )


def _contains_say(term: Term) -> bool:
    if isinstance(term, Say):
        return True
    return any(_contains_say(child) for child in term.children())
