"""Custom exceptions for the rule firing engine."""

from __future__ import annotations


class FactFireError(Exception):
    """Base exception for engine failures."""


class SchemaError(FactFireError):
    """Raised when a value, fact, term or rule definition is invalid."""


class EvaluationError(FactFireError):
    """Raised when a term cannot be evaluated (unbound name, type mismatch).

    This signals a malformed rule, never a rule that simply did not match.
    """


class RuleValidationError(FactFireError):
    """Raised when a rule is not well formed."""


class StoreError(FactFireError):
    """Raised when store contents are invalid."""


class RuleRegistryError(FactFireError):
    """Raised when rule registry operations fail."""


class AmbiguousFiringError(FactFireError):
    """Raised when a unique firing was required but several exist."""


class SessionError(FactFireError):
    """Raised when a session cannot commit a submission."""
