"""Condition definitions attached to policy rules.

A rule carries a mapping of context field -> Condition. Every condition
must hold for the rule to apply (AND logic, short-circuit on first failure).

Raw definitions (from code or policy files) are converted exactly once,
when the rule is built:
- callable          -> Predicate (fn(value) coerced to bool)
- list, tuple, set  -> OneOf (exact type-and-value membership)
- anything else     -> Equals (exact type-and-value equality)

Exactness means True does not equal 1 and 1 does not equal 1.0.
A field missing from the context is evaluated as None.
"""

from __future__ import annotations

__all__ = [
    "Condition",
    "ConditionDefinition",
    "ConditionEvaluator",
    "Equals",
    "OneOf",
    "Predicate",
    "conditions_satisfied",
    "to_condition",
]

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from path_acl.exceptions import InvalidPolicyError

# Anything a caller may pass as a raw condition definition
ConditionDefinition = Any


def _same(expected: Any, actual: Any) -> bool:
    """Identical type and equal value."""
    return type(expected) is type(actual) and expected == actual


class Condition(ABC):
    """A single test applied to one context value."""

    @abstractmethod
    def evaluate(self, value: Any) -> bool:
        """Return True if value satisfies the condition."""

    @abstractmethod
    def to_definition(self) -> Any:
        """Return the raw, serializable definition for this condition."""


@dataclass(frozen=True)
class Equals(Condition):
    """Value must be identical in type and value to `expected`."""

    expected: Any

    def evaluate(self, value: Any) -> bool:
        return _same(self.expected, value)

    def to_definition(self) -> Any:
        return self.expected


@dataclass(frozen=True)
class OneOf(Condition):
    """Value must be an exact member of `values`."""

    values: tuple[Any, ...]

    def evaluate(self, value: Any) -> bool:
        return any(_same(candidate, value) for candidate in self.values)

    def to_definition(self) -> Any:
        return list(self.values)


@dataclass(frozen=True)
class Predicate(Condition):
    """Value is passed to `fn`; the result is coerced to bool.

    Exceptions raised by `fn` propagate to the caller.
    """

    fn: Callable[[Any], object]

    def evaluate(self, value: Any) -> bool:
        return bool(self.fn(value))

    def to_definition(self) -> Any:
        name = getattr(self.fn, "__name__", repr(self.fn))
        raise InvalidPolicyError(f"Predicate condition {name!r} cannot be serialized")


def to_condition(definition: ConditionDefinition) -> Condition:
    """Convert a raw definition into its Condition variant.

    Args:
        definition: Callable, sequence/set, scalar, or an existing Condition.

    Returns:
        Condition instance.
    """
    if isinstance(definition, Condition):
        return definition
    if callable(definition):
        return Predicate(definition)
    if isinstance(definition, (list, tuple, set, frozenset)):
        return OneOf(tuple(definition))
    return Equals(definition)


class ConditionEvaluator:
    """Applies a rule's condition mapping to a request context."""

    def evaluate_all(
        self,
        conditions: Mapping[str, Condition],
        context: Mapping[str, Any] | None,
    ) -> bool:
        """Return True if every condition holds for its context field.

        Args:
            conditions: Field name -> Condition, checked in mapping order.
            context: Request context. Missing fields evaluate as None.

        Returns:
            False on the first failing condition; True if all pass or the
            mapping is empty.
        """
        ctx = context or {}
        for field, condition in conditions.items():
            if not condition.evaluate(ctx.get(field)):
                return False
        return True


_EVALUATOR = ConditionEvaluator()


def conditions_satisfied(
    conditions: Mapping[str, Condition],
    context: Mapping[str, Any] | None,
) -> bool:
    """Module-level shortcut for ConditionEvaluator().evaluate_all()."""
    return _EVALUATOR.evaluate_all(conditions, context)
