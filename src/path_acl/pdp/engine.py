"""Evaluation service - decide requests against one or more policies.

Evaluation flow:
1. Validate the request path
2. Keep rules whose pattern matches the path (variables from context)
   and whose conditions hold for the context
3. DENY rules are candidates regardless of capability
4. ALLOW rules are candidates only if a granted capability implies
   the requested one
5. No candidates -> implicit deny ("No matching rule found")
6. Stable sort by specificity, most specific first
7. Any DENY candidate -> explicit deny (the first one in sorted order)
8. Otherwise the most specific ALLOW decides

Design principles:
1. Deny overrides allow regardless of specificity
2. Specificity only picks WHICH rule is reported, never flips the outcome
3. Ties keep evaluation order (policy order, then rule order)
4. Evaluation is pure: no I/O, no shared mutable state

Tie-breaker: candidates are enumerated with their position and sorted on
(-specificity, position), so equal scores keep input order.
"""

from __future__ import annotations

__all__ = [
    "EvaluationService",
    "MatchedRule",
]

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from path_acl.pdp.capability import Capability, Effect
from path_acl.pdp.conditions import ConditionEvaluator
from path_acl.pdp.matcher import PathMatcher, validate_path
from path_acl.pdp.policy import Policy, Rule
from path_acl.pdp.result import EvaluationResult
from path_acl.pdp.specificity import Specificity, SpecificityCalculator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchedRule:
    """A candidate rule for one request, for audit output.

    Attributes:
        policy: Name of the policy that holds the rule.
        rule: The rule itself.
        specificity: Score of the rule's pattern.
    """

    policy: str
    rule: Rule
    specificity: Specificity

    @property
    def effect(self) -> Effect:
        return self.rule.effect

    @property
    def pattern(self) -> str:
        return self.rule.pattern


def _as_capability(capability: Capability | str) -> Capability:
    if isinstance(capability, Capability):
        return capability
    return Capability.from_string(capability)


class EvaluationService:
    """Deny-overrides evaluator over a list of policies.

    Stateless apart from its collaborators, which are themselves
    stateless. Safe for concurrent use.
    """

    def __init__(
        self,
        matcher: PathMatcher | None = None,
        condition_evaluator: ConditionEvaluator | None = None,
        specificity: SpecificityCalculator | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            matcher: Path matcher. Defaults to PathMatcher().
            condition_evaluator: Condition evaluator. Defaults to ConditionEvaluator().
            specificity: Specificity calculator. Defaults to SpecificityCalculator().
        """
        self._matcher = matcher if matcher is not None else PathMatcher()
        self._conditions = (
            condition_evaluator if condition_evaluator is not None else ConditionEvaluator()
        )
        self._specificity = specificity if specificity is not None else SpecificityCalculator()

    def evaluate(
        self,
        policies: Iterable[Policy],
        capability: Capability | str,
        path: str,
        context: Mapping[str, Any] | None = None,
    ) -> EvaluationResult:
        """Decide whether `capability` on `path` is allowed.

        Args:
            policies: Policies to evaluate, in order.
            capability: Requested capability (name accepted).
            path: Request path.
            context: Request context for variables and conditions.

        Returns:
            EvaluationResult: allowed, implicit deny, or explicit deny.

        Raises:
            InvalidPathError: If path fails validation.
            ValueError: If capability is an unknown name.
        """
        policies = tuple(policies)
        capability = _as_capability(capability)
        validate_path(path)

        candidates = self._sorted_candidates(policies, capability, path, context)

        if not candidates:
            result = EvaluationResult.deny(evaluated_policies=policies)
        else:
            deny = next((c for c in candidates if c[1].is_deny), None)
            if deny is not None:
                result = EvaluationResult.deny_explicitly(deny[1], deny[0], policies)
            else:
                policy, rule = candidates[0]
                result = EvaluationResult.allow(rule, policy, policies)

        logger.debug(
            "Evaluated %s %s against %d policies: %s (%d candidates, rule=%s)",
            capability.value,
            path,
            len(policies),
            result.decision,
            len(candidates),
            result.matched_rule.pattern if result.matched_rule else None,
        )
        return result

    def list_accessible_paths(
        self,
        policies: Iterable[Policy],
        capability: Capability | str,
    ) -> set[str]:
        """Raw patterns of every ALLOW rule that grants `capability`.

        No path or condition matching is done: this enumerates patterns,
        not concrete resources. DENY rules are not subtracted.
        """
        capability = _as_capability(capability)
        return {
            rule.pattern
            for policy in policies
            for rule in policy.rules
            if rule.is_allow and rule.has_capability(capability)
        }

    def get_capabilities(
        self,
        policies: Iterable[Policy],
        path: str,
        context: Mapping[str, Any] | None = None,
    ) -> set[Capability]:
        """Union of capabilities granted at `path` by applicable ALLOW rules.

        DENY rules are vetoes, not capabilities, and are ignored here.

        Raises:
            InvalidPathError: If path fails validation.
        """
        validate_path(path)
        capabilities: set[Capability] = set()
        for _, rule in self._applicable_rules(tuple(policies), path, context):
            if rule.is_allow:
                capabilities.update(rule.capabilities)
        return capabilities

    def get_matching_rules(
        self,
        policies: Iterable[Policy],
        capability: Capability | str,
        path: str,
        context: Mapping[str, Any] | None = None,
    ) -> list[MatchedRule]:
        """Every candidate for a request, most specific first.

        Same candidate set and order evaluate() decides on. Use for audit
        trails and `check --explain` style output.
        """
        capability = _as_capability(capability)
        validate_path(path)
        return [
            MatchedRule(
                policy=policy.name,
                rule=rule,
                specificity=self._specificity.calculate(rule.pattern),
            )
            for policy, rule in self._sorted_candidates(tuple(policies), capability, path, context)
        ]

    def _applicable_rules(
        self,
        policies: tuple[Policy, ...],
        path: str,
        context: Mapping[str, Any] | None,
    ) -> Iterator[tuple[Policy, Rule]]:
        """Rules whose pattern matches and whose conditions hold, in order."""
        for policy in policies:
            for rule in policy.rules:
                if not self._matcher.matches(rule.pattern, path, context):
                    continue
                if not self._conditions.evaluate_all(rule.conditions, context):
                    continue
                yield policy, rule

    def _sorted_candidates(
        self,
        policies: tuple[Policy, ...],
        capability: Capability,
        path: str,
        context: Mapping[str, Any] | None,
    ) -> list[tuple[Policy, Rule]]:
        """Candidates sorted by specificity descending, ties in input order."""
        scored = [
            (self._specificity.calculate(rule.pattern), idx, policy, rule)
            for idx, (policy, rule) in enumerate(self._applicable_rules(policies, path, context))
            if rule.is_deny or rule.has_capability(capability)
        ]
        scored.sort(key=lambda x: (-x[0].weight, -x[0].segments, x[1]))
        return [(policy, rule) for _, _, policy, rule in scored]
