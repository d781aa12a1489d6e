"""Access manager - registry plus evaluator behind a fluent query API.

The manager is an ordinary object: construct it, register or load
policies, then ask questions.

    manager = AccessManager(repository=YamlRepository("policies/"))
    manager.register(users_policy)

    # Policy-centric: "can these policies do X at P?"
    manager.for_policies("users").can("/users/42", Capability.UPDATE).allowed()

    # Path-centric: "what can be done at P under these policies?"
    manager.path("/users/42").against(["users", "admins"]).capabilities()

Queries are immutable: every builder call returns a new query, so a
partially built query can be reused as a template.
"""

from __future__ import annotations

__all__ = [
    "AccessManager",
    "PathQuery",
    "PolicyQuery",
]

import dataclasses
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Self

from path_acl.exceptions import QueryIncompleteError
from path_acl.pdp.capability import Capability
from path_acl.pdp.engine import EvaluationService, MatchedRule
from path_acl.pdp.policy import Policy
from path_acl.pdp.protocol import PolicyRepository
from path_acl.pdp.registry import PolicyRegistry
from path_acl.pdp.result import EvaluationResult

PolicyRef = Policy | str


@dataclass(frozen=True)
class PolicyQuery:
    """Question asked of a fixed set of policies.

    Build with AccessManager.for_policies(), then .can() and optionally
    .with_context() before evaluating.
    """

    service: EvaluationService = field(repr=False)
    policies: tuple[Policy, ...]
    path: str | None = None
    capability: Capability | None = None
    context: Mapping[str, Any] = field(default_factory=dict)

    def can(self, path: str, capability: Capability | str = Capability.READ) -> Self:
        """Set the request path and capability (default READ)."""
        if not isinstance(capability, Capability):
            capability = Capability.from_string(capability)
        return dataclasses.replace(self, path=path, capability=capability)

    def with_context(self, context: Mapping[str, Any]) -> Self:
        """Set the request context (replaces any previous context)."""
        return dataclasses.replace(self, context=dict(context))

    def evaluate(self) -> EvaluationResult:
        """Run the evaluation.

        Raises:
            QueryIncompleteError: If .can() was not called.
        """
        if self.path is None or self.capability is None:
            raise QueryIncompleteError("Path and capability must be set before evaluating; call .can()")
        return self.service.evaluate(self.policies, self.capability, self.path, self.context)

    def allowed(self) -> bool:
        return self.evaluate().allowed

    def denied(self) -> bool:
        return self.evaluate().is_denied

    def matching_rules(self) -> list[MatchedRule]:
        """Candidates evaluate() would decide on, most specific first."""
        if self.path is None or self.capability is None:
            raise QueryIncompleteError("Path and capability must be set before evaluating; call .can()")
        return self.service.get_matching_rules(self.policies, self.capability, self.path, self.context)

    def accessible_paths(self) -> set[str]:
        """Patterns granting the query's capability.

        Raises:
            QueryIncompleteError: If no capability has been set.
        """
        if self.capability is None:
            raise QueryIncompleteError("Capability must be set before listing paths; call .can()")
        return self.service.list_accessible_paths(self.policies, self.capability)


@dataclass(frozen=True)
class PathQuery:
    """Question asked about a fixed path.

    Build with AccessManager.path(), then .against() and optionally
    .with_context() before evaluating.
    """

    manager: AccessManager = field(repr=False)
    path: str
    policies: tuple[Policy, ...] | None = None
    context: Mapping[str, Any] = field(default_factory=dict)

    def against(self, policies: PolicyRef | Iterable[PolicyRef]) -> Self:
        """Set the policies to evaluate, by object or registered name.

        Raises:
            PoliciesNotFoundError: If any name is unknown.
        """
        return dataclasses.replace(self, policies=self.manager.resolve(policies))

    def with_context(self, context: Mapping[str, Any]) -> Self:
        """Set the request context (replaces any previous context)."""
        return dataclasses.replace(self, context=dict(context))

    def capabilities(self) -> set[Capability]:
        """Capabilities granted at the path."""
        return self.manager.service.get_capabilities(self._require_policies(), self.path, self.context)

    def allows(self, capability: Capability | str) -> bool:
        return self.manager.service.evaluate(
            self._require_policies(), capability, self.path, self.context
        ).allowed

    def denies(self, capability: Capability | str) -> bool:
        return not self.allows(capability)

    def _require_policies(self) -> tuple[Policy, ...]:
        if self.policies is None:
            raise QueryIncompleteError("Policies must be set before evaluating; call .against()")
        return self.policies


class AccessManager:
    """Entry point tying a PolicyRegistry to an EvaluationService.

    Attributes:
        registry: Policy registry (name lookups, repository fallback).
        service: Evaluation service.
    """

    def __init__(
        self,
        registry: PolicyRegistry | None = None,
        service: EvaluationService | None = None,
        repository: PolicyRepository | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            registry: Registry to use. A new one is created if omitted.
            service: Evaluation service. Defaults to EvaluationService().
            repository: Repository to attach to the registry.
        """
        self.registry = registry if registry is not None else PolicyRegistry()
        self.service = service if service is not None else EvaluationService()
        if repository is not None:
            self.registry.set_repository(repository)

    # -------------------------------------------------------------------------
    # Registry delegation
    # -------------------------------------------------------------------------

    def register(self, *policies: Policy) -> None:
        for policy in policies:
            self.registry.add(policy)

    def has(self, name: str) -> bool:
        return self.registry.has(name)

    def get(self, name: str) -> Policy:
        return self.registry.get(name)

    def all(self) -> dict[str, Policy]:
        return self.registry.all()

    def use_repository(self, repository: PolicyRepository | None) -> None:
        self.registry.set_repository(repository)

    def resolve(self, policies: PolicyRef | Iterable[PolicyRef]) -> tuple[Policy, ...]:
        """Turn policies and/or names into policies, preserving order.

        Raises:
            PoliciesNotFoundError: Listing every unknown name.
            TypeError: If an item is neither a Policy nor a name.
        """
        if isinstance(policies, (Policy, str)):
            policies = [policies]
        items = list(policies)

        for item in items:
            if not isinstance(item, (Policy, str)):
                raise TypeError(f"Expected Policy or policy name, got {type(item).__name__}")

        loaded = iter(self.registry.get_many([i for i in items if isinstance(i, str)]))
        return tuple(next(loaded) if isinstance(item, str) else item for item in items)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def for_policies(self, policies: PolicyRef | Iterable[PolicyRef]) -> PolicyQuery:
        """Start a policy-centric query.

        Raises:
            PoliciesNotFoundError: If any name is unknown.
        """
        return PolicyQuery(service=self.service, policies=self.resolve(policies))

    def path(self, path: str) -> PathQuery:
        """Start a path-centric query."""
        return PathQuery(manager=self, path=path)

    def evaluate(
        self,
        policies: PolicyRef | Iterable[PolicyRef],
        capability: Capability | str,
        path: str,
        context: Mapping[str, Any] | None = None,
    ) -> EvaluationResult:
        """One-shot evaluation without building a query."""
        return self.service.evaluate(self.resolve(policies), capability, path, context)
