"""Chained repository - consult several repositories in priority order."""

from __future__ import annotations

__all__ = ["ChainedRepository"]

from collections.abc import Iterable

from path_acl.exceptions import PoliciesNotFoundError, PolicyNotFoundError, RepositoryError
from path_acl.pdp.policy import Policy
from path_acl.pdp.protocol import PolicyRepository


class ChainedRepository:
    """Composite repository. Earlier repositories take precedence.

    Typical use: local overrides first, shared defaults last.

        ChainedRepository([YamlRepository("local.yml"), JsonRepository("defaults.json")])
    """

    def __init__(self, repositories: Iterable[PolicyRepository]) -> None:
        """Initialize the chain.

        Raises:
            RepositoryError: If no repositories are given.
        """
        self._repositories = tuple(repositories)
        if not self._repositories:
            raise RepositoryError("ChainedRepository requires at least one repository")

    @property
    def repositories(self) -> tuple[PolicyRepository, ...]:
        return self._repositories

    def has(self, name: str) -> bool:
        return any(repository.has(name) for repository in self._repositories)

    def get(self, name: str) -> Policy:
        """Return the policy from the first repository that has it."""
        for repository in self._repositories:
            if repository.has(name):
                return repository.get(name)
        raise PolicyNotFoundError(name)

    def get_many(self, names: Iterable[str]) -> list[Policy]:
        found: list[Policy] = []
        missing: list[str] = []
        for name in names:
            try:
                found.append(self.get(name))
            except PolicyNotFoundError:
                missing.append(name)

        if missing:
            raise PoliciesNotFoundError(missing)
        return found

    def all(self) -> dict[str, Policy]:
        """Merge every repository; earlier repositories override later ones."""
        merged: dict[str, Policy] = {}
        for repository in reversed(self._repositories):
            merged.update(repository.all())
        return merged
