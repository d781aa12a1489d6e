"""In-memory policy registry with read-through repository loading.

Lookups hit the in-memory tier first. On a miss the registry asks its
repository (if any), stores the loaded policy, and returns it.

Thread-safety:
- Reads of already-cached names take no lock (dict reads are atomic)
- A miss that loads from the repository is serialized per name, so
  concurrent misses for one name load it once
- Load locks come from a fixed pool striped by name hash, so unknown
  names never grow registry state
- Repository exceptions propagate untouched
"""

from __future__ import annotations

__all__ = ["PolicyRegistry"]

import logging
import threading
from collections.abc import Iterable

from path_acl.exceptions import PoliciesNotFoundError, PolicyNotFoundError
from path_acl.pdp.policy import Policy
from path_acl.pdp.protocol import PolicyRepository

logger = logging.getLogger(__name__)

_LOAD_LOCK_STRIPES = 32


class PolicyRegistry:
    """Policy cache keyed by name.

    Attributes:
        repository: Optional fallback source for cache misses.
    """

    def __init__(
        self,
        repository: PolicyRepository | None = None,
        policies: Iterable[Policy] = (),
    ) -> None:
        """Initialize the registry.

        Args:
            repository: Source consulted on cache misses.
            policies: Policies to register up front.
        """
        self._policies: dict[str, Policy] = {}
        self._repository = repository
        self._load_locks = tuple(threading.Lock() for _ in range(_LOAD_LOCK_STRIPES))

        for policy in policies:
            self.add(policy)

    @property
    def repository(self) -> PolicyRepository | None:
        return self._repository

    def set_repository(self, repository: PolicyRepository | None) -> None:
        """Replace the fallback repository. Cached policies are kept."""
        self._repository = repository

    def add(self, policy: Policy) -> None:
        """Register a policy, overwriting any cached policy with the same name."""
        self._policies[policy.name] = policy

    def get(self, name: str) -> Policy:
        """Return the named policy, loading it from the repository on a miss.

        Raises:
            PolicyNotFoundError: If neither the cache nor the repository has it.
        """
        policy = self._policies.get(name)
        if policy is not None:
            return policy

        repository = self._repository
        if repository is None:
            raise PolicyNotFoundError(name)

        with self._load_lock(name):
            # Another thread may have loaded it while we waited
            policy = self._policies.get(name)
            if policy is not None:
                return policy

            if not repository.has(name):
                raise PolicyNotFoundError(name)

            policy = repository.get(name)
            self._policies[name] = policy
            logger.debug("Loaded policy %r from %s", name, type(repository).__name__)
            return policy

    def get_many(self, names: Iterable[str]) -> list[Policy]:
        """Return the named policies in request order.

        Raises:
            PoliciesNotFoundError: Listing every name that could not be found.
        """
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

    def has(self, name: str) -> bool:
        """Return True if cached or available from the repository."""
        if name in self._policies:
            return True
        repository = self._repository
        return repository is not None and repository.has(name)

    def all(self) -> dict[str, Policy]:
        """Return a snapshot of the cached policies.

        Never loads from the repository.
        """
        return dict(self._policies)

    def forget(self, name: str) -> None:
        """Drop a cached policy. The next get() reloads it from the repository."""
        self._policies.pop(name, None)

    def clear(self) -> None:
        """Drop every cached policy."""
        self._policies.clear()

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __len__(self) -> int:
        return len(self._policies)

    def _load_lock(self, name: str) -> threading.Lock:
        return self._load_locks[hash(name) % len(self._load_locks)]
