"""TTL cache in front of another repository.

Caches single lookups from a slow repository (database, remote store)
for an optional time-to-live. all() is never cached: it is typically
called once at startup.

Concurrency: one threading.Lock guards the cache dict. The inner
repository is called outside the lock, so two threads missing the same
name may both load it; the second write wins and both get a valid policy.
"""

from __future__ import annotations

__all__ = [
    "CacheEntry",
    "CachedRepository",
]

import threading
import time
from collections.abc import Iterable
from dataclasses import dataclass

from path_acl.constants import DEFAULT_CACHE_PREFIX
from path_acl.exceptions import PoliciesNotFoundError
from path_acl.pdp.policy import Policy
from path_acl.pdp.protocol import PolicyRepository


@dataclass(frozen=True)
class CacheEntry:
    """A cached policy.

    Attributes:
        policy: The cached policy.
        expires_at: Monotonic deadline, or None for no expiry.
    """

    policy: Policy
    expires_at: float | None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class CachedRepository:
    """Read-through cache with optional TTL.

    Attributes:
        ttl_seconds: Entry lifetime, None to keep entries until forgotten.
        prefix: Key prefix for cache entries.
    """

    def __init__(
        self,
        inner: PolicyRepository,
        ttl_seconds: float | None = None,
        prefix: str = DEFAULT_CACHE_PREFIX,
    ) -> None:
        """Initialize the cache.

        Args:
            inner: Repository to load from on a miss.
            ttl_seconds: Entry lifetime in seconds. None disables expiry.
            prefix: Key prefix for cache entries.

        Raises:
            ValueError: If ttl_seconds is not positive.
        """
        if ttl_seconds is not None and ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")

        self._inner = inner
        self._ttl_seconds = ttl_seconds
        self._prefix = prefix
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float | None:
        return self._ttl_seconds

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def inner(self) -> PolicyRepository:
        return self._inner

    def _key(self, name: str) -> str:
        return f"{self._prefix}{name}"

    def _cached(self, name: str) -> Policy | None:
        """Return a live cached policy, evicting it if expired."""
        key = self._key(name)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(time.monotonic()):
                del self._entries[key]
                return None
            return entry.policy

    def _store(self, policy: Policy) -> None:
        expires_at = None if self._ttl_seconds is None else time.monotonic() + self._ttl_seconds
        with self._lock:
            self._entries[self._key(policy.name)] = CacheEntry(policy, expires_at)

    def has(self, name: str) -> bool:
        return self._cached(name) is not None or self._inner.has(name)

    def get(self, name: str) -> Policy:
        """Return the policy from cache, loading and caching it on a miss.

        Raises:
            PolicyNotFoundError: Propagated from the inner repository.
        """
        policy = self._cached(name)
        if policy is None:
            policy = self._inner.get(name)
            self._store(policy)
        return policy

    def get_many(self, names: Iterable[str]) -> list[Policy]:
        """Serve cached names, load the rest in one inner get_many() call.

        Raises:
            PoliciesNotFoundError: Propagated from the inner repository.
        """
        names = list(names)
        result: dict[str, Policy] = {}
        uncached: list[str] = []
        for name in names:
            policy = self._cached(name)
            if policy is None:
                uncached.append(name)
            else:
                result[name] = policy

        if uncached:
            for policy in self._inner.get_many(uncached):
                self._store(policy)
                result[policy.name] = policy

        missing = [name for name in names if name not in result]
        if missing:
            raise PoliciesNotFoundError(missing)
        return [result[name] for name in names]

    def all(self) -> dict[str, Policy]:
        return self._inner.all()

    def forget(self, name: str) -> bool:
        """Evict one cached policy. Returns True if it was cached."""
        with self._lock:
            return self._entries.pop(self._key(name), None) is not None

    def flush(self) -> None:
        """Evict every cached policy."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
