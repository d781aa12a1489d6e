"""In-memory policy repository."""

from __future__ import annotations

__all__ = ["InMemoryRepository"]

from collections.abc import Iterable, Mapping

from path_acl.exceptions import PoliciesNotFoundError, PolicyNotFoundError
from path_acl.pdp.policy import Policy


class InMemoryRepository:
    """Repository backed by a dict of policies keyed by name.

    A later policy with a duplicate name replaces the earlier one.
    File repositories load into this structure and share its lookups.
    """

    def __init__(self, policies: Iterable[Policy] | Mapping[str, Policy] = ()) -> None:
        self._policies: dict[str, Policy] = {}
        values = policies.values() if isinstance(policies, Mapping) else policies
        for policy in values:
            self._policies[policy.name] = policy

    def has(self, name: str) -> bool:
        return name in self._policies

    def get(self, name: str) -> Policy:
        try:
            return self._policies[name]
        except KeyError:
            raise PolicyNotFoundError(name) from None

    def get_many(self, names: Iterable[str]) -> list[Policy]:
        names = list(names)
        missing = [name for name in names if name not in self._policies]
        if missing:
            raise PoliciesNotFoundError(missing)
        return [self._policies[name] for name in names]

    def all(self) -> dict[str, Policy]:
        return dict(self._policies)

    def __len__(self) -> int:
        return len(self._policies)
