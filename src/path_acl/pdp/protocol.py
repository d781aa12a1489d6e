"""Protocol definition for policy repositories.

Defines the interface PolicyRegistry uses to load policies it has not
cached. Implementations live in path_acl.repository, but any object with
these methods works (structural subtyping), e.g. a database-backed store:

    class SqlPolicyRepository:
        def has(self, name: str) -> bool:
            return self._session.query(PolicyRow).filter_by(name=name).count() > 0

        def get(self, name: str) -> Policy:
            row = self._session.query(PolicyRow).filter_by(name=name).first()
            if row is None:
                raise PolicyNotFoundError(name)
            return Policy.from_dict(row.document)
        ...
"""

from __future__ import annotations

__all__ = [
    "PolicyRepository",
]

from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from path_acl.pdp.policy import Policy


@runtime_checkable
class PolicyRepository(Protocol):
    """Source of policies by name.

    Repositories may block on I/O. Their failures are propagated by the
    registry untouched.

    Required methods:
    - has(): Existence check
    - get(): Single lookup, raises PolicyNotFoundError if absent
    - get_many(): Bulk lookup, raises PoliciesNotFoundError listing every missing name
    - all(): Every policy the repository holds, keyed by name
    """

    def has(self, name: str) -> bool:
        """Return True if a policy with this name exists."""
        ...

    def get(self, name: str) -> "Policy":
        """Return the named policy.

        Raises:
            PolicyNotFoundError: If no policy has this name.
        """
        ...

    def get_many(self, names: Iterable[str]) -> list["Policy"]:
        """Return the named policies in request order.

        Raises:
            PoliciesNotFoundError: If any name is missing.
        """
        ...

    def all(self) -> dict[str, "Policy"]:
        """Return every policy, keyed by name."""
        ...
