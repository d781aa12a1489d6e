"""Capability and Effect enums for policy rules.

These values define what a rule grants (capabilities) and what happens
when it matches (effect).
"""

from __future__ import annotations

__all__ = ["Capability", "Effect"]

from enum import Enum


class Capability(str, Enum):
    """An action class that a rule can grant.

    Inherits from str for easy serialization and comparison.
    ADMIN implies every other capability.

    Attributes:
        READ: Read a resource.
        LIST: Enumerate children of a resource.
        CREATE: Create a resource.
        UPDATE: Modify a resource.
        DELETE: Remove a resource.
        ADMIN: Superuser access, implies all of the above.
    """

    READ = "read"
    LIST = "list"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    ADMIN = "admin"

    @classmethod
    def from_string(cls, value: str) -> Capability:
        """Parse a capability name case-insensitively.

        Raises:
            ValueError: If the name is not a known capability.
        """
        return cls(value.strip().lower())

    def implies(self, other: Capability) -> bool:
        """Return True if holding this capability grants `other`."""
        return self is Capability.ADMIN or self is other


class Effect(str, Enum):
    """Outcome a rule produces when it matches.

    ALLOW grants the rule's capabilities. DENY is a veto on the path and
    does not look at capabilities at all.
    """

    ALLOW = "allow"
    DENY = "deny"
