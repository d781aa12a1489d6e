"""Custom exceptions for path-acl.

This module contains all custom exceptions used throughout the package.
Exceptions are organized into two categories:

Recoverable Errors (caller decides what to do):
    - PolicyNotFoundError: Named policy absent from cache and repository
    - PoliciesNotFoundError: One or more names in a bulk lookup are missing
    - InvalidPathError: Request path failed structural validation
    - InvalidPolicyError: Policy document or model data is malformed
    - RepositoryError: A repository source could not be read
    - QueryIncompleteError: Fluent query evaluated before it was complete

Critical Failures (internal invariants violated):
    - CriticalEvaluationFailure: Base for failures that must not be treated as deny
    - VariableResolutionError: Pattern engine fault during substitution
    - ConfigurationError: Configuration file is invalid or incomplete

A request that simply matches nothing is never an exception. It produces
an implicit deny result with a reason.

Usage:
    from path_acl.exceptions import PolicyNotFoundError, InvalidPathError
"""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "CriticalEvaluationFailure",
    "InvalidPathError",
    "InvalidPolicyError",
    "PathAclError",
    "PoliciesNotFoundError",
    "PolicyNotFoundError",
    "QueryIncompleteError",
    "RepositoryError",
    "VariableResolutionError",
]

from collections.abc import Iterable


class PathAclError(Exception):
    """Base exception for all path-acl errors."""


# =============================================================================
# Recoverable Errors
# =============================================================================


class PolicyNotFoundError(PathAclError, LookupError):
    """Raised when a policy name is unknown to both the registry and repository.

    Recoverable: callers typically surface it to an operator or treat it
    as an implicit deny. It is never swallowed by the library.

    Attributes:
        name: The policy name that was requested.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Policy not found: {name}")


class PoliciesNotFoundError(PathAclError, LookupError):
    """Raised by bulk lookups when one or more policy names are missing.

    Attributes:
        names: Every missing name, in request order.
    """

    def __init__(self, names: Iterable[str]) -> None:
        self.names = list(names)
        super().__init__(f"Policies not found: {', '.join(self.names)}")


class InvalidPathError(PathAclError, ValueError):
    """Raised when a request path fails validation before normalization.

    Attributes:
        path: The rejected path (repr-safe).
        reason: Why the path was rejected.
    """

    def __init__(self, path: object, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid path {path!r}: {reason}")


class InvalidPolicyError(PathAclError, ValueError):
    """Raised when policy data cannot be turned into a Policy.

    Attributes:
        source: File or label the data came from, if known.
        errors: Individual validation messages.
    """

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        errors: list[str] | None = None,
    ) -> None:
        self.source = source
        self.errors = errors or []
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        """Return message with one line per validation error."""
        if not self.errors:
            return self.message
        return self.message + "\n" + "\n".join(f"  - {e}" for e in self.errors)


class RepositoryError(PathAclError):
    """Raised when a repository source is missing, unreadable or malformed.

    Attributes:
        path: Filesystem path involved, if any.
    """

    def __init__(self, message: str, *, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)


class QueryIncompleteError(PathAclError):
    """Raised when a fluent query is evaluated before required parts are set."""


# =============================================================================
# Critical Failures (internal invariants violated)
# =============================================================================


class CriticalEvaluationFailure(PathAclError):
    """Base exception for failures that indicate a broken invariant.

    These must not be converted into a deny decision: they signal that the
    evaluator itself cannot be trusted for the current input.

    Attributes:
        exit_code: Process exit code used by the CLI.
        failure_type: Category string for logging.
    """

    exit_code: int = 1
    failure_type: str = "unknown"


class VariableResolutionError(CriticalEvaluationFailure):
    """The regex engine failed while substituting or extracting variables.

    Unreachable for well-formed patterns. Missing context keys are not
    an error and never raise this.
    """

    exit_code = 10
    failure_type = "variable_resolution_failure"


class ConfigurationError(CriticalEvaluationFailure):
    """Configuration is invalid or incomplete.

    Raised when:
    - Config file does not exist
    - Config file contains invalid JSON
    - Config file fails Pydantic validation
    """

    exit_code = 11
    failure_type = "configuration_failure"
