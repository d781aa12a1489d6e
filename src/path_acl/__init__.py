"""path-acl: path-based access control.

Policies are named lists of rules. Each rule pairs a path pattern with an
effect and capabilities; the evaluator picks the most specific matching
rule, with deny overriding allow.

    from path_acl import AccessManager, Capability, Policy, Rule

    manager = AccessManager()
    manager.register(
        Policy.create(
            "users",
            Rule.allow("/users/*", Capability.READ),
            Rule.deny("/users/admin"),
        )
    )
    manager.for_policies("users").can("/users/42", "read").allowed()  # True
"""

__version__ = "0.1.0"

from path_acl.exceptions import (
    ConfigurationError,
    CriticalEvaluationFailure,
    InvalidPathError,
    InvalidPolicyError,
    PathAclError,
    PoliciesNotFoundError,
    PolicyNotFoundError,
    QueryIncompleteError,
    RepositoryError,
    VariableResolutionError,
)
from path_acl.pdp import (
    AccessManager,
    Capability,
    Effect,
    EvaluationResult,
    EvaluationService,
    Policy,
    PolicyRegistry,
    PolicyRepository,
    Rule,
)
from path_acl.repository import (
    CachedRepository,
    ChainedRepository,
    InMemoryRepository,
    JsonRepository,
    YamlRepository,
)

__all__ = [
    "__version__",
    # Core
    "AccessManager",
    "Capability",
    "Effect",
    "EvaluationResult",
    "EvaluationService",
    "Policy",
    "PolicyRegistry",
    "PolicyRepository",
    "Rule",
    # Repositories
    "CachedRepository",
    "ChainedRepository",
    "InMemoryRepository",
    "JsonRepository",
    "YamlRepository",
    # Exceptions
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
