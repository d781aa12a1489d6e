"""Policy utilities for path-acl.

Provides helper functions for policy file management.
"""

from path_acl.utils.policy.policy_helpers import (
    dump_policies,
    load_policies,
    load_policy,
    parse_policies,
    save_policies,
)

__all__ = [
    "dump_policies",
    "load_policies",
    "load_policy",
    "parse_policies",
    "save_policies",
]
