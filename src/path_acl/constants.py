"""Application-wide constants for path-acl.

Constants that define evaluation and logging behavior.
For user-configurable settings per deployment, see config.py.
"""

__all__ = [
    # Application identity
    "APP_NAME",
    # Evaluation reasons
    "REASON_ALLOWED",
    "REASON_EXPLICIT_DENY",
    "REASON_NO_MATCH",
    # Specificity weights
    "LITERAL_SEGMENT_WEIGHT",
    "VARIABLE_SEGMENT_WEIGHT",
    "WILDCARD_SEGMENT_WEIGHT",
    "GLOB_SEGMENT_WEIGHT",
    # Repositories
    "DEFAULT_CACHE_PREFIX",
    "JSON_POLICY_SUFFIXES",
    "YAML_POLICY_SUFFIXES",
    # Logging
    "AUDIT_DIR_NAME",
    "DECISIONS_LOG_FILENAME",
    "SYSTEM_LOG_FILENAME",
]

# =============================================================================
# Application identity
# =============================================================================

APP_NAME = "path-acl"

# =============================================================================
# Evaluation reasons
# =============================================================================

REASON_ALLOWED = "Allowed by rule"
REASON_EXPLICIT_DENY = "Explicitly denied by rule"
REASON_NO_MATCH = "No matching rule found"

# =============================================================================
# Specificity weights (per path segment)
# =============================================================================
# Only the relative order matters: literal > variable > * > **.
# Gaps are wide enough that no realistic segment count lets a lower
# class outscore a higher one at the same depth.

LITERAL_SEGMENT_WEIGHT = 100
VARIABLE_SEGMENT_WEIGHT = 50
WILDCARD_SEGMENT_WEIGHT = 10
GLOB_SEGMENT_WEIGHT = 1

# =============================================================================
# Repositories
# =============================================================================

DEFAULT_CACHE_PREFIX = f"{APP_NAME}:policies:"
JSON_POLICY_SUFFIXES: tuple[str, ...] = (".json",)
YAML_POLICY_SUFFIXES: tuple[str, ...] = (".yml", ".yaml")

# =============================================================================
# Logging
# =============================================================================

AUDIT_DIR_NAME = "audit"
DECISIONS_LOG_FILENAME = "decisions.jsonl"
SYSTEM_LOG_FILENAME = "system.jsonl"
