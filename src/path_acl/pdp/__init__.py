"""Policy Decision Point (PDP) - path-based access evaluation.

Given policies, a capability, a path and a context, decides whether the
request is allowed. The PDP is side-effect free; repositories and logging
live outside it.

Structure:
    capability.py     - Capability and Effect enums
    matcher.py        - Path normalization, variables, glob matching
    conditions.py     - Condition variants and ConditionEvaluator
    specificity.py    - Pattern specificity scoring
    policy.py         - Rule and Policy models
    result.py         - EvaluationResult
    engine.py         - EvaluationService (deny-overrides algorithm)
    protocol.py       - PolicyRepository protocol
    registry.py       - PolicyRegistry (cache + repository fallback)
    manager.py        - AccessManager and fluent queries

Policy file I/O is in utils/policy/policy_helpers.py and path_acl.repository.
"""

from path_acl.pdp.capability import Capability, Effect
from path_acl.pdp.conditions import Condition, ConditionEvaluator, Equals, OneOf, Predicate
from path_acl.pdp.engine import EvaluationService, MatchedRule
from path_acl.pdp.manager import AccessManager, PathQuery, PolicyQuery
from path_acl.pdp.matcher import (
    PathMatcher,
    extract_variables,
    match_path,
    normalize_path,
    resolve_variables,
)
from path_acl.pdp.policy import Policy, Rule
from path_acl.pdp.protocol import PolicyRepository
from path_acl.pdp.registry import PolicyRegistry
from path_acl.pdp.result import EvaluationResult
from path_acl.pdp.specificity import Specificity, SpecificityCalculator, calculate_specificity

__all__ = [
    # Enums
    "Capability",
    "Effect",
    # Matching
    "PathMatcher",
    "extract_variables",
    "match_path",
    "normalize_path",
    "resolve_variables",
    # Conditions
    "Condition",
    "ConditionEvaluator",
    "Equals",
    "OneOf",
    "Predicate",
    # Specificity
    "Specificity",
    "SpecificityCalculator",
    "calculate_specificity",
    # Models
    "EvaluationResult",
    "Policy",
    "Rule",
    # Evaluation
    "EvaluationService",
    "MatchedRule",
    # Registry and manager
    "AccessManager",
    "PathQuery",
    "PolicyQuery",
    "PolicyRegistry",
    "PolicyRepository",
]
