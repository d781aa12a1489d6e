"""Pydantic models for decision audit logs (audit/decisions.jsonl).

The 'time' field is None when an event is created. ISO8601Formatter adds
the timestamp during serialization, so logged events always carry one
(e.g., "2025-12-11T10:30:45.123Z").
"""

from __future__ import annotations

__all__ = [
    "DecisionEvent",
    "MatchedRuleLog",
]

from typing import Literal

from pydantic import BaseModel, Field


class MatchedRuleLog(BaseModel):
    """Candidate rule summary for the audit trail."""

    policy: str
    pattern: str
    effect: Literal["allow", "deny"]
    specificity: int
    description: str | None = None


class DecisionEvent(BaseModel):
    """One evaluation log entry.

    Context values are never logged, only their keys.
    """

    # --- core ---
    time: str | None = Field(
        None,
        description="ISO 8601 timestamp, added by formatter during serialization",
    )
    event: Literal["decision"] = "decision"
    decision: Literal["allow", "deny", "explicit_deny"]
    reason: str

    # --- request ---
    capability: str
    path: str
    context_keys: list[str] = Field(default_factory=list)

    # --- outcome ---
    policies: list[str] = Field(default_factory=list)
    matched_policy: str | None = None
    matched_rule: str | None = None  # pattern of the deciding rule
    matched_rules: list[MatchedRuleLog] | None = None

    # --- duration ---
    eval_ms: float
