"""Pydantic models for log event types."""

from path_acl.telemetry.models.decision import DecisionEvent, MatchedRuleLog

__all__ = [
    "DecisionEvent",
    "MatchedRuleLog",
]
