"""Decision logging for access evaluations.

Logs are written to <log_dir>/path-acl/audit/decisions.jsonl, one
DecisionEvent per evaluation. Only context keys are recorded, never
context values.
"""

from __future__ import annotations

__all__ = [
    "DecisionEventLogger",
    "create_decision_logger",
    "get_decisions_log_path",
]

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from path_acl.constants import APP_NAME, AUDIT_DIR_NAME, DECISIONS_LOG_FILENAME
from path_acl.pdp.capability import Capability
from path_acl.pdp.engine import MatchedRule
from path_acl.pdp.result import EvaluationResult
from path_acl.telemetry.models.decision import DecisionEvent, MatchedRuleLog
from path_acl.utils.logging.logger_setup import setup_jsonl_logger


def get_decisions_log_path(log_dir: Path) -> Path:
    """Return <log_dir>/path-acl/audit/decisions.jsonl."""
    return log_dir / APP_NAME / AUDIT_DIR_NAME / DECISIONS_LOG_FILENAME


def create_decision_logger(log_path: Path) -> logging.Logger:
    """Create the JSONL logger for decision events.

    Args:
        log_path: Path to decisions.jsonl.

    Returns:
        Configured logger (non-propagating, single file handler).
    """
    return setup_jsonl_logger(f"{APP_NAME}.audit.decisions", log_path, logging.INFO)


class DecisionEventLogger:
    """Writes DecisionEvent records for evaluation results.

    Decision logs are always written at INFO, independent of the
    configured log level.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def log(
        self,
        result: EvaluationResult,
        capability: Capability | str,
        path: str,
        context_keys: Iterable[str] = (),
        eval_ms: float = 0.0,
        matched_rules: list[MatchedRule] | None = None,
    ) -> DecisionEvent:
        """Log one decision.

        Args:
            result: Outcome of EvaluationService.evaluate().
            capability: Requested capability.
            path: Request path as given by the caller.
            context_keys: Keys of the request context.
            eval_ms: Evaluation time in milliseconds.
            matched_rules: Optional candidate list from get_matching_rules().

        Returns:
            The event that was logged.
        """
        capability_value = capability.value if isinstance(capability, Capability) else str(capability)

        rules_log = None
        if matched_rules is not None:
            rules_log = [
                MatchedRuleLog(
                    policy=m.policy,
                    pattern=m.pattern,
                    effect=m.effect.value,
                    specificity=m.specificity.weight,
                    description=m.rule.description,
                )
                for m in matched_rules
            ]

        event = DecisionEvent(
            decision=result.decision,
            reason=result.reason,
            capability=capability_value,
            path=path,
            context_keys=sorted(context_keys),
            policies=[p.name for p in result.evaluated_policies],
            matched_policy=result.matched_policy.name if result.matched_policy else None,
            matched_rule=result.matched_rule.pattern if result.matched_rule else None,
            matched_rules=rules_log,
            eval_ms=round(eval_ms, 3),
        )

        self._logger.info(event.model_dump(exclude={"time"}, exclude_none=True))
        return event

    def log_context(
        self,
        result: EvaluationResult,
        capability: Capability | str,
        path: str,
        context: Mapping[str, Any] | None,
        eval_ms: float = 0.0,
    ) -> DecisionEvent:
        """Like log(), taking the full context and recording only its keys."""
        return self.log(result, capability, path, list(context or {}), eval_ms)
