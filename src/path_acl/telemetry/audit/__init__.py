"""Decision audit logging."""

from path_acl.telemetry.audit.decision_logger import (
    DecisionEventLogger,
    create_decision_logger,
    get_decisions_log_path,
)

__all__ = [
    "DecisionEventLogger",
    "create_decision_logger",
    "get_decisions_log_path",
]
