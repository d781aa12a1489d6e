"""Telemetry domain: decision audit logs and system events.

Structure:
    audit/          Decision audit logging (audit/decisions.jsonl)
                    - DecisionEventLogger: one record per evaluation
    models/         Pydantic models for log event types
    system/         System operational logs (system.jsonl + stderr)
"""

__all__: list[str] = []
