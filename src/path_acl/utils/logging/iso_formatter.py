"""JSONL formatting with ISO 8601 timestamps."""

from __future__ import annotations

__all__ = ["ISO8601Formatter", "iso_timestamp"]

import json
import logging
from datetime import datetime, timezone

from pydantic import BaseModel


def iso_timestamp(created: float) -> str:
    """Format a POSIX timestamp as YYYY-MM-DDTHH:MM:SS.sssZ (UTC)."""
    return (
        datetime.fromtimestamp(created, tz=timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


class ISO8601Formatter(logging.Formatter):
    """Formatter emitting one JSON object per line, "time" field first.

    Message handling:
    - pydantic model: dumped in JSON mode, None fields dropped
    - dict: used as-is (structured event)
    - anything else: {"level", "logger", "message"} with %-args applied

    Example: {"time": "2025-12-04T10:48:37.123Z", "event": "decision", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        if isinstance(record.msg, BaseModel):
            log_data = record.msg.model_dump(mode="json", exclude_none=True)
        elif isinstance(record.msg, dict):
            log_data = record.msg
        else:
            log_data = {
                "level": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
            }
            if record.exc_info:
                log_data["exc_info"] = self.formatException(record.exc_info)

        return json.dumps({"time": iso_timestamp(record.created), **log_data}, default=str)
