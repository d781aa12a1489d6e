"""System logger for operational events.

Singleton logger for events that are not part of the decision audit
trail (repository load failures, configuration problems, CLI errors).

Logging strategy:
- Console (stderr): INFO and above
- File (system.jsonl): WARNING and above only

The file handler is configured separately via configure_system_logger_file()
once the log directory from config is known.
"""

from __future__ import annotations

__all__ = [
    "ConsoleFormatter",
    "configure_system_logger_file",
    "get_system_log_path",
    "get_system_logger",
    "reset_system_logger",
]

import logging
import sys
from pathlib import Path

from path_acl.constants import APP_NAME, SYSTEM_LOG_FILENAME
from path_acl.utils.logging.iso_formatter import ISO8601Formatter
from path_acl.utils.logging.logger_setup import close_logger


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for console output.

    Dict messages show their 'message' or 'event' field.
    """

    def format(self, record: logging.LogRecord) -> str:
        if isinstance(record.msg, dict):
            msg = record.msg.get("message") or record.msg.get("event", "")
            return f"{record.levelname}: {msg}"
        return f"{record.levelname}: {record.getMessage()}"


_system_logger: logging.Logger | None = None
_file_handler_configured: bool = False


def get_system_log_path(log_dir: Path) -> Path:
    """Return <log_dir>/path-acl/system.jsonl."""
    return log_dir / APP_NAME / SYSTEM_LOG_FILENAME


def get_system_logger() -> logging.Logger:
    """Get the singleton system logger instance.

    Created on first call with a stderr handler only.

    Example:
        >>> logger = get_system_logger()
        >>> logger.warning({"event": "policy_load_failed", "message": "..."})
    """
    global _system_logger

    if _system_logger is not None:
        return _system_logger

    _system_logger = logging.getLogger(f"{APP_NAME}.system")
    _system_logger.setLevel(logging.INFO)
    _system_logger.propagate = False
    close_logger(_system_logger)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.INFO)
    stderr_handler.setFormatter(ConsoleFormatter())
    _system_logger.addHandler(stderr_handler)

    return _system_logger


def configure_system_logger_file(log_path: Path) -> None:
    """Add the WARNING+ JSONL file handler. Only the first call has effect.

    If the log directory cannot be created, stderr logging continues and
    the file handler is skipped.
    """
    global _file_handler_configured

    if _file_handler_configured:
        return

    logger = get_system_logger()

    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    except OSError as e:
        logger.warning({"event": "system_log_unavailable", "message": f"Cannot open {log_path}: {e}"})
        return

    file_handler.setLevel(logging.WARNING)
    file_handler.setFormatter(ISO8601Formatter())
    logger.addHandler(file_handler)

    _file_handler_configured = True


def reset_system_logger() -> None:
    """Close all handlers and forget the singleton (used between CLI runs and in tests)."""
    global _system_logger, _file_handler_configured

    if _system_logger is not None:
        close_logger(_system_logger)
    _system_logger = None
    _file_handler_configured = False
