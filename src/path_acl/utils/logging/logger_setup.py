"""Logger setup utilities for creating JSONL loggers.

Loggers created here write JSONL with ISO 8601 timestamps to a file,
do not propagate to the root logger, and own exactly one handler.
"""

from __future__ import annotations

__all__ = [
    "close_logger",
    "setup_jsonl_logger",
]

import logging
from pathlib import Path

from path_acl.utils.file_helpers import set_secure_permissions
from path_acl.utils.logging.iso_formatter import ISO8601Formatter


def _ensure_secure_log_directory(log_file: Path) -> None:
    """Create the log directory with owner-only permissions.

    Raises:
        PermissionError: If the directory cannot be created due to permissions.
        OSError: If directory creation fails for other reasons.
    """
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        raise PermissionError(f"Cannot create log directory {log_file.parent}: {e}") from e
    except OSError as e:
        raise OSError(f"Failed to create log directory {log_file.parent}: {e}") from e
    set_secure_permissions(log_file.parent, is_directory=True)


def close_logger(logger: logging.Logger) -> None:
    """Close and detach every handler of logger."""
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


def setup_jsonl_logger(
    logger_name: str,
    log_file: Path,
    log_level: int = logging.INFO,
) -> logging.Logger:
    """Set up a logger that writes JSONL with ISO 8601 timestamps.

    Calling it again for the same name replaces the previous handler.

    Args:
        logger_name: Name for the logger (e.g., "path-acl.audit.decisions").
        log_file: Path to the log file.
        log_level: Logging level (default: INFO).

    Returns:
        Configured logger.

    Raises:
        PermissionError: If unable to create log directory due to permissions.
        OSError: If directory creation fails for other reasons.
    """
    _ensure_secure_log_directory(log_file)

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_level)
    logger.propagate = False
    close_logger(logger)

    file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    file_handler.setLevel(log_level)
    file_handler.setFormatter(ISO8601Formatter())
    logger.addHandler(file_handler)

    set_secure_permissions(log_file)
    return logger
