"""System operational logging."""

from path_acl.telemetry.system.system_logger import (
    configure_system_logger_file,
    get_system_log_path,
    get_system_logger,
)

__all__ = [
    "configure_system_logger_file",
    "get_system_log_path",
    "get_system_logger",
]
