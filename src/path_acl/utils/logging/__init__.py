"""Logging utilities and helpers.

This package provides logging infrastructure for path-acl:
- iso_formatter: ISO 8601 timestamp formatting for JSONL logs
- logger_setup: Factory functions for creating configured loggers

Import directly from submodules:
    from path_acl.utils.logging.logger_setup import setup_jsonl_logger
"""

__all__: list[str] = []  # Direct submodule imports required (see docstring)
