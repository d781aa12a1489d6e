"""Validation utilities for path-acl.

Turns pydantic ValidationError details into short, one-line messages
used by policy loading and configuration loading.
"""

from __future__ import annotations

__all__ = [
    "format_validation_errors",
]

from pydantic import ValidationError


def format_validation_errors(error: ValidationError) -> list[str]:
    """Format each validation error as "loc: msg".

    Args:
        error: Pydantic validation error.

    Returns:
        One message per failing field, in pydantic's order. Errors at the
        model root have no location prefix.

    Example:
        >>> format_validation_errors(e)
        ['rules.0.pattern: Value error, Rule pattern cannot be empty']
    """
    messages = []
    for item in error.errors():
        loc = ".".join(str(x) for x in item["loc"])
        messages.append(f"{loc}: {item['msg']}" if loc else item["msg"])
    return messages
