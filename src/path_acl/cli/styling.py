"""CLI output styling utilities.

Provides consistent styling helpers for CLI output:
- Cyan bold for section headers and labels
- Green for success messages (with checkmark)
- Red for error messages (with cross)
- Dim for neutral/empty state messages
- Effect and decision badges (ALLOW green, DENY red)
"""

from __future__ import annotations

__all__ = [
    "style_decision",
    "style_dim",
    "style_effect",
    "style_error",
    "style_header",
    "style_label",
    "style_success",
]

import click

from path_acl.pdp.capability import Effect
from path_acl.pdp.result import EvaluationResult


def style_header(title: str) -> str:
    """Style a section header as "--- Title ---" in cyan bold."""
    return click.style(f"--- {title} ---", fg="cyan", bold=True)


def style_label(label: str) -> str:
    """Style a label with a colon suffix.

    Example:
        >>> click.echo(style_label("Policies") + " 3")
        Policies: 3
    """
    return click.style(f"{label}:", fg="cyan", bold=True)


def style_success(message: str) -> str:
    """Style a success message with checkmark.

    Example:
        >>> click.echo(style_success("Policy file valid"))
        ✓ Policy file valid
    """
    return click.style(f"✓ {message}", fg="green")


def style_error(message: str) -> str:
    """Style an error message with cross mark.

    Example:
        >>> click.echo(style_error("File not found"), err=True)
        ✗ File not found
    """
    return click.style(f"✗ {message}", fg="red")


def style_dim(message: str) -> str:
    """Style a neutral/empty state message as dim."""
    return click.style(message, dim=True)


def style_effect(effect: Effect) -> str:
    """Upper-case effect badge: ALLOW in green, DENY in red."""
    color = "green" if effect is Effect.ALLOW else "red"
    return click.style(effect.value.upper(), fg=color, bold=True)


def style_decision(result: EvaluationResult) -> str:
    """Decision line prefix: ALLOWED, DENIED or DENIED (explicit)."""
    if result.allowed:
        return style_success("ALLOWED")
    label = "DENIED (explicit)" if result.explicit_deny else "DENIED"
    return style_error(label)
