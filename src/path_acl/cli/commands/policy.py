"""Policy command group for path-acl CLI.

Provides policy file inspection subcommands.
"""

from __future__ import annotations

__all__ = ["policy"]

import json
import sys
from pathlib import Path

import click

from path_acl.exceptions import InvalidPolicyError, PathAclError
from path_acl.pdp.policy import Policy
from path_acl.utils.policy import load_policies

from ..styling import style_dim, style_effect, style_error, style_header, style_label, style_success


@click.group()
def policy() -> None:
    """Policy file commands."""
    pass


@policy.command("validate")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def policy_validate(file: Path) -> None:
    """Validate a policy file.

    Checks the file for:
    - Valid JSON/YAML syntax
    - Document shape (one policy object or a list of them)
    - Schema validation (names, effects, capabilities, rule structure)

    Exit codes:
        0: Policy file is valid
        1: Policy file is invalid or unreadable
    """
    try:
        policies = load_policies(file)
    except PathAclError as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)

    click.echo(style_success(f"Policy file valid: {file}"))
    for p in policies:
        rule_count = len(p.rules)
        click.echo(f"  {p.name}: {rule_count} rule{'s' if rule_count != 1 else ''}")


def _echo_policy(p: Policy) -> None:
    click.echo(style_header(p.name))
    if p.description:
        click.echo(f"{style_label('Description')} {p.description}")
    if not p.rules:
        click.echo(style_dim("  (no rules)"))
    for rule in p.rules:
        caps = ", ".join(sorted(c.value for c in rule.capabilities)) or "-"
        line = f"  {style_effect(rule.effect)} {rule.pattern}  [{caps}]"
        if rule.conditions:
            keys = ", ".join(sorted(rule.conditions))
            line += style_dim(f"  when {keys}")
        click.echo(line)
        if rule.description:
            click.echo(style_dim(f"      {rule.description}"))


@policy.command("show")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def policy_show(file: Path, as_json: bool) -> None:
    """Display the policies in a file.

    Exit codes:
        0: Policies shown
        1: Policy file is invalid or unreadable
    """
    try:
        policies = load_policies(file)
    except PathAclError as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(1)

    if as_json:
        try:
            data = [p.to_dict() for p in policies]
        except InvalidPolicyError as e:
            click.echo(style_error(str(e)), err=True)
            sys.exit(1)
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"{style_label('File')} {file}")
    click.echo(f"{style_label('Policies')} {len(policies)}")
    for p in policies:
        click.echo()
        _echo_policy(p)
