"""Evaluation commands: check, capabilities, paths.

Exit codes:
    0: Allowed (check) / success
    1: Denied (check)
    2: Policies or config could not be loaded, unknown policy name
    10+: Critical evaluation failure (see exceptions.CriticalEvaluationFailure)
"""

from __future__ import annotations

__all__ = ["capabilities", "check", "paths"]

import json
import sys
import time
from pathlib import Path
from typing import Any, NoReturn

import click

from path_acl.exceptions import CriticalEvaluationFailure, PathAclError
from path_acl.pdp.capability import Capability
from path_acl.pdp.engine import MatchedRule
from path_acl.pdp.policy import Policy
from path_acl.pdp.result import EvaluationResult

from ..loading import EvaluationSetup, context_option, load_setup, parse_context, policy_file_option
from ..styling import style_decision, style_dim, style_effect, style_error, style_label

EXIT_DENIED = 1
EXIT_ERROR = 2

CAPABILITY_CHOICE = click.Choice([c.value for c in Capability], case_sensitive=False)


def _fail(error: PathAclError) -> NoReturn:
    click.echo(style_error(str(error)), err=True)
    sys.exit(error.exit_code if isinstance(error, CriticalEvaluationFailure) else EXIT_ERROR)


def _select_policies(setup: EvaluationSetup, names: tuple[str, ...]) -> tuple[Policy, ...]:
    """Named policies, or every policy in the repository when none are named."""
    if names:
        return setup.manager.resolve(list(names))
    return tuple(setup.repository.all().values())


def _candidate_dict(candidate: MatchedRule) -> dict[str, Any]:
    return {
        "policy": candidate.policy,
        "pattern": candidate.pattern,
        "effect": candidate.effect.value,
        "specificity": list(candidate.specificity),
    }


def _result_dict(
    result: EvaluationResult,
    capability: Capability,
    path: str,
    candidates: list[MatchedRule] | None,
) -> dict[str, Any]:
    data: dict[str, Any] = {
        "allowed": result.allowed,
        "decision": result.decision,
        "reason": result.reason,
        "capability": capability.value,
        "path": path,
        "matched_policy": result.matched_policy.name if result.matched_policy else None,
        "matched_rule": result.matched_rule.to_dict() if result.matched_rule else None,
        "evaluated_policies": [p.name for p in result.evaluated_policies],
    }
    if candidates is not None:
        data["candidates"] = [_candidate_dict(c) for c in candidates]
    return data


@click.command("check")
@click.argument("capability", type=CAPABILITY_CHOICE)
@click.argument("path")
@policy_file_option
@click.option("--policy", "-p", "policy_names", multiple=True, help="Policy name to evaluate. Repeatable; default all.")
@context_option
@click.option("--explain", is_flag=True, help="List every candidate rule, most specific first")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def check(
    ctx: click.Context,
    capability: str,
    path: str,
    policy_files: tuple[Path, ...],
    policy_names: tuple[str, ...],
    context_pairs: tuple[str, ...],
    explain: bool,
    as_json: bool,
) -> None:
    """Check whether CAPABILITY is allowed on PATH.

    Exits 0 when allowed and 1 when denied.

    \b
    Examples:
      path-acl check read /users/42 -f policies.yml
      path-acl check update /customers/7/settings -f policies.yml -c customer_id=7
    """
    cap = Capability.from_string(capability)
    context = parse_context(context_pairs)

    try:
        setup = load_setup(policy_files, ctx.ensure_object(dict).get("config_path"))
        policies = _select_policies(setup, policy_names)

        started = time.perf_counter()
        result = setup.manager.service.evaluate(policies, cap, path, context)
        eval_ms = (time.perf_counter() - started) * 1000

        candidates = setup.manager.service.get_matching_rules(policies, cap, path, context) if explain else None
    except PathAclError as e:
        _fail(e)

    if setup.audit is not None:
        setup.audit.log(result, cap, path, context.keys(), eval_ms, candidates)

    if as_json:
        click.echo(json.dumps(_result_dict(result, cap, path, candidates), indent=2))
    else:
        click.echo(f"{style_decision(result)} {cap.value} {path}")
        click.echo(f"  {style_label('Reason')} {result.reason}")
        if result.matched_rule is not None and result.matched_policy is not None:
            click.echo(
                f"  {style_label('Rule')} {result.matched_rule.pattern} (policy {result.matched_policy.name})"
            )
        if candidates is not None:
            click.echo(f"  {style_label('Candidates')}")
            if not candidates:
                click.echo("    " + style_dim("(none)"))
            for c in candidates:
                weight, segments = c.specificity
                click.echo(f"    {style_effect(c.effect)} {c.pattern} [{c.policy}] specificity={weight}/{segments}")

    sys.exit(0 if result.allowed else EXIT_DENIED)


@click.command("capabilities")
@click.argument("path")
@policy_file_option
@click.option("--policy", "-p", "policy_names", multiple=True, help="Policy name to evaluate. Repeatable; default all.")
@context_option
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def capabilities(
    ctx: click.Context,
    path: str,
    policy_files: tuple[Path, ...],
    policy_names: tuple[str, ...],
    context_pairs: tuple[str, ...],
    as_json: bool,
) -> None:
    """List capabilities granted on PATH.

    Deny rules are not subtracted; use `check` for a decision.
    """
    context = parse_context(context_pairs)

    try:
        setup = load_setup(policy_files, ctx.ensure_object(dict).get("config_path"))
        policies = _select_policies(setup, policy_names)
        granted = setup.manager.service.get_capabilities(policies, path, context)
    except PathAclError as e:
        _fail(e)

    # Declaration order, not set order
    names = [c.value for c in Capability if c in granted]

    if as_json:
        click.echo(json.dumps({"path": path, "capabilities": names}, indent=2))
    elif not names:
        click.echo(style_dim(f"No capabilities granted on {path}."))
    else:
        click.echo(style_label("Capabilities") + f" {path}")
        for name in names:
            click.echo(f"  {name}")


@click.command("paths")
@click.argument("capability", type=CAPABILITY_CHOICE)
@policy_file_option
@click.option("--policy", "-p", "policy_names", multiple=True, help="Policy name to evaluate. Repeatable; default all.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def paths(
    ctx: click.Context,
    capability: str,
    policy_files: tuple[Path, ...],
    policy_names: tuple[str, ...],
    as_json: bool,
) -> None:
    """List patterns of allow rules that grant CAPABILITY.

    Patterns are listed as written; deny rules are not subtracted.
    """
    cap = Capability.from_string(capability)

    try:
        setup = load_setup(policy_files, ctx.ensure_object(dict).get("config_path"))
        policies = _select_policies(setup, policy_names)
        patterns = sorted(setup.manager.service.list_accessible_paths(policies, cap))
    except PathAclError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps({"capability": cap.value, "paths": patterns}, indent=2))
    elif not patterns:
        click.echo(style_dim(f"No paths grant {cap.value}."))
    else:
        click.echo(style_label("Paths granting") + f" {cap.value}")
        for pattern in patterns:
            click.echo(f"  {pattern}")
