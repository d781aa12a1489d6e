"""Shared option handling for evaluation commands.

Policies come from one of two places:
- --policy-file FILE (repeatable): JSON/YAML files, earlier files win
- otherwise the sources in the config file (--config or the default path)

Decision auditing and the system log file are only enabled when a config
file is in use, since log locations come from the config.
"""

from __future__ import annotations

__all__ = [
    "EvaluationSetup",
    "context_option",
    "load_setup",
    "parse_context",
    "policy_file_option",
    "repository_for_file",
]

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

import click
import yaml

from path_acl.config import AppConfig, get_config_path
from path_acl.constants import YAML_POLICY_SUFFIXES
from path_acl.pdp.manager import AccessManager
from path_acl.pdp.protocol import PolicyRepository
from path_acl.repository import ChainedRepository, JsonRepository, YamlRepository
from path_acl.telemetry.audit.decision_logger import (
    DecisionEventLogger,
    create_decision_logger,
    get_decisions_log_path,
)
from path_acl.telemetry.system.system_logger import (
    configure_system_logger_file,
    get_system_log_path,
    get_system_logger,
)

F = TypeVar("F", bound=Callable[..., Any])


def policy_file_option(func: F) -> F:
    return click.option(
        "--policy-file",
        "-f",
        "policy_files",
        multiple=True,
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Policy file (JSON/YAML). Repeatable; earlier files win. Defaults to config sources.",
    )(func)


def context_option(func: F) -> F:
    return click.option(
        "--context",
        "-c",
        "context_pairs",
        multiple=True,
        metavar="KEY=VALUE",
        help="Request context entry. Repeatable. Values are typed (42, true, 1.5), else strings.",
    )(func)


def _parse_value(raw: str) -> Any:
    """Scalar YAML typing for context values; non-scalars stay strings."""
    if raw == "":
        return ""
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return raw


def parse_context(pairs: tuple[str, ...]) -> dict[str, Any]:
    """Parse KEY=VALUE pairs into a context dict.

    Raises:
        click.BadParameter: If a pair has no "=" or an empty key.
    """
    context: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--context")
        context[key] = _parse_value(raw)
    return context


def repository_for_file(path: Path) -> PolicyRepository:
    """JSON or YAML repository for a single policy file, chosen by suffix."""
    if path.suffix.lower() in YAML_POLICY_SUFFIXES:
        return YamlRepository(path)
    return JsonRepository(path)


@dataclass
class EvaluationSetup:
    """What an evaluation command needs.

    Attributes:
        manager: Manager with the repository attached.
        repository: Repository policies are read from.
        config: Loaded config, None when --policy-file was used.
        audit: Decision logger, None when auditing is off.
    """

    manager: AccessManager
    repository: PolicyRepository
    config: AppConfig | None = None
    audit: DecisionEventLogger | None = None


def _open_audit_logger(config: AppConfig) -> DecisionEventLogger | None:
    log_dir = config.logging.resolved_log_dir()
    system_logger = get_system_logger()
    system_logger.setLevel(getattr(logging, config.logging.log_level))
    configure_system_logger_file(get_system_log_path(log_dir))

    if not config.logging.audit:
        return None

    log_path = get_decisions_log_path(log_dir)
    try:
        return DecisionEventLogger(create_decision_logger(log_path))
    except OSError as e:
        system_logger.warning(
            {
                "event": "audit_log_unavailable",
                "path": str(log_path),
                "message": f"Decision audit disabled, cannot open {log_path}: {e}",
            }
        )
        return None


def load_setup(policy_files: tuple[Path, ...], config_path: Path | None) -> EvaluationSetup:
    """Build the manager for an evaluation command.

    Raises:
        PathAclError: If policies or config cannot be loaded.
    """
    if policy_files:
        repositories = [repository_for_file(p) for p in policy_files]
        repository = repositories[0] if len(repositories) == 1 else ChainedRepository(repositories)
        return EvaluationSetup(manager=AccessManager(repository=repository), repository=repository)

    path = config_path or get_config_path()
    config = AppConfig.load_from_file(path)
    repository = config.build_repository(path.parent)
    return EvaluationSetup(
        manager=AccessManager(repository=repository),
        repository=repository,
        config=config,
        audit=_open_audit_logger(config),
    )
