"""Policy file helpers - parse, load and save policy documents.

A policy file holds either one policy object or a list of them, as JSON
(.json) or YAML (.yml/.yaml):

    name: users
    description: User directory access
    rules:
      - path: /users/*
        capabilities: [read, list]
      - path: /users/admin
        effect: deny

Features:
- Detailed validation error messages (one line per field)
- Atomic writes with owner-only permissions
- Format chosen by file suffix
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml

from path_acl.constants import YAML_POLICY_SUFFIXES
from path_acl.exceptions import InvalidPolicyError
from path_acl.pdp.policy import Policy
from path_acl.utils.file_helpers import load_document, require_file_exists, write_text_atomic

__all__ = [
    "dump_policies",
    "load_policies",
    "load_policy",
    "parse_policies",
    "save_policies",
]


def parse_policies(data: Any, *, source: str | None = None) -> list[Policy]:
    """Build policies from a parsed document.

    Args:
        data: A policy mapping or a list of policy mappings.
        source: File or label for error messages.

    Returns:
        Policies in document order.

    Raises:
        InvalidPolicyError: If the document shape or any policy is invalid.
    """
    if isinstance(data, Mapping):
        return [Policy.from_dict(data, source=source)]

    if isinstance(data, list):
        return [Policy.from_dict(item, source=source) for item in data]

    where = f" in {source}" if source else ""
    shape = "empty document" if data is None else type(data).__name__
    raise InvalidPolicyError(
        f"Expected a policy object or a list of policies{where}, got {shape}",
        source=source,
    )


def load_policies(path: Path) -> list[Policy]:
    """Load every policy from a JSON or YAML file.

    Raises:
        RepositoryError: If the file is missing, unreadable or unparsable.
        InvalidPolicyError: If the content is not valid policy data.
    """
    require_file_exists(path)
    return parse_policies(load_document(path), source=str(path))


def load_policy(path: Path) -> Policy:
    """Load a file that must contain exactly one policy.

    Raises:
        InvalidPolicyError: If the file holds zero or several policies.
    """
    policies = load_policies(path)
    if len(policies) != 1:
        raise InvalidPolicyError(
            f"Expected exactly one policy in {path}, found {len(policies)}", source=str(path)
        )
    return policies[0]


def dump_policies(policies: Iterable[Policy], *, fmt: str = "json") -> str:
    """Serialize policies to a JSON or YAML string.

    A single policy is written as an object, several as a list.

    Args:
        policies: Policies to serialize.
        fmt: "json" or "yaml".

    Raises:
        ValueError: If fmt is unknown.
        InvalidPolicyError: If a rule holds a Predicate condition.
    """
    documents = [policy.to_dict() for policy in policies]
    data: Any = documents[0] if len(documents) == 1 else documents

    if fmt == "json":
        return json.dumps(data, indent=2) + "\n"
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    raise ValueError(f"Unknown policy format: {fmt!r}")


def save_policies(policies: Iterable[Policy], path: Path) -> None:
    """Save policies atomically, as YAML or JSON according to the suffix."""
    fmt = "yaml" if path.suffix.lower() in YAML_POLICY_SUFFIXES else "json"
    write_text_atomic(path, dump_policies(policies, fmt=fmt), prefix=".policy_")
