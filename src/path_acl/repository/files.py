"""File-backed policy repositories (JSON and YAML).

Two layouts are supported:
- Single file (per_file=False): the file holds one policy object or a
  list of policies.
- Directory (per_file=True): every matching file in the directory holds
  exactly one policy. Subdirectories are not scanned.

Files are read once, at construction. Create a new repository (or wrap
it in CachedRepository and rebuild on change) to pick up edits.
"""

from __future__ import annotations

__all__ = [
    "JsonRepository",
    "YamlRepository",
]

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from path_acl.constants import JSON_POLICY_SUFFIXES, YAML_POLICY_SUFFIXES
from path_acl.exceptions import InvalidPolicyError, RepositoryError
from path_acl.pdp.policy import Policy
from path_acl.repository.memory import InMemoryRepository
from path_acl.utils.file_helpers import (
    load_json_document,
    load_yaml_document,
    require_directory_exists,
    require_file_exists,
)
from path_acl.utils.policy.policy_helpers import parse_policies

logger = logging.getLogger(__name__)


class _FileRepository(InMemoryRepository):
    """Shared loading logic; subclasses pick the parser and suffixes."""

    format_name: str = ""
    suffixes: tuple[str, ...] = ()
    _parse_file: Callable[[Path], Any]

    def __init__(self, path: str | Path, per_file: bool = False) -> None:
        """Load policies from path.

        Args:
            path: Policy file, or directory when per_file is True.
            per_file: Treat path as a directory of one-policy files.

        Raises:
            RepositoryError: If the path is missing, unreadable, unparsable,
                or (per_file) holds no matching files.
            InvalidPolicyError: If a document is not valid policy data.
        """
        self.path = Path(path)
        self.per_file = per_file
        policies = self._load_directory(self.path) if per_file else self._load_file(self.path)
        super().__init__(policies)
        logger.debug("Loaded %d policies from %s", len(self), self.path)

    def _load_file(self, path: Path) -> list[Policy]:
        require_file_exists(path, file_type=f"{self.format_name} policy")
        return parse_policies(self._parse_file(path), source=str(path))

    def _load_directory(self, path: Path) -> list[Policy]:
        require_directory_exists(path, file_type=f"{self.format_name} policy")

        files = sorted(p for p in path.iterdir() if p.is_file() and p.suffix.lower() in self.suffixes)
        if not files:
            raise RepositoryError(f"No {self.format_name} policy files found in {path}", path=str(path))

        policies = []
        for file in files:
            data = self._parse_file(file)
            if not isinstance(data, dict):
                raise InvalidPolicyError(
                    f"Each file in a per-file directory must hold one policy object: {file}",
                    source=str(file),
                )
            policies.append(Policy.from_dict(data, source=str(file)))
        return policies


class JsonRepository(_FileRepository):
    """Policies from a JSON file or a directory of *.json files."""

    format_name = "JSON"
    suffixes = JSON_POLICY_SUFFIXES
    _parse_file = staticmethod(load_json_document)


class YamlRepository(_FileRepository):
    """Policies from a YAML file or a directory of *.yml / *.yaml files."""

    format_name = "YAML"
    suffixes = YAML_POLICY_SUFFIXES
    _parse_file = staticmethod(load_yaml_document)
