"""Shared file utilities for path-acl.

Provides common utilities used by config, policy files and repositories:
- get_app_dir: OS-appropriate application directory
- set_secure_permissions: Owner-only file/directory permissions
- require_file_exists / require_directory_exists: Existence checks
- load_json_document / load_yaml_document / load_document: Parse a file
- write_text_atomic: Temp-file-and-rename write
"""

from __future__ import annotations

__all__ = [
    # App directory
    "get_app_dir",
    # Permissions and existence
    "set_secure_permissions",
    "require_file_exists",
    "require_directory_exists",
    # Documents
    "load_document",
    "load_json_document",
    "load_yaml_document",
    # Writing
    "write_text_atomic",
]

import json
import os
import sys
import tempfile
from pathlib import Path
from typing import Any

import click
import yaml

from path_acl.constants import APP_NAME, JSON_POLICY_SUFFIXES, YAML_POLICY_SUFFIXES
from path_acl.exceptions import RepositoryError


def get_app_dir() -> Path:
    """Get the OS-appropriate application directory.

    Uses click.get_app_dir() which returns:
    - macOS: ~/Library/Application Support/path-acl
    - Linux: ~/.config/path-acl (XDG compliant)
    - Windows: C:\\Users\\<user>\\AppData\\Roaming\\path-acl

    Returns:
        Path to the application directory.
    """
    return Path(click.get_app_dir(APP_NAME))


def set_secure_permissions(path: Path, *, is_directory: bool = False) -> None:
    """Restrict a file (0o600) or directory (0o700) to its owner.

    Does nothing on Windows. Permission errors are ignored since some
    filesystems do not support chmod.
    """
    if sys.platform == "win32":
        return

    try:
        path.chmod(0o700 if is_directory else 0o600)
    except OSError:
        pass


def require_file_exists(file_path: Path, file_type: str = "Policy") -> None:
    """Raise RepositoryError if file_path is missing or not a regular file."""
    if not file_path.exists():
        raise RepositoryError(
            f"{file_type} file not found at {file_path}", path=str(file_path)
        )
    if not file_path.is_file():
        raise RepositoryError(f"{file_path} is not a file", path=str(file_path))


def require_directory_exists(dir_path: Path, file_type: str = "Policy") -> None:
    """Raise RepositoryError if dir_path is missing or not a directory."""
    if not dir_path.is_dir():
        raise RepositoryError(
            f"{file_type} directory not found at {dir_path}", path=str(dir_path)
        )


def load_json_document(file_path: Path) -> Any:
    """Read and parse a JSON file.

    Raises:
        RepositoryError: If the file cannot be read or is not valid JSON.
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise RepositoryError(f"Invalid JSON in {file_path}: {e}", path=str(file_path)) from e
    except OSError as e:
        raise RepositoryError(f"Could not read {file_path}: {e}", path=str(file_path)) from e


def load_yaml_document(file_path: Path) -> Any:
    """Read and parse a YAML file with yaml.safe_load().

    An empty file parses as None.

    Raises:
        RepositoryError: If the file cannot be read or is not valid YAML.
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise RepositoryError(f"Invalid YAML in {file_path}: {e}", path=str(file_path)) from e
    except OSError as e:
        raise RepositoryError(f"Could not read {file_path}: {e}", path=str(file_path)) from e


def load_document(file_path: Path) -> Any:
    """Parse a JSON or YAML file, chosen by suffix.

    Raises:
        RepositoryError: If the suffix is unsupported or parsing fails.
    """
    suffix = file_path.suffix.lower()
    if suffix in JSON_POLICY_SUFFIXES:
        return load_json_document(file_path)
    if suffix in YAML_POLICY_SUFFIXES:
        return load_yaml_document(file_path)
    raise RepositoryError(
        f"Unsupported policy file type {suffix or '(none)'!r} for {file_path}; "
        f"expected one of {', '.join(JSON_POLICY_SUFFIXES + YAML_POLICY_SUFFIXES)}",
        path=str(file_path),
    )


def write_text_atomic(file_path: Path, content: str, *, prefix: str = ".path_acl_") -> None:
    """Write content to file_path atomically.

    Writes to a temp file in the same directory, fsyncs, then renames over
    the target. Creates parent directories (owner-only) as needed. The
    final file is owner read/write only.
    """
    file_path.parent.mkdir(parents=True, exist_ok=True)
    set_secure_permissions(file_path.parent, is_directory=True)

    fd, temp_path = tempfile.mkstemp(dir=file_path.parent, prefix=prefix, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        os.chmod(temp_path, 0o600)
        os.replace(temp_path, file_path)

    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise
