"""Application configuration for path-acl.

Defines configuration models for logging, policy sources and caching.
Config is stored as JSON at the OS-appropriate location (via
click.get_app_dir) unless a path is given explicitly.

Example usage:
    # Load from config file
    config = AppConfig.load_from_file(config_path)

    # Build the repository described by the config
    manager = AccessManager(repository=config.build_repository(config_path.parent))

    # Save configuration
    config.save_to_file(config_path)

Example config.json:
    {
      "logging": {"log_dir": "~/.local/state", "log_level": "INFO"},
      "sources": [
        {"kind": "yaml", "path": "policies/", "per_file": true},
        {"kind": "json", "path": "defaults.json"}
      ],
      "cache": {"enabled": true, "ttl_seconds": 300}
    }
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_LOG_DIR",
    "AppConfig",
    "CacheConfig",
    "LoggingConfig",
    "PolicySourceConfig",
    "get_config_path",
]

import json
import os
import sys
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from path_acl.exceptions import ConfigurationError
from path_acl.pdp.protocol import PolicyRepository
from path_acl.repository import CachedRepository, ChainedRepository, JsonRepository, YamlRepository
from path_acl.utils.file_helpers import get_app_dir, write_text_atomic
from path_acl.utils.validation import format_validation_errors

# =============================================================================
# Platform-specific defaults
# =============================================================================


def _get_platform_log_dir() -> str:
    """Get platform-appropriate base log directory (unexpanded).

    Platform conventions:
        - macOS: ~/Library/Logs
        - Linux: $XDG_STATE_HOME, falling back to ~/.local/state
        - Windows: ~/AppData/Local
    """
    if sys.platform == "darwin":
        return "~/Library/Logs"
    elif sys.platform == "win32":
        return "~/AppData/Local"
    else:
        return os.environ.get("XDG_STATE_HOME", "~/.local/state")


DEFAULT_LOG_DIR = _get_platform_log_dir()


def get_config_path() -> Path:
    """Default config file location: <app dir>/config.json."""
    return get_app_dir() / "config.json"


# =============================================================================
# Models
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging configuration settings.

    Logs are stored under <log_dir>/path-acl/:
        <log_dir>/
        └── path-acl/
            ├── system.jsonl          # WARNING and above
            └── audit/
                └── decisions.jsonl   # One record per evaluation (if audit)

    Attributes:
        log_dir: Base directory for logs.
        log_level: Level for the system logger.
        audit: Write decision audit records.
    """

    log_dir: str = Field(default=DEFAULT_LOG_DIR, min_length=1)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    audit: bool = True

    def resolved_log_dir(self) -> Path:
        return Path(self.log_dir).expanduser()


class PolicySourceConfig(BaseModel):
    """One policy source.

    Attributes:
        kind: File format.
        path: File, or directory when per_file is true. Relative paths are
            resolved against the config file's directory.
        per_file: Load one policy per file from a directory.
    """

    kind: Literal["json", "yaml"]
    path: str = Field(min_length=1)
    per_file: bool = False

    def build(self, base_dir: Path | None = None) -> PolicyRepository:
        """Construct the repository for this source.

        Raises:
            RepositoryError: If the source cannot be loaded.
            InvalidPolicyError: If a document is not valid policy data.
        """
        path = Path(self.path).expanduser()
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path

        repository_class = JsonRepository if self.kind == "json" else YamlRepository
        return repository_class(path, per_file=self.per_file)


class CacheConfig(BaseModel):
    """Cache settings for loaded policies.

    Attributes:
        enabled: Wrap the sources in a CachedRepository.
        ttl_seconds: Entry lifetime. None keeps entries until flushed.
    """

    enabled: bool = False
    ttl_seconds: float | None = Field(default=None, gt=0)


class AppConfig(BaseModel):
    """Main application configuration for path-acl.

    Attributes:
        logging: Logging configuration.
        sources: Policy sources in priority order (earlier wins).
        cache: Cache configuration.
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    sources: list[PolicySourceConfig] = Field(default_factory=list)
    cache: CacheConfig = Field(default_factory=CacheConfig)

    model_config = {"extra": "forbid"}

    def build_repository(self, base_dir: Path | None = None) -> PolicyRepository:
        """Turn the configured sources into one repository.

        One source yields its repository directly, several are chained in
        order. The result is wrapped in a CachedRepository when caching is
        enabled.

        Args:
            base_dir: Directory for resolving relative source paths.

        Raises:
            ConfigurationError: If no sources are configured.
            RepositoryError: If a source cannot be loaded.
        """
        if not self.sources:
            raise ConfigurationError("No policy sources configured")

        repositories = [source.build(base_dir) for source in self.sources]
        repository: PolicyRepository = (
            repositories[0] if len(repositories) == 1 else ChainedRepository(repositories)
        )

        if self.cache.enabled:
            repository = CachedRepository(repository, ttl_seconds=self.cache.ttl_seconds)
        return repository

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to a JSON file atomically (owner-only permissions)."""
        content = json.dumps(self.model_dump(mode="json"), indent=2) + "\n"
        write_text_atomic(config_path, content, prefix=".config_")

    @classmethod
    def load_from_file(cls, config_path: Path) -> "AppConfig":
        """Load configuration from a JSON file.

        Raises:
            ConfigurationError: If the file is missing, not valid JSON, or
                fails validation (one line per invalid field).
        """
        if not config_path.is_file():
            raise ConfigurationError(f"Configuration file not found at {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in config file {config_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Could not read config file {config_path}: {e}") from e

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            errors = "\n".join(f"  - {line}" for line in format_validation_errors(e))
            raise ConfigurationError(f"Invalid configuration in {config_path}:\n{errors}") from e

