"""Tests for configuration models and load/save behavior."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from path_acl.config import AppConfig, CacheConfig, LoggingConfig, PolicySourceConfig
from path_acl.exceptions import ConfigurationError, RepositoryError
from path_acl.repository import CachedRepository, ChainedRepository, JsonRepository, YamlRepository


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def policy_dir(tmp_path: Path) -> Path:
    """Directory with one JSON and one YAML policy file."""
    directory = tmp_path / "policies"
    directory.mkdir()
    (directory / "users.json").write_text(
        json.dumps({"name": "users", "rules": [{"path": "/users/*", "capabilities": ["read"]}]})
    )
    (directory / "docs.yml").write_text("name: docs\nrules:\n  - path: /docs/**\n    capabilities: [read]\n")
    return directory


@pytest.fixture
def valid_config_dict() -> dict:
    return {
        "logging": {"log_dir": "/tmp/logs", "log_level": "DEBUG"},
        "sources": [{"kind": "yaml", "path": "policies/docs.yml"}],
        "cache": {"enabled": True, "ttl_seconds": 30},
    }


class TestModels:
    """Tests for config model validation."""

    def test_defaults(self) -> None:
        config = AppConfig()

        assert config.sources == []
        assert config.logging.log_level == "INFO"
        assert config.logging.audit is True
        assert config.cache.enabled is False

    def test_valid_dict(self, valid_config_dict: dict) -> None:
        config = AppConfig.model_validate(valid_config_dict)

        assert config.logging.log_level == "DEBUG"
        assert config.sources[0].kind == "yaml"
        assert config.cache.ttl_seconds == 30

    def test_rejects_unknown_top_level_key(self) -> None:
        with pytest.raises(ValidationError):
            AppConfig.model_validate({"backend": {}})

    def test_rejects_bad_log_level(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(log_level="TRACE")

    def test_rejects_unknown_source_kind(self) -> None:
        with pytest.raises(ValidationError):
            PolicySourceConfig(kind="toml", path="x")

    def test_rejects_non_positive_ttl(self) -> None:
        with pytest.raises(ValidationError):
            CacheConfig(enabled=True, ttl_seconds=0)

    def test_log_dir_expands_home(self) -> None:
        resolved = LoggingConfig(log_dir="~/logs").resolved_log_dir()

        assert "~" not in str(resolved)
        assert resolved.name == "logs"


class TestBuildRepository:
    """Tests for AppConfig.build_repository()."""

    def test_requires_sources(self) -> None:
        with pytest.raises(ConfigurationError, match="No policy sources"):
            AppConfig().build_repository()

    def test_single_source(self, policy_dir: Path) -> None:
        config = AppConfig(sources=[PolicySourceConfig(kind="json", path="policies/users.json")])

        repository = config.build_repository(policy_dir.parent)

        assert isinstance(repository, JsonRepository)
        assert repository.has("users")

    def test_several_sources_are_chained(self, policy_dir: Path) -> None:
        config = AppConfig(
            sources=[
                PolicySourceConfig(kind="yaml", path=str(policy_dir / "docs.yml")),
                PolicySourceConfig(kind="json", path=str(policy_dir / "users.json")),
            ]
        )

        repository = config.build_repository()

        assert isinstance(repository, ChainedRepository)
        assert set(repository.all()) == {"docs", "users"}

    def test_per_file_source(self, policy_dir: Path) -> None:
        config = AppConfig(sources=[PolicySourceConfig(kind="yaml", path=str(policy_dir), per_file=True)])

        repository = config.build_repository()

        assert isinstance(repository, YamlRepository)
        assert set(repository.all()) == {"docs"}

    def test_cache_wraps_sources(self, policy_dir: Path) -> None:
        config = AppConfig(
            sources=[PolicySourceConfig(kind="json", path=str(policy_dir / "users.json"))],
            cache=CacheConfig(enabled=True, ttl_seconds=5),
        )

        repository = config.build_repository()

        assert isinstance(repository, CachedRepository)
        assert repository.ttl_seconds == 5
        assert repository.get("users").name == "users"

    def test_missing_source_propagates(self, tmp_path: Path) -> None:
        config = AppConfig(sources=[PolicySourceConfig(kind="json", path="absent.json")])

        with pytest.raises(RepositoryError):
            config.build_repository(tmp_path)


class TestLoadSave:
    """Tests for config file round trips and load errors."""

    def test_round_trip(self, tmp_path: Path, valid_config_dict: dict) -> None:
        path = tmp_path / "nested" / "config.json"
        original = AppConfig.model_validate(valid_config_dict)

        original.save_to_file(path)
        loaded = AppConfig.load_from_file(path)

        assert loaded == original
        assert (path.stat().st_mode & 0o777) == 0o600

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            AppConfig.load_from_file(tmp_path / "config.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{")

        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            AppConfig.load_from_file(path)

    def test_validation_errors_listed(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"logging": {"log_level": "LOUD"}, "sources": [{"kind": "xml", "path": "p"}]}))

        with pytest.raises(ConfigurationError) as exc_info:
            AppConfig.load_from_file(path)

        message = str(exc_info.value)
        assert "  - logging.log_level:" in message
        assert "  - sources.0.kind:" in message
        assert exc_info.value.exit_code == 11
