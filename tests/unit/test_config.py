"""
Unit tests for configuration system.

These tests verify that the configuration system works correctly
and can load settings from environment variables.
"""

import pytest
from pydantic import ValidationError

from sprig.config import Config, LogConfig, RepositoryConfig


def test_config_has_defaults() -> None:
    """Test that Config initializes with sensible defaults."""
    config = Config()

    assert config.repository.metadata_dir == ".sprig"
    assert config.repository.default_branch == "master"
    assert config.logging.level == "WARNING"


def test_repository_config_defaults() -> None:
    """Test RepositoryConfig default values."""
    repo_config = RepositoryConfig()

    assert repo_config.metadata_dir == ".sprig"
    assert repo_config.default_branch == "master"


def test_repository_config_rejects_empty_names() -> None:
    """Test that empty directory and branch names are invalid."""
    with pytest.raises(ValidationError):
        RepositoryConfig(metadata_dir="")
    with pytest.raises(ValidationError):
        RepositoryConfig(default_branch="")


def test_log_config_defaults() -> None:
    """Test LogConfig default values."""
    log_config = LogConfig()

    assert log_config.level == "WARNING"
    assert log_config.rotation == "10 MB"
    assert log_config.retention == "1 month"
    assert log_config.enable_file_logging is False
    assert log_config.enable_console_logging is True


def test_log_config_rejects_unknown_level() -> None:
    """Test that only known levels are accepted."""
    with pytest.raises(ValidationError):
        LogConfig(level="LOUD")


def test_config_from_env_defaults(monkeypatch) -> None:
    """Test loading configuration with no sprig variables set."""
    for name in ("SPRIG_DIR", "SPRIG_DEFAULT_BRANCH", "SPRIG_LOG_LEVEL", "SPRIG_LOG_DIR", "SPRIG_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)

    config = Config.from_env()

    assert config.repository.metadata_dir == ".sprig"
    assert config.logging.log_dir == ".sprig/logs"
    assert config.logging.enable_file_logging is False


def test_config_from_env(monkeypatch) -> None:
    """Test loading configuration from environment variables."""
    monkeypatch.setenv("SPRIG_DIR", ".vc")
    monkeypatch.setenv("SPRIG_DEFAULT_BRANCH", "main")
    monkeypatch.setenv("SPRIG_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("SPRIG_LOG_FILE", "true")
    monkeypatch.delenv("SPRIG_LOG_DIR", raising=False)

    config = Config.from_env()

    assert config.repository.metadata_dir == ".vc"
    assert config.repository.default_branch == "main"
    assert config.logging.level == "DEBUG"
    assert config.logging.log_dir == ".vc/logs"
    assert config.logging.enable_file_logging is True


def test_config_from_env_invalid_level(monkeypatch) -> None:
    """Test that an unknown log level in the environment is rejected."""
    monkeypatch.setenv("SPRIG_LOG_LEVEL", "LOUD")

    with pytest.raises(ValidationError):
        Config.from_env()
