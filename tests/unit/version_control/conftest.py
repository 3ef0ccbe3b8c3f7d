"""Shared fixtures for version control tests."""

import pytest

from sprig.config import RepositoryConfig
from sprig.version_control import Repository


@pytest.fixture
def repo_config() -> RepositoryConfig:
    return RepositoryConfig()


@pytest.fixture
def repo(tmp_path, repo_config) -> Repository:
    """A freshly initialized repository in a temporary directory."""
    return Repository.init(tmp_path, repo_config)
