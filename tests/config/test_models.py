"""Tests for config/models.py module.

Covers:
- LogOutputConfig model
- LoggingConfig model
- CacheConfig model
- RepositoryConfig model
- DatabaseConfig model
- RevIndexConfig root model
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from revindex.config.models import (
    CacheConfig,
    DatabaseConfig,
    LoggingConfig,
    LogOutputConfig,
    RepositoryConfig,
    RevIndexConfig,
)


class TestLogOutputConfig:
    """Tests for LogOutputConfig model."""

    def test_defaults(self) -> None:
        """Default values."""
        config = LogOutputConfig()
        assert config.format == "console"
        assert config.destination == "stderr"
        assert config.level is None

    def test_given_relative_file_destination_then_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LogOutputConfig(destination="logs/revindex.log")

    def test_given_home_relative_destination_then_expanded(self) -> None:
        config = LogOutputConfig(destination="~/revindex.log")
        assert config.destination == str(Path("~/revindex.log").expanduser())


class TestLoggingConfig:
    def test_defaults(self) -> None:
        config = LoggingConfig()
        assert config.level == "WARNING"
        assert len(config.outputs) == 1

    def test_given_unknown_level_then_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(level="LOUD")  # type: ignore[arg-type]


class TestCacheConfig:
    def test_working_directory_expanded(self) -> None:
        config = CacheConfig()
        assert config.path == Path("~/.revindex").expanduser()

    def test_custom_directory(self, tmp_path: Path) -> None:
        assert CacheConfig(working_directory=str(tmp_path)).path == tmp_path


class TestRepositoryConfig:
    """Remote access settings."""

    def test_defaults(self) -> None:
        config = RepositoryConfig()
        assert config.svn_command == "svn"
        assert config.username is None
        assert config.last_revision_cache_duration == ""
        assert config.batch_size == 1000

    @pytest.mark.parametrize("batch_size", [0, -5])
    def test_given_non_positive_batch_size_then_rejected(self, batch_size: int) -> None:
        with pytest.raises(ValidationError):
            RepositoryConfig(batch_size=batch_size)


class TestDatabaseConfig:
    def test_defaults(self) -> None:
        config = DatabaseConfig()
        assert config.busy_timeout_ms == 30000
        assert config.max_retries == 3
        assert config.profile_statements is False


class TestRevIndexConfig:
    def test_sections_present(self) -> None:
        config = RevIndexConfig()
        assert isinstance(config.logging, LoggingConfig)
        assert isinstance(config.cache, CacheConfig)
        assert isinstance(config.repository, RepositoryConfig)
        assert isinstance(config.database, DatabaseConfig)

    def test_model_validate_nested(self) -> None:
        config = RevIndexConfig.model_validate({"repository": {"batch_size": 10}})
        assert config.repository.batch_size == 10
