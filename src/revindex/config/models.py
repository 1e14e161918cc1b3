"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (REVINDEX__SECTION__KEY)
3. Global YAML (~/.config/revindex/config.yaml)
4. Built-in defaults (this file)

Examples:
    REVINDEX__LOGGING__LEVEL=DEBUG
    REVINDEX__CACHE__WORKING_DIRECTORY=/var/cache/revindex
    REVINDEX__REPOSITORY__USERNAME=builder
    REVINDEX__REPOSITORY__LAST_REVISION_CACHE_DURATION="10 minutes"
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        REVINDEX__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. DEBUG also prints every SQL statement when profiling is on.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class CacheConfig(BaseModel):
    """Working directory for revision log databases and cache files.

    Env vars:
        REVINDEX__CACHE__WORKING_DIRECTORY: Where databases and cache files live
    """

    working_directory: str = Field(
        default="~/.revindex",
        description="Directory holding one database per repository root and the result cache.",
    )

    @field_validator("working_directory")
    @classmethod
    def expand_working_directory(cls, v: str) -> str:
        return str(Path(v).expanduser())

    @property
    def path(self) -> Path:
        return Path(self.working_directory)


class RepositoryConfig(BaseModel):
    """Remote repository access.

    Env vars:
        REVINDEX__REPOSITORY__SVN_COMMAND: svn binary
        REVINDEX__REPOSITORY__USERNAME / PASSWORD: credentials passed to svn
        REVINDEX__REPOSITORY__LAST_REVISION_CACHE_DURATION: cache "svn info" on URLs
        REVINDEX__REPOSITORY__BATCH_SIZE: revisions fetched per "svn log" call
    """

    svn_command: str = Field(default="svn", description="Subversion client binary.")
    username: str | None = Field(default=None, description="Username for remote repositories.")
    password: str | None = Field(default=None, description="Password for remote repositories.")
    command_timeout_sec: float = Field(
        default=1200.0,
        description="Timeout for a single svn command. Large log ranges can take minutes.",
    )
    last_revision_cache_duration: str = Field(
        default="",
        description='How long to trust a remote last revision (e.g. "10 minutes"). '
        "Empty or a value starting with 0 disables caching.",
    )
    batch_size: int = Field(
        default=1000,
        description="Revisions requested per log call during refresh.",
    )

    @field_validator("batch_size")
    @classmethod
    def validate_batch_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Batch size must be positive, got {v}")
        return v


class DatabaseConfig(BaseModel):
    """Database connection configuration.

    Env vars:
        REVINDEX__DATABASE__BUSY_TIMEOUT_MS: SQLite busy timeout
        REVINDEX__DATABASE__MAX_RETRIES: Max retry attempts for locked DB
        REVINDEX__DATABASE__PROFILE_STATEMENTS: Log every statement with timing
    """

    busy_timeout_ms: int = Field(
        default=30000,
        description="SQLite busy timeout (ms). How long to wait for locks.",
    )
    max_retries: int = Field(
        default=3,
        description="Max retry attempts for locked database errors.",
    )
    retry_base_delay_sec: float = Field(
        default=0.1,
        description="Base delay between retries (exponential backoff).",
    )
    profile_statements: bool = Field(
        default=False,
        description="Log every SQL statement and its duration at DEBUG level.",
    )


class RevIndexConfig(BaseModel):
    """Root configuration for revindex."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
