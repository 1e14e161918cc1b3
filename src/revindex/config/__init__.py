"""Config module exports."""

from revindex.config.loader import load_config
from revindex.config.models import (
    CacheConfig,
    DatabaseConfig,
    LoggingConfig,
    RepositoryConfig,
    RevIndexConfig,
)

__all__ = [
    "load_config",
    "RevIndexConfig",
    "CacheConfig",
    "DatabaseConfig",
    "LoggingConfig",
    "RepositoryConfig",
]
