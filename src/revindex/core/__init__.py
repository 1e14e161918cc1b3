"""Core module exports."""

from revindex.core.errors import (
    CacheError,
    ConfigError,
    ErrorCode,
    InternalError,
    MigrationError,
    RevIndexError,
    RevisionLogError,
)
from revindex.core.logging import configure_logging, get_logger
from revindex.core.progress import batch_progress, status

__all__ = [
    # Errors
    "CacheError",
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "MigrationError",
    "RevIndexError",
    "RevisionLogError",
    # Logging
    "configure_logging",
    "get_logger",
    # Progress
    "batch_progress",
    "status",
]
