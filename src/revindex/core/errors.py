"""revindex error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Index (revision log, extractors, migrations)
- 4xxx: Cache
- 9xxx: Internal

Remote (svn) failures are not wrapped here; they live in
``revindex.svn.errors`` and propagate unchanged.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Index (3xxx)
    EXTRACTOR_NOT_FOUND = 3001
    EXTRACTOR_ALREADY_REGISTERED = 3002
    EXTRACTOR_DATA_ANOMALY = 3003
    MISSING_REVISION_DATA = 3004
    MIGRATION_FAILED = 3005
    MIGRATION_INVALID = 3006
    DUPLICATE_STATEMENT = 3007
    INVALID_CRITERION = 3008

    # Cache (4xxx)
    CACHE_INVALID_NAME = 4001
    CACHE_INVALID_DURATION = 4002

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class RevIndexError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(RevIndexError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class RevisionLogError(RevIndexError):
    """Revision log and extractor errors."""

    @classmethod
    def extractor_not_found(cls, name: str) -> "RevisionLogError":
        return cls(
            code=ErrorCode.EXTRACTOR_NOT_FOUND,
            message=f'Extractor "{name}" is not registered',
            details={"name": name},
        )

    @classmethod
    def already_registered(cls, name: str) -> "RevisionLogError":
        return cls(
            code=ErrorCode.EXTRACTOR_ALREADY_REGISTERED,
            message=f'Extractor "{name}" is already registered',
            details={"name": name},
        )

    @classmethod
    def data_anomaly(cls, reason: str, **details: Any) -> "RevisionLogError":
        return cls(
            code=ErrorCode.EXTRACTOR_DATA_ANOMALY,
            message=f"Unexpected revision data: {reason}",
            details=details,
        )

    @classmethod
    def missing_revision_data(cls, name: str, revisions: list[int]) -> "RevisionLogError":
        return cls(
            code=ErrorCode.MISSING_REVISION_DATA,
            message=f'Extractor "{name}" returned no data for revisions: {revisions}',
            details={"name": name, "revisions": revisions},
        )

    @classmethod
    def duplicate_statement(cls, statement: str, params: Any) -> "RevisionLogError":
        return cls(
            code=ErrorCode.DUPLICATE_STATEMENT,
            message=f"Duplicate statement: {statement}",
            details={"statement": statement, "params": repr(params)},
        )

    @classmethod
    def invalid_criterion(cls, name: str, criterion: str, expected: str) -> "RevisionLogError":
        return cls(
            code=ErrorCode.INVALID_CRITERION,
            message=f'Extractor "{name}" cannot search for "{criterion}": expected {expected}',
            details={"name": name, "criterion": criterion, "expected": expected},
        )


class MigrationError(RevIndexError):
    """Schema migration errors."""

    @classmethod
    def failed(cls, component: str, version: int, reason: str) -> "MigrationError":
        return cls(
            code=ErrorCode.MIGRATION_FAILED,
            message=f'Migration {version} of "{component}" failed: {reason}',
            retryable=True,
            details={"component": component, "version": version, "reason": reason},
        )

    @classmethod
    def invalid(cls, component: str, reason: str) -> "MigrationError":
        return cls(
            code=ErrorCode.MIGRATION_INVALID,
            message=f'Invalid migrations for "{component}": {reason}',
            details={"component": component, "reason": reason},
        )


class CacheError(RevIndexError):
    """Result cache usage errors."""

    @classmethod
    def invalid_name(cls, name: str) -> "CacheError":
        return cls(
            code=ErrorCode.CACHE_INVALID_NAME,
            message=f'Cache name "{name}" must be in "namespace:name" format',
            details={"name": name},
        )

    @classmethod
    def invalid_duration(cls, duration: Any) -> "CacheError":
        return cls(
            code=ErrorCode.CACHE_INVALID_DURATION,
            message=f'Cache duration "{duration}" is not understood',
            details={"duration": str(duration)},
        )


class InternalError(RevIndexError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
