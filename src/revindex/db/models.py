"""SQLModel definitions for engine-owned tables.

Extractor-owned tables live next to their extractors in
``revindex.log.extractors``; every table is created by migrations, never by
``SQLModel.metadata.create_all``.
"""

from sqlmodel import Field, SQLModel


class RawCommit(SQLModel, table=True):
    """A commit exactly as the remote log source reported it."""

    __tablename__ = "raw_commits"

    revision: int = Field(primary_key=True)
    payload: str  # JSON, see Commit.to_dict()


class SyncState(SQLModel, table=True):
    """Single-row sync cursor: highest revision processed by every extractor."""

    __tablename__ = "sync_state"

    id: int = Field(default=1, primary_key=True)
    last_revision: int = 0
    updated_at: float | None = None


class SchemaVersion(SQLModel, table=True):
    """Applied schema version per component (``core`` or an extractor name)."""

    __tablename__ = "schema_versions"

    component: str = Field(primary_key=True)
    version: int = 0
    migrated_at: float | None = None
