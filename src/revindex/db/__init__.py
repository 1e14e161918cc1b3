"""Database layer: engine, core tables, migrations, profiling."""

from revindex.db.database import BulkWriter, Database
from revindex.db.migrations import Migration, MigrationContext, MigrationRunner
from revindex.db.models import RawCommit, SchemaVersion, SyncState
from revindex.db.profiler import StatementProfiler

__all__ = [
    "BulkWriter",
    "Database",
    "Migration",
    "MigrationContext",
    "MigrationRunner",
    "RawCommit",
    "SchemaVersion",
    "StatementProfiler",
    "SyncState",
]
