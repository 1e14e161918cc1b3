"""Raw commit persistence and the sync cursor.

Raw commits are the source every extractor reads from; the cursor is the
highest revision every registered extractor has processed.
"""

from __future__ import annotations

import json
import time
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from sqlalchemy import text

from revindex.db.migrations import Migration, create_table
from revindex.db.models import RawCommit, SyncState
from revindex.log.models import Commit

if TYPE_CHECKING:
    from revindex.db.database import Database

CORE_COMPONENT = "core"

CORE_MIGRATIONS: tuple[Migration, ...] = (
    Migration(
        version=1,
        name="raw commits and sync cursor",
        statements=(create_table(RawCommit), create_table(SyncState)),
    ),
)

DEFAULT_READ_CHUNK = 500


class CommitStore:
    """Reads and writes ``raw_commits`` and ``sync_state``."""

    def __init__(self, database: Database) -> None:
        self._database = database

    def save(self, commits: Iterable[Commit]) -> int:
        """Store commits, replacing any stored copy of the same revision."""
        records = [
            {"revision": c.revision, "payload": json.dumps(c.to_dict(), sort_keys=True)}
            for c in commits
        ]
        with self._database.bulk_writer() as writer:
            return writer.upsert_many(
                RawCommit,
                records,
                conflict_columns=["revision"],
                update_columns=["payload"],
            )

    def iter_range(
        self,
        from_revision: int,
        to_revision: int,
        chunk_size: int = DEFAULT_READ_CHUNK,
    ) -> Iterator[Commit]:
        """Stored commits of an inclusive range, ascending by revision."""
        lower = from_revision
        while lower <= to_revision:
            rows = self._database.execute_raw(
                "SELECT revision, payload FROM raw_commits "
                "WHERE revision BETWEEN :lower AND :upper "
                "ORDER BY revision LIMIT :limit",
                {"lower": lower, "upper": to_revision, "limit": chunk_size},
            )
            if not rows:
                return
            for _revision, payload in rows:
                yield Commit.from_dict(json.loads(payload))
            lower = rows[-1][0] + 1

    def get(self, revision: int) -> Commit | None:
        with self._database.session() as session:
            row = session.get(RawCommit, revision)
            return Commit.from_dict(json.loads(row.payload)) if row else None

    def count(self) -> int:
        rows = self._database.execute_raw("SELECT COUNT(*) FROM raw_commits")
        return int(rows[0][0])

    def get_cursor(self) -> int:
        with self._database.session() as session:
            state = session.get(SyncState, 1)
            return state.last_revision if state else 0

    def set_cursor(self, revision: int) -> None:
        """Move the cursor forward; it never moves back."""
        with self._database.immediate_transaction() as session:
            session.execute(
                text(
                    "INSERT INTO sync_state (id, last_revision, updated_at) "
                    "VALUES (1, :revision, :now) "
                    "ON CONFLICT (id) DO UPDATE SET "
                    "last_revision = MAX(last_revision, excluded.last_revision), "
                    "updated_at = excluded.updated_at"
                ),
                {"revision": revision, "now": time.time()},
            )
