"""Author, date and message of every revision."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from typing import Any

from sqlmodel import Field, SQLModel

from revindex.db.migrations import Migration, create_table
from revindex.log.extractors.base import Extractor

AUTHOR_PREFIX = "author:"


class CommitSummary(SQLModel, table=True):
    __tablename__ = "commits"

    revision: int = Field(primary_key=True)
    author: str = ""
    date: float  # UTC timestamp
    message: str = ""


class SummaryExtractor(Extractor):
    """Stores commit metadata verbatim.

    ``find(["author:alice"])`` gives the revisions committed by ``alice``.
    """

    name = "summary"
    migrations = (
        Migration(1, "commits table", statements=(create_table(CommitSummary),)),
        Migration(
            2,
            "author index",
            statements=("CREATE INDEX IF NOT EXISTS idx_commits_author ON commits (author)",),
        ),
    )

    def process(self, from_revision: int, to_revision: int) -> None:
        records = [
            {
                "revision": commit.revision,
                "author": commit.author,
                "date": commit.timestamp,
                "message": commit.message,
            }
            for commit in self.iter_commits(from_revision, to_revision)
        ]
        with self.database.bulk_writer() as writer:
            writer.delete_revision_range(CommitSummary, from_revision, to_revision)
            writer.insert_many(CommitSummary, records)

    def find(self, criteria: Sequence[str], scope: str | None = None) -> list[int]:  # noqa: ARG002
        authors = [c[len(AUTHOR_PREFIX) :] for c in criteria if c.startswith(AUTHOR_PREFIX)]
        if not authors:
            return []
        placeholders = ", ".join(f":a{i}" for i in range(len(authors)))
        return self._query_revisions(
            f"SELECT revision FROM commits WHERE author IN ({placeholders})",
            {f"a{i}": author for i, author in enumerate(authors)},
        )

    def get_revisions_data(self, revisions: Iterable[int]) -> dict[int, Any]:
        """Summary per stored revision. Unknown revisions are left out."""
        rows = self._select_by_revisions(
            "SELECT revision, author, date, message FROM commits WHERE revision IN (:revisions)",
            revisions,
        )
        return {
            int(revision): {
                "author": author,
                "date": datetime.fromtimestamp(date, tz=UTC),
                "message": message,
            }
            for revision, author, date, message in rows
        }
