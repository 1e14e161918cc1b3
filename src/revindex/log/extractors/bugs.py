"""Bug ids mentioned in commit messages."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import Any

from sqlmodel import Field, SQLModel

from revindex.db.migrations import Migration, create_table
from revindex.log.extractors.base import Extractor
from revindex.log.message_parser import LogMessageParser


class CommitBug(SQLModel, table=True):
    __tablename__ = "commit_bugs"

    revision: int = Field(primary_key=True)
    bug_id: str = Field(primary_key=True)


def natural_key(value: str) -> list[Any]:
    """Sort key ordering ``JRA-9`` before ``JRA-10``."""
    return [int(part) if part.isdigit() else part.lower() for part in re.split(r"(\d+)", value)]


class BugsExtractor(Extractor):
    """Indexes bug ids found by the repository's ``bugtraq:logregex``.

    Revisions without a match get no rows; their payload is an empty list.
    """

    name = "bugs"
    migrations = (
        Migration(
            1,
            "commit_bugs table",
            statements=(
                create_table(CommitBug),
                "CREATE INDEX IF NOT EXISTS idx_commit_bugs_bug_id ON commit_bugs (bug_id)",
            ),
        ),
    )

    def __init__(self, parser: LogMessageParser) -> None:
        super().__init__()
        self._parser = parser

    def process(self, from_revision: int, to_revision: int) -> None:
        records: list[dict[str, Any]] = []
        if self._parser.enabled:
            for commit in self.iter_commits(from_revision, to_revision):
                records.extend(
                    {"revision": commit.revision, "bug_id": bug}
                    for bug in self._parser.parse(commit.message)
                )
        with self.database.bulk_writer() as writer:
            writer.delete_revision_range(CommitBug, from_revision, to_revision)
            writer.insert_many(CommitBug, records)

    def find(self, criteria: Sequence[str], scope: str | None = None) -> list[int]:  # noqa: ARG002
        bugs = [c.strip() for c in criteria if c.strip()]
        if not bugs:
            return []
        placeholders = ", ".join(f":b{i}" for i in range(len(bugs)))
        return self._query_revisions(
            f"SELECT revision FROM commit_bugs WHERE bug_id IN ({placeholders})",
            {f"b{i}": bug for i, bug in enumerate(bugs)},
        )

    def get_revisions_data(self, revisions: Iterable[int]) -> dict[int, Any]:
        wanted = list(revisions)
        data: dict[int, list[str]] = {revision: [] for revision in wanted}
        rows = self._select_by_revisions(
            "SELECT revision, bug_id FROM commit_bugs WHERE revision IN (:revisions)",
            wanted,
        )
        for revision, bug_id in rows:
            data[int(revision)].append(bug_id)
        return {revision: sorted(bugs, key=natural_key) for revision, bugs in data.items()}
