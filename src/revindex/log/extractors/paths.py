"""Paths touched by every revision."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from sqlmodel import Field, SQLModel

from revindex.db.migrations import Migration, create_table
from revindex.log.extractors.base import Extractor
from revindex.svn.paths import normalize_scope


class CommitPath(SQLModel, table=True):
    __tablename__ = "commit_paths"

    id: int | None = Field(default=None, primary_key=True)
    revision: int
    action: str
    path: str
    kind: str = ""
    copy_path: str | None = None
    copy_revision: int | None = None


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def resolve_path(criterion: str, scope: str | None) -> str:
    """Absolute form of a path criterion; relative ones resolve under ``scope``."""
    if criterion.startswith("/"):
        return criterion
    return normalize_scope(scope or "/") + criterion


class PathsExtractor(Extractor):
    """Indexes path changes for "which revisions touched X" lookups.

    A criterion matches the path itself and everything below it.
    """

    name = "paths"
    migrations = (
        Migration(
            1,
            "commit_paths table",
            statements=(
                create_table(CommitPath),
                "CREATE INDEX IF NOT EXISTS idx_commit_paths_revision ON commit_paths (revision)",
                "CREATE INDEX IF NOT EXISTS idx_commit_paths_path ON commit_paths (path)",
            ),
        ),
    )

    def process(self, from_revision: int, to_revision: int) -> None:
        records = [
            {
                "revision": commit.revision,
                "action": change.action.value,
                "path": change.path,
                "kind": change.kind,
                "copy_path": change.copy_path,
                "copy_revision": change.copy_revision,
            }
            for commit in self.iter_commits(from_revision, to_revision)
            for change in commit.paths
        ]
        with self.database.bulk_writer() as writer:
            writer.delete_revision_range(CommitPath, from_revision, to_revision)
            writer.insert_many(CommitPath, records)

    def find(self, criteria: Sequence[str], scope: str | None = None) -> list[int]:
        found: set[int] = set()
        for criterion in criteria:
            path = resolve_path(criterion, scope).rstrip("/")
            if not path:
                found.update(self._query_revisions("SELECT DISTINCT revision FROM commit_paths", {}))
                continue
            found.update(
                self._query_revisions(
                    "SELECT DISTINCT revision FROM commit_paths "
                    "WHERE path = :path OR path LIKE :prefix ESCAPE '\\'",
                    {"path": path, "prefix": _escape_like(path + "/") + "%"},
                )
            )
        return sorted(found)

    def get_revisions_data(self, revisions: Iterable[int]) -> dict[int, Any]:
        """Path changes per revision, in commit order; empty list for none."""
        wanted = list(revisions)
        data: dict[int, Any] = {revision: [] for revision in wanted}
        rows = self._select_by_revisions(
            "SELECT revision, action, path, kind, copy_path, copy_revision "
            "FROM commit_paths WHERE revision IN (:revisions) ORDER BY revision, id",
            wanted,
        )
        for revision, action, path, kind, copy_path, copy_revision in rows:
            data[int(revision)].append(
                {
                    "action": action,
                    "path": path,
                    "kind": kind,
                    "copy_path": copy_path,
                    "copy_revision": copy_revision,
                }
            )
        return data
