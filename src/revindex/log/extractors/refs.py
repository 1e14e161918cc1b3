"""Refs (trunk, branches, tags, releases) touched by every revision."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

from sqlmodel import Field, SQLModel

from revindex.db.migrations import Migration, create_table
from revindex.log.extractors.base import Extractor
from revindex.svn.paths import get_project_path, get_ref_by_path, normalize_scope

if TYPE_CHECKING:
    from revindex.db.migrations import MigrationContext

ALL_REFS = "all"


class CommitRef(SQLModel, table=True):
    __tablename__ = "commit_refs"

    revision: int = Field(primary_key=True)
    project_path: str = Field(primary_key=True)
    ref: str = Field(primary_key=True)


class KnownRef(SQLModel, table=True):
    __tablename__ = "known_refs"

    project_path: str = Field(primary_key=True)
    ref: str = Field(primary_key=True)
    first_revision: int
    last_revision: int


_REFRESH_KNOWN_REF = """
    INSERT INTO known_refs (project_path, ref, first_revision, last_revision)
    SELECT project_path, ref, MIN(revision), MAX(revision)
    FROM commit_refs
    WHERE project_path = :project_path AND ref = :ref
    GROUP BY project_path, ref
    ON CONFLICT (project_path, ref) DO UPDATE SET
        first_revision = excluded.first_revision,
        last_revision = excluded.last_revision
"""


def _backfill_known_refs(context: MigrationContext) -> None:
    context.execute(create_table(KnownRef))
    context.execute(
        "INSERT INTO known_refs (project_path, ref, first_revision, last_revision) "
        "SELECT project_path, ref, MIN(revision), MAX(revision) "
        "FROM commit_refs GROUP BY project_path, ref"
    )


class RefsExtractor(Extractor):
    """Classifies touched paths into refs; a commit may touch several.

    Queries take a project scope such as ``/proj/``; without one they span
    every project.
    """

    name = "refs"
    migrations = (
        Migration(
            1,
            "commit_refs table",
            statements=(
                create_table(CommitRef),
                "CREATE INDEX IF NOT EXISTS idx_commit_refs_ref ON commit_refs (project_path, ref)",
            ),
        ),
        Migration(2, "known_refs table", step=_backfill_known_refs),
    )

    def process(self, from_revision: int, to_revision: int) -> None:
        records: list[dict[str, Any]] = []
        touched: set[tuple[str, str]] = set()
        for commit in self.iter_commits(from_revision, to_revision):
            commit_refs: set[tuple[str, str]] = set()
            for change in commit.paths:
                ref = get_ref_by_path(change.path)
                if ref is not None:
                    commit_refs.add((get_project_path(change.path) or "/", ref))
            records.extend(
                {"revision": commit.revision, "project_path": project_path, "ref": ref}
                for project_path, ref in sorted(commit_refs)
            )
            touched.update(commit_refs)

        with self.database.bulk_writer() as writer:
            writer.delete_revision_range(CommitRef, from_revision, to_revision)
            writer.insert_many(CommitRef, records)
            for project_path, ref in sorted(touched):
                writer.execute(_REFRESH_KNOWN_REF, {"project_path": project_path, "ref": ref})

    def find(self, criteria: Sequence[str], scope: str | None = None) -> list[int]:
        if not criteria:
            return []

        conditions: list[str] = []
        params: dict[str, Any] = {}
        if scope is not None:
            conditions.append("project_path = :project_path")
            params["project_path"] = normalize_scope(scope)

        if ALL_REFS not in criteria:
            refs = [c.strip("/") for c in criteria]
            conditions.append("ref IN ({})".format(", ".join(f":ref{i}" for i in range(len(refs)))))
            params.update({f"ref{i}": ref for i, ref in enumerate(refs)})

        where = f" WHERE {' AND '.join(conditions)}" if conditions else ""
        return self._query_revisions(f"SELECT DISTINCT revision FROM commit_refs{where}", params)

    def get_refs(self, scope: str | None = None) -> list[str]:
        """Every ref ever touched, in a project or across projects."""
        if scope is None:
            rows = self.database.execute_raw("SELECT DISTINCT ref FROM known_refs")
        else:
            rows = self.database.execute_raw(
                "SELECT ref FROM known_refs WHERE project_path = :project_path",
                {"project_path": normalize_scope(scope)},
            )
        return sorted(row[0] for row in rows)

    def get_revisions_data(self, revisions: Iterable[int]) -> dict[int, Any]:
        wanted = list(revisions)
        data: dict[int, set[str]] = {revision: set() for revision in wanted}
        rows = self._select_by_revisions(
            "SELECT revision, ref FROM commit_refs WHERE revision IN (:revisions)",
            wanted,
        )
        for revision, ref in rows:
            data[int(revision)].add(ref)
        return {revision: sorted(refs) for revision, refs in data.items()}
