"""Which revisions each merge commit newly merged.

A merge commit records the merge set of its target (the ref root it
changes, or ``/``). Only revisions not attributed to an earlier merge on
the same target are attributed to it; removals from the merge set are not
tracked, so a revision once attributed on a target stays attributed to its
first merge.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from sqlmodel import Field, SQLModel

from revindex.core.errors import RevisionLogError
from revindex.db.migrations import Migration, create_table
from revindex.log.extractors.base import Extractor
from revindex.log.models import Commit
from revindex.svn.paths import get_ref_root

ALL_MERGES = "all_merges"


class Merge(SQLModel, table=True):
    __tablename__ = "merges"

    merge_revision: int = Field(primary_key=True)
    merged_revision: int = Field(primary_key=True)
    target: str = "/"


def merge_target(commit: Commit) -> str:
    """Ref root of the first path under a ref, ``/`` when none is."""
    for change in commit.paths:
        root = get_ref_root(change.path)
        if root is not None:
            return root
    return "/"


class MergesExtractor(Extractor):
    """Indexes merge commits.

    ``find(["all_merges"])`` gives every merge commit;
    ``find(["<merge revision>", ...])`` gives the revisions those commits
    merged.
    """

    name = "merges"
    migrations = (
        Migration(
            1,
            "merges table",
            statements=(
                create_table(Merge),
                "CREATE INDEX IF NOT EXISTS idx_merges_merged_revision ON merges (merged_revision)",
                "CREATE INDEX IF NOT EXISTS idx_merges_target ON merges (target)",
            ),
        ),
    )

    def process(self, from_revision: int, to_revision: int) -> None:
        seen_by_target: dict[str, set[int]] = {}
        records: list[dict[str, Any]] = []

        with self.database.bulk_writer() as writer:
            writer.delete_revision_range(Merge, from_revision, to_revision, column="merge_revision")

            for commit in self.iter_commits(from_revision, to_revision):
                if not commit.merged_revisions:
                    continue
                target = merge_target(commit)
                if target not in seen_by_target:
                    seen_by_target[target] = self._attributed_before(target, from_revision)
                seen = seen_by_target[target]

                newly_merged = sorted(commit.merged_revisions - seen)
                seen.update(newly_merged)
                records.extend(
                    {"merge_revision": commit.revision, "merged_revision": merged, "target": target}
                    for merged in newly_merged
                )

            writer.insert_many(Merge, records)

    def _attributed_before(self, target: str, revision: int) -> set[int]:
        rows = self.database.execute_raw(
            "SELECT merged_revision FROM merges WHERE target = :target AND merge_revision < :revision",
            {"target": target, "revision": revision},
        )
        return {int(row[0]) for row in rows}

    def find(self, criteria: Sequence[str], scope: str | None = None) -> list[int]:  # noqa: ARG002
        found: set[int] = set()
        merge_revisions: list[int] = []
        for criterion in criteria:
            if criterion == ALL_MERGES:
                found.update(self._query_revisions("SELECT DISTINCT merge_revision FROM merges", {}))
            elif criterion.strip().isdecimal():
                merge_revisions.append(int(criterion))
            else:
                raise RevisionLogError.invalid_criterion(
                    self.name, criterion, f'a merge revision number or "{ALL_MERGES}"'
                )

        if merge_revisions:
            rows = self._select_by_revisions(
                "SELECT merged_revision FROM merges WHERE merge_revision IN (:revisions)",
                merge_revisions,
            )
            found.update(int(row[0]) for row in rows)
        return sorted(found)

    def get_revisions_data(self, revisions: Iterable[int]) -> dict[int, Any]:
        """Newly merged revisions per merge commit; empty list for other commits."""
        wanted = list(revisions)
        data: dict[int, list[int]] = {revision: [] for revision in wanted}
        rows = self._select_by_revisions(
            "SELECT merge_revision, merged_revision FROM merges "
            "WHERE merge_revision IN (:revisions) ORDER BY merged_revision",
            wanted,
        )
        for merge_revision, merged_revision in rows:
            data[int(merge_revision)].append(int(merged_revision))
        return data

    def get_merged_via(self, revisions: Iterable[int]) -> dict[int, list[int]]:
        """Merge commits per merged revision; empty list for never merged ones."""
        wanted = list(revisions)
        data: dict[int, list[int]] = {revision: [] for revision in wanted}
        rows = self._select_by_revisions(
            "SELECT merged_revision, merge_revision FROM merges "
            "WHERE merged_revision IN (:revisions) ORDER BY merge_revision",
            wanted,
        )
        for merged_revision, merge_revision in rows:
            data[int(merged_revision)].append(int(merge_revision))
        return data
