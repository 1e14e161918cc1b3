"""Extractor contract.

An extractor derives one queryable index from raw commits. It owns its
tables (declared as ``migrations``), rebuilds the rows of an inclusive
revision range in ``process`` and answers queries on them. ``process`` must
be safe to re-run over a range it has already indexed, fully or partially:
implementations delete the range first, then write it again.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Sequence
from typing import TYPE_CHECKING, Any, ClassVar

from revindex.core.errors import InternalError

if TYPE_CHECKING:
    from revindex.db.database import Database
    from revindex.db.migrations import Migration
    from revindex.log.models import Commit
    from revindex.log.store import CommitStore

# SQLite caps bound parameters per statement
_IN_CHUNK = 500


class Extractor(ABC):
    """Base class of revision log extractors."""

    name: ClassVar[str]
    migrations: ClassVar[Sequence[Migration]] = ()

    def __init__(self) -> None:
        self._database: Database | None = None
        self._store: CommitStore | None = None

    def bind(self, database: Database, store: CommitStore) -> None:
        """Attach to the revision log's database. Called once on registration."""
        self._database = database
        self._store = store

    @property
    def database(self) -> Database:
        if self._database is None:
            raise InternalError.unexpected(f'extractor "{self.name}" is not bound to a database')
        return self._database

    @property
    def store(self) -> CommitStore:
        if self._store is None:
            raise InternalError.unexpected(f'extractor "{self.name}" is not bound to a database')
        return self._store

    def iter_commits(self, from_revision: int, to_revision: int) -> Iterator[Commit]:
        return self.store.iter_range(from_revision, to_revision)

    @abstractmethod
    def process(self, from_revision: int, to_revision: int) -> None:
        """Rebuild this extractor's rows for an inclusive revision range."""

    @abstractmethod
    def find(self, criteria: Sequence[str], scope: str | None = None) -> list[int]:
        """Revisions matching ``criteria``, ascending and unique."""

    @abstractmethod
    def get_revisions_data(self, revisions: Iterable[int]) -> dict[int, Any]:
        """Per-revision payload, keyed by revision."""

    def _query_revisions(self, sql: str, params: dict[str, Any]) -> list[int]:
        rows = self.database.execute_raw(sql, params)
        return sorted({int(row[0]) for row in rows})

    def _select_by_revisions(
        self, sql: str, revisions: Iterable[int], extra: dict[str, Any] | None = None
    ) -> list[Any]:
        """Run ``sql`` whose ``IN :revisions`` placeholder expands to ``revisions``."""
        wanted = sorted(set(revisions))
        if not wanted:
            return []
        rows: list[Any] = []
        for start in range(0, len(wanted), _IN_CHUNK):
            chunk = wanted[start : start + _IN_CHUNK]
            placeholders = ", ".join(f":r{i}" for i in range(len(chunk)))
            params = {f"r{i}": revision for i, revision in enumerate(chunk)}
            params.update(extra or {})
            rows.extend(self.database.execute_raw(sql.replace(":revisions", placeholders), params))
        return rows

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

