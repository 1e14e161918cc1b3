"""Revision log engine: keeps a local index in sync with a remote history.

``refresh()`` fetches the revisions past the sync cursor in batches. Each
batch is stored raw, then every extractor processes it in registration
order. The cursor moves once, after the last batch. A failure anywhere
leaves the cursor at its starting value; the next ``refresh()`` processes
the whole range again, which extractors handle by rebuilding it.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

import structlog

from revindex.core.errors import RevisionLogError
from revindex.core.progress import batch_progress
from revindex.db.migrations import MigrationRunner
from revindex.log.extractors.bugs import natural_key
from revindex.log.store import CORE_COMPONENT, CORE_MIGRATIONS, CommitStore
from revindex.svn.paths import get_project_path, normalize_scope, relative_to_root

if TYPE_CHECKING:
    from revindex.db.database import Database
    from revindex.log.extractors.base import Extractor
    from revindex.svn.connector import LogSource

logger = structlog.get_logger()

DEFAULT_BATCH_SIZE = 1000


def revision_batches(
    from_revision: int, to_revision: int, batch_size: int
) -> list[tuple[int, int]]:
    """Split an inclusive range into inclusive slices of at most ``batch_size``."""
    return [
        (start, min(start + batch_size - 1, to_revision))
        for start in range(from_revision, to_revision + 1, batch_size)
    ]


class RevisionLog:
    """Indexed commit history of one repository root."""

    def __init__(
        self,
        repository_url: str,
        root_url: str,
        log_source: LogSource,
        database: Database,
        batch_size: int = DEFAULT_BATCH_SIZE,
        show_progress: bool = False,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        self.repository_url = repository_url
        self.root_url = root_url
        self.database = database
        self._log_source = log_source
        self._batch_size = batch_size
        self._show_progress = show_progress
        self._extractors: dict[str, Extractor] = {}

        self.store = CommitStore(database)
        self._migrations = MigrationRunner(
            database,
            services={"log_source": log_source, "root_url": root_url},
        )
        self._migrations.migrate(CORE_COMPONENT, CORE_MIGRATIONS)

    @property
    def project_path(self) -> str:
        """Project of ``repository_url`` (``/proj/``), or ``/`` outside any project."""
        path = relative_to_root(self.repository_url, self.root_url)
        return get_project_path(path) or normalize_scope(path)

    @property
    def extractors(self) -> list[Extractor]:
        return list(self._extractors.values())

    def register_extractor(self, extractor: Extractor) -> None:
        """Bring the extractor's schema up to date and attach it.

        An extractor new to an already indexed database catches up on the
        stored raw commits so it covers everything up to the cursor.
        """
        if extractor.name in self._extractors:
            raise RevisionLogError.already_registered(extractor.name)

        is_new = not self._migrations.has_component(extractor.name)
        self._migrations.migrate(extractor.name, extractor.migrations)
        extractor.bind(self.database, self.store)
        self._extractors[extractor.name] = extractor

        cursor = self.get_last_revision()
        if is_new and cursor > 0:
            for from_revision, to_revision in revision_batches(1, cursor, self._batch_size):
                extractor.process(from_revision, to_revision)
            logger.info("extractor_backfilled", extractor=extractor.name, to_revision=cursor)

    def get_extractor(self, name: str) -> Extractor:
        try:
            return self._extractors[name]
        except KeyError:
            raise RevisionLogError.extractor_not_found(name) from None

    def get_last_revision(self) -> int:
        """Highest revision processed by every extractor."""
        return self.store.get_cursor()

    def refresh(self) -> int:
        """Index the revisions committed since the last refresh.

        Returns:
            Number of revisions the cursor moved forward.
        """
        started = time.perf_counter()
        cursor = self.get_last_revision()
        last_revision = self._log_source.get_last_revision(self.root_url)

        if last_revision <= cursor:
            logger.debug("revision_log_up_to_date", root_url=self.root_url, revision=cursor)
            return 0

        batches = revision_batches(cursor + 1, last_revision, self._batch_size)
        for from_revision, to_revision in batch_progress(batches, enabled=self._show_progress):
            self._index_batch(from_revision, to_revision)
        self.store.set_cursor(last_revision)

        logger.info(
            "revision_log_refreshed",
            root_url=self.root_url,
            from_revision=cursor + 1,
            to_revision=last_revision,
            batches=len(batches),
            elapsed_sec=round(time.perf_counter() - started, 3),
        )
        return last_revision - cursor

    def _index_batch(self, from_revision: int, to_revision: int) -> None:
        commits = self._log_source.get_commit_range(self.root_url, from_revision, to_revision)
        outside = [c.revision for c in commits if not from_revision <= c.revision <= to_revision]
        if outside:
            raise RevisionLogError.data_anomaly(
                "log source returned revisions outside the requested range",
                from_revision=from_revision,
                to_revision=to_revision,
                revisions=outside,
            )

        self.store.save(commits)
        for extractor in self._extractors.values():
            extractor.process(from_revision, to_revision)

        logger.debug(
            "revision_batch_indexed",
            from_revision=from_revision,
            to_revision=to_revision,
            commits=len(commits),
        )

    def find(self, name: str, criteria: Sequence[str], scope: str | None = None) -> list[int]:
        """Revisions matching ``criteria`` in the ``name`` extractor, ascending.

        ``scope`` defaults to the project of the repository URL. A URL at
        the repository root searches every project.
        """
        extractor = self.get_extractor(name)
        if scope is None and self.project_path != "/":
            scope = self.project_path
        return sorted(set(extractor.find(list(criteria), scope)))

    def get_revisions_data(self, name: str, revisions: Iterable[int]) -> dict[int, Any]:
        """Payload of the ``name`` extractor for every requested revision."""
        wanted = sorted(set(revisions))
        data = self.get_extractor(name).get_revisions_data(wanted)
        missing = [revision for revision in wanted if revision not in data]
        if missing:
            raise RevisionLogError.missing_revision_data(name, missing)
        return {revision: data[revision] for revision in wanted}

    def get_bugs_from_revisions(self, revisions: Iterable[int]) -> list[str]:
        """Every bug id mentioned by any of ``revisions``."""
        bugs: set[str] = set()
        for revision_bugs in self.get_revisions_data("bugs", revisions).values():
            bugs.update(revision_bugs)
        return sorted(bugs, key=natural_key)

    def __repr__(self) -> str:
        return f"RevisionLog(root_url={self.root_url!r}, extractors={list(self._extractors)})"
