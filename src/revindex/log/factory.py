"""Builds ready-to-query revision logs, one database per repository root."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urlparse

import structlog

from revindex.config.constants import DATABASE_FILE_PREFIX, REMOTE_PROPERTY_CACHE_DURATION
from revindex.db.database import Database
from revindex.db.profiler import StatementProfiler
from revindex.log.extractors import (
    BugsExtractor,
    MergesExtractor,
    PathsExtractor,
    RefsExtractor,
    SummaryExtractor,
)
from revindex.log.message_parser import LogMessageParser
from revindex.log.revision_log import RevisionLog

if TYPE_CHECKING:
    from revindex.cache.manager import CacheManager
    from revindex.config.models import RevIndexConfig
    from revindex.svn.connector import SvnConnector

logger = structlog.get_logger()

BUGTRAQ_LOGREGEX = "bugtraq:logregex"


def database_path(working_directory: Path, root_url: str) -> Path:
    """``log_<host>_<hash>.sqlite`` for a repository root URL."""
    host = urlparse(root_url).hostname or "local"
    digest = hashlib.sha1(root_url.rstrip("/").encode("utf-8")).hexdigest()[:8]
    return working_directory / f"{DATABASE_FILE_PREFIX}{host}_{digest}.sqlite"


class RevisionLogFactory:
    def __init__(
        self,
        connector: SvnConnector,
        cache_manager: CacheManager,
        working_directory: Path,
        config: RevIndexConfig,
    ) -> None:
        self._connector = connector
        self._cache_manager = cache_manager
        self._working_directory = working_directory
        self._config = config

    def get_revision_log(self, repository_url: str, *, show_progress: bool = False) -> RevisionLog:
        """Open the revision log of ``repository_url``'s root and refresh it."""
        root_url = self._connector.get_root_url(repository_url)
        logregex = self._connector.with_cache(REMOTE_PROPERTY_CACHE_DURATION).get_property(
            BUGTRAQ_LOGREGEX, repository_url
        )

        database = Database(
            database_path(self._working_directory, root_url), self._config.database
        )
        if self._config.database.profile_statements:
            StatementProfiler().attach(database.engine)

        revision_log = RevisionLog(
            repository_url,
            root_url,
            self._connector,
            database,
            batch_size=self._config.repository.batch_size,
            show_progress=show_progress,
        )
        revision_log.register_extractor(SummaryExtractor())
        revision_log.register_extractor(PathsExtractor())
        revision_log.register_extractor(BugsExtractor(LogMessageParser(logregex)))
        revision_log.register_extractor(MergesExtractor())
        revision_log.register_extractor(RefsExtractor())

        logger.debug(
            "revision_log_opened",
            root_url=root_url,
            database=str(database.path),
            bugtraq=bool(logregex),
        )
        revision_log.refresh()
        return revision_log
