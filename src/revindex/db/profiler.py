"""SQL statement profiling.

Hooks SQLAlchemy cursor events to log each statement with its duration and,
optionally, to fail when the same statement runs twice with the same
parameters. Repeated identical queries inside one refresh usually mean an
extractor re-reads what it already has.
"""

from __future__ import annotations

import hashlib
import re
import time
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import event

from revindex.core.errors import RevisionLogError

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = structlog.get_logger()

_WHITESPACE = re.compile(r"\s+")

DEFAULT_IGNORED_STATEMENTS = (
    "SELECT sync_state.id, sync_state.last_revision, sync_state.updated_at FROM sync_state WHERE sync_state.id = ?",
    "BEGIN IMMEDIATE",
    "SELECT name FROM sqlite_master WHERE type = 'table'",
)

DEFAULT_MAX_PROFILES = 1000


@dataclass
class StatementProfile:
    statement: str
    params: Any
    duration_sec: float


def normalize_statement(statement: str) -> str:
    return _WHITESPACE.sub(" ", statement).strip()


class StatementProfiler:
    """Logs statements executed on an engine and keeps the most recent ones.

    Only the last ``max_profiles`` statements are kept. With
    ``detect_duplicates`` the keys of every statement seen since the last
    ``reset()`` are remembered as well.
    """

    def __init__(
        self,
        *,
        detect_duplicates: bool = False,
        ignored_statements: tuple[str, ...] = DEFAULT_IGNORED_STATEMENTS,
        max_profiles: int = DEFAULT_MAX_PROFILES,
    ) -> None:
        self.detect_duplicates = detect_duplicates
        self._ignored = {normalize_statement(s) for s in ignored_statements}
        self._profiles: deque[StatementProfile] = deque(maxlen=max_profiles)
        self._seen: set[str] = set()
        self._active = False

    def attach(self, engine: Engine) -> None:
        event.listen(engine, "before_cursor_execute", self._before_cursor_execute)
        event.listen(engine, "after_cursor_execute", self._after_cursor_execute)
        self._active = True

    def detach(self, engine: Engine) -> None:
        event.remove(engine, "before_cursor_execute", self._before_cursor_execute)
        event.remove(engine, "after_cursor_execute", self._after_cursor_execute)
        self._active = False

    @property
    def profiles(self) -> list[StatementProfile]:
        return list(self._profiles)

    def reset(self) -> None:
        self._profiles.clear()
        self._seen.clear()

    def _before_cursor_execute(
        self,
        conn: Any,
        cursor: Any,  # noqa: ARG002
        statement: str,
        parameters: Any,  # noqa: ARG002
        context: Any,  # noqa: ARG002
        executemany: bool,  # noqa: ARG002
    ) -> None:
        conn.info.setdefault("revindex_query_start", []).append(time.perf_counter())

    def _after_cursor_execute(
        self,
        conn: Any,
        cursor: Any,  # noqa: ARG002
        statement: str,
        parameters: Any,
        context: Any,  # noqa: ARG002
        executemany: bool,  # noqa: ARG002
    ) -> None:
        started = conn.info["revindex_query_start"].pop()
        if not self._active or not statement:
            return
        self.add_profile(time.perf_counter() - started, statement, parameters)

    def add_profile(self, duration_sec: float, statement: str, params: Any) -> None:
        normalized = normalize_statement(statement)
        if normalized in self._ignored:
            return

        if self.detect_duplicates:
            key = hashlib.md5(f"{normalized};{params!r}".encode(), usedforsecurity=False).hexdigest()
            if key in self._seen:
                raise RevisionLogError.duplicate_statement(normalized, params)
            self._seen.add(key)

        self._profiles.append(StatementProfile(normalized, params, duration_sec))
        logger.debug("sql_statement", statement=normalized, duration_sec=round(duration_sec, 4))
