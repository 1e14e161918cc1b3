"""SQLite access for one revision log database.

Reads and small writes (sync cursor, schema versions) go through ORM
sessions. Extractor rows for a whole batch go through ``BulkWriter``, which
issues Core statements on a single connection inside one transaction.
"""

from __future__ import annotations

import time
from collections.abc import Generator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import event, text
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, SQLModel, create_engine

from revindex.config.models import DatabaseConfig

if TYPE_CHECKING:
    from sqlalchemy import Engine, Table

logger = structlog.get_logger()

_MAX_RETRY_DELAY_SEC = 2.0

_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA foreign_keys=ON",
)


def _is_busy(error: OperationalError) -> bool:
    message = str(error).lower()
    return "database is locked" in message or "database is busy" in message


def _table(model: type[SQLModel]) -> Table:
    return model.__table__  # type: ignore[attr-defined,no-any-return]


class Database:
    """WAL-mode SQLite database file, created on first use."""

    def __init__(self, path: Path, config: DatabaseConfig | None = None) -> None:
        self.path = path
        self.config = config or DatabaseConfig()
        self.engine = self._create_engine()

    def _create_engine(self) -> Engine:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(
            f"sqlite:///{self.path}",
            connect_args={"check_same_thread": False},
            pool_pre_ping=True,
        )
        busy_timeout_ms = int(self.config.busy_timeout_ms)

        @event.listens_for(engine, "connect")
        def _on_connect(dbapi_conn: Any, _record: Any) -> None:
            cursor = dbapi_conn.cursor()
            for pragma in _PRAGMAS:
                cursor.execute(pragma)
            cursor.execute(f"PRAGMA busy_timeout={busy_timeout_ms}")
            cursor.close()

        return engine

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        with Session(self.engine) as session:
            yield session

    def _retry_delay(self, attempt: int) -> float:
        return min(self.config.retry_base_delay_sec * (2**attempt), _MAX_RETRY_DELAY_SEC)

    def _begin_immediate(self) -> Session:
        """Session holding the write lock, retrying while another writer has it."""
        attempt = 0
        while True:
            session = Session(self.engine)
            try:
                session.execute(text("BEGIN IMMEDIATE"))
                return session
            except OperationalError as e:
                session.close()
                if not _is_busy(e) or attempt >= self.config.max_retries:
                    raise
                delay = self._retry_delay(attempt)
                attempt += 1
                logger.warning(
                    "sqlite_busy_retry", attempt=attempt, delay_sec=delay, path=str(self.path)
                )
                time.sleep(delay)

    @contextmanager
    def immediate_transaction(self) -> Generator[Session, None, None]:
        """Write transaction started with BEGIN IMMEDIATE.

        DDL issued inside the block belongs to the transaction, so a
        migration either fully applies or leaves no trace. Commits on exit,
        rolls back on exception.
        """
        session = self._begin_immediate()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def bulk_writer(self) -> Generator[BulkWriter, None, None]:
        """Writer whose statements commit together on exit."""
        with self.engine.connect() as conn, conn.begin():
            yield BulkWriter(conn)

    def execute_raw(self, sql: str, params: dict[str, Any] | None = None) -> list[Any]:
        """Run one statement in its own transaction; rows, if it returns any."""
        with self.engine.begin() as conn:
            result = conn.execute(text(sql), params or {})
            return list(result) if result.returns_rows else []

    def table_names(self) -> set[str]:
        rows = self.execute_raw("SELECT name FROM sqlite_master WHERE type = 'table'")
        return {row[0] for row in rows}

    def dispose(self) -> None:
        self.engine.dispose()


class BulkWriter:
    """Core-SQL writes on one open transaction."""

    def __init__(self, conn: Any) -> None:
        self.conn = conn

    def insert_many(self, model: type[SQLModel], rows: Sequence[dict[str, Any]]) -> int:
        if not rows:
            return 0
        self.conn.execute(_table(model).insert(), list(rows))
        return len(rows)

    def upsert_many(
        self,
        model: type[SQLModel],
        rows: Sequence[dict[str, Any]],
        conflict_columns: Sequence[str],
        update_columns: Sequence[str],
    ) -> int:
        """INSERT ... ON CONFLICT; existing rows keep their values when ``update_columns`` is empty."""
        if not rows:
            return 0

        columns = list(rows[0])
        if update_columns:
            action = "DO UPDATE SET " + ", ".join(f"{c} = excluded.{c}" for c in update_columns)
        else:
            action = "DO NOTHING"
        sql = (
            f"INSERT INTO {_table(model).name} ({', '.join(columns)}) "
            f"VALUES ({', '.join(':' + c for c in columns)}) "
            f"ON CONFLICT ({', '.join(conflict_columns)}) {action}"
        )
        self.conn.execute(text(sql), list(rows))
        return len(rows)

    def delete_where(self, model: type[SQLModel], condition: str, params: dict[str, Any]) -> int:
        """Delete rows matching a SQL condition; returns how many."""
        result = self.conn.execute(text(f"DELETE FROM {_table(model).name} WHERE {condition}"), params)
        return int(result.rowcount)

    def delete_revision_range(
        self,
        model: type[SQLModel],
        from_revision: int,
        to_revision: int,
        column: str = "revision",
    ) -> int:
        """Delete the rows of an inclusive revision range."""
        return self.delete_where(
            model, f"{column} BETWEEN :lo AND :hi", {"lo": from_revision, "hi": to_revision}
        )

    def execute(self, sql: str, params: dict[str, Any] | None = None) -> int:
        """Run one raw statement inside the writer's transaction; returns the row count."""
        return int(self.conn.execute(text(sql), params or {}).rowcount)
