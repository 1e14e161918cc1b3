"""Ordered, versioned schema migrations.

A component (``core`` or an extractor) declares its schema as a list of
``Migration`` steps. Each step is either declarative (a set of SQL
statements or SQLAlchemy DDL elements) or procedural (a callable receiving a
``MigrationContext``, able to backfill data). ``MigrationRunner.migrate``
applies every step newer than the stored version in ascending order, and
bumps the version, inside one IMMEDIATE transaction: either all pending
steps land or none do.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import text
from sqlalchemy.schema import CreateTable
from sqlalchemy.sql import Executable

from revindex.core.errors import MigrationError
from revindex.db.models import SchemaVersion

if TYPE_CHECKING:
    from sqlmodel import Session

    from revindex.db.database import Database

logger = structlog.get_logger()

Statement = str | Executable
MigrationStep = Callable[["MigrationContext"], None]


@dataclass(frozen=True)
class Migration:
    """One schema version of a component.

    Exactly one of ``statements`` and ``step`` must be given. String
    statements hold a single SQL statement each.
    """

    version: int
    name: str
    statements: tuple[Statement, ...] = ()
    step: MigrationStep | None = None

    def __post_init__(self) -> None:
        if self.version < 1:
            raise ValueError(f"Migration version must be positive, got {self.version}")
        if bool(self.statements) == (self.step is not None):
            raise ValueError(
                f'Migration {self.version} "{self.name}" needs either statements or a step'
            )

    @property
    def kind(self) -> str:
        return "step" if self.step is not None else "statements"


@dataclass
class MigrationContext:
    """What a procedural migration step can touch."""

    session: Session
    database: Database
    component: str
    services: dict[str, Any] = field(default_factory=dict)

    def execute(self, statement: Statement, params: dict[str, Any] | None = None) -> Any:
        if isinstance(statement, str):
            statement = text(statement)
        return self.session.execute(statement, params or {})  # type: ignore[call-overload]

    def get_service(self, name: str) -> Any:
        try:
            return self.services[name]
        except KeyError:
            raise MigrationError.failed(
                self.component, 0, f'service "{name}" is not available'
            ) from None


class MigrationRunner:
    """Brings components of one database to their latest schema."""

    def __init__(self, database: Database, services: dict[str, Any] | None = None) -> None:
        self._database = database
        self._services = dict(services or {})

    def get_version(self, component: str) -> int:
        """Stored schema version of ``component`` (0 when never migrated)."""
        if SchemaVersion.__tablename__ not in self._database.table_names():
            return 0
        with self._database.session() as session:
            row = session.get(SchemaVersion, component)
            return row.version if row else 0

    def has_component(self, component: str) -> bool:
        """Whether ``component`` was ever migrated on this database, even to version 0."""
        if SchemaVersion.__tablename__ not in self._database.table_names():
            return False
        with self._database.session() as session:
            return session.get(SchemaVersion, component) is not None

    def migrate(self, component: str, migrations: Sequence[Migration]) -> int:
        """Apply pending migrations of ``component``; return the resulting version."""
        ordered = self._validate(component, migrations)

        with self._database.immediate_transaction() as session:
            session.execute(create_table(SchemaVersion))

            row = session.get(SchemaVersion, component)
            current = row.version if row else 0
            pending = pending_migrations(ordered, current)
            if not pending:
                if row is None:
                    session.add(SchemaVersion(component=component, version=0, migrated_at=time.time()))
                return current

            context = MigrationContext(
                session=session,
                database=self._database,
                component=component,
                services=self._services,
            )
            for migration in pending:
                self._apply(context, migration)

            new_version = pending[-1].version
            if row is None:
                row = SchemaVersion(component=component)
            row.version = new_version
            row.migrated_at = time.time()
            session.add(row)

        logger.info(
            "schema_migrated",
            component=component,
            from_version=current,
            to_version=new_version,
            steps=len(pending),
        )
        return new_version

    def _apply(self, context: MigrationContext, migration: Migration) -> None:
        try:
            if migration.step is not None:
                migration.step(context)
            else:
                for statement in migration.statements:
                    context.execute(statement)
        except MigrationError:
            raise
        except Exception as e:
            logger.error(
                "migration_failed",
                component=context.component,
                version=migration.version,
                name=migration.name,
                error=str(e),
            )
            raise MigrationError.failed(context.component, migration.version, str(e)) from e

        logger.debug(
            "migration_applied",
            component=context.component,
            version=migration.version,
            name=migration.name,
            kind=migration.kind,
        )

    @staticmethod
    def _validate(component: str, migrations: Sequence[Migration]) -> list[Migration]:
        ordered = sorted(migrations, key=lambda m: m.version)
        versions = [m.version for m in ordered]
        if len(set(versions)) != len(versions):
            raise MigrationError.invalid(component, f"duplicate versions in {versions}")
        return ordered


def pending_migrations(migrations: Sequence[Migration], store_version: int) -> list[Migration]:
    """Migrations newer than ``store_version``, ascending."""
    return sorted(
        (m for m in migrations if m.version > store_version),
        key=lambda m: m.version,
    )


def create_table(model: Any) -> CreateTable:
    """Declarative statement creating a SQLModel table (indexes not included)."""
    return CreateTable(model.__table__, if_not_exists=True)
