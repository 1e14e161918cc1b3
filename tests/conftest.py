"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages,
and provides fixtures shared by every test package.
"""

from __future__ import annotations

import sys
import tempfile
from collections.abc import Callable, Generator, Iterable
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local revindex package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of revindex modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("revindex"):
        del sys.modules[module_name]

if TYPE_CHECKING:
    from revindex.db.database import Database
    from revindex.log.models import Commit


class FakeLogSource:
    """In-memory remote history.

    Commits are added with ``add``; ``calls`` records every range request.
    """

    def __init__(self, commits: Iterable[Commit] = ()) -> None:
        self.commits: dict[int, Commit] = {c.revision: c for c in commits}
        self.properties: dict[str, str] = {}
        self.calls: list[tuple[int, int]] = []
        self.last_revision: int | None = None

    def add(self, *commits: Commit) -> None:
        for commit in commits:
            self.commits[commit.revision] = commit

    def get_last_revision(self, target: str) -> int:  # noqa: ARG002
        if self.last_revision is not None:
            return self.last_revision
        return max(self.commits, default=0)

    def get_commit_range(self, target: str, from_revision: int, to_revision: int) -> list[Commit]:  # noqa: ARG002
        self.calls.append((from_revision, to_revision))
        return [
            self.commits[revision]
            for revision in sorted(self.commits)
            if from_revision <= revision <= to_revision
        ]

    def get_property(self, name: str, target: str, revision: int | None = None) -> str:  # noqa: ARG002
        return self.properties.get(name, "")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory(ignore_cleanup_errors=True) as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_db(temp_dir: Path) -> Generator[Database, None, None]:
    """Create an empty temporary database."""
    from revindex.db.database import Database

    db = Database(temp_dir / "test.sqlite")
    yield db
    db.dispose()


@pytest.fixture
def make_commit() -> Callable[..., Commit]:
    """Build commits from ``"<action> <path>"`` strings.

    Example: ``make_commit(12, "M /proj/trunk/a.txt", message="JRA-1 fix")``
    """
    from revindex.log.models import Commit, PathAction, PathChange

    def _make(
        revision: int,
        *paths: str,
        author: str = "alice",
        message: str = "",
        merged: Iterable[int] = (),
        date: datetime | None = None,
    ) -> Commit:
        changes = []
        for entry in paths:
            action, _, path = entry.partition(" ")
            changes.append(PathChange(action=PathAction.parse(action), path=path, kind="file"))
        return Commit(
            revision=revision,
            author=author,
            date=date or datetime(2024, 1, 1, tzinfo=UTC).replace(minute=revision % 60),
            message=message,
            paths=tuple(changes),
            merged_revisions=frozenset(merged),
        )

    return _make


@pytest.fixture
def log_source() -> FakeLogSource:
    """Empty in-memory log source."""
    return FakeLogSource()


@pytest.fixture
def commit_store(temp_db: Database) -> Any:
    """Raw commit store on a migrated temporary database."""
    from revindex.db.migrations import MigrationRunner
    from revindex.log.store import CORE_COMPONENT, CORE_MIGRATIONS, CommitStore

    MigrationRunner(temp_db).migrate(CORE_COMPONENT, CORE_MIGRATIONS)
    return CommitStore(temp_db)


@pytest.fixture
def bind_extractor(temp_db: Database, commit_store: Any) -> Callable[[Any], Any]:
    """Migrate an extractor's schema on the temporary database and bind it."""
    from revindex.db.migrations import MigrationRunner

    def _bind(extractor: Any) -> Any:
        MigrationRunner(temp_db).migrate(extractor.name, extractor.migrations)
        extractor.bind(temp_db, commit_store)
        return extractor

    return _bind
