"""Tests for SQL statement profiling."""

from __future__ import annotations

import pytest

from revindex.core.errors import ErrorCode, RevisionLogError
from revindex.db.database import Database
from revindex.db.profiler import StatementProfiler, normalize_statement


class TestNormalizeStatement:
    def test_collapses_whitespace(self) -> None:
        assert normalize_statement("SELECT  *\n   FROM t ") == "SELECT * FROM t"


class TestStatementProfiler:
    """Statement collection and duplicate detection."""

    def test_given_attached_then_statements_collected(self, temp_db: Database) -> None:
        profiler = StatementProfiler()
        profiler.attach(temp_db.engine)

        temp_db.execute_raw("SELECT 42")

        assert any(p.statement == "SELECT 42" for p in profiler.profiles)
        profiler.detach(temp_db.engine)

    def test_given_duplicate_detection_then_repeat_raises(self) -> None:
        profiler = StatementProfiler(detect_duplicates=True)
        profiler.add_profile(0.1, "SELECT * FROM commits WHERE revision = ?", (1,))

        with pytest.raises(RevisionLogError) as exc_info:
            profiler.add_profile(0.1, "SELECT *  FROM commits WHERE revision = ?", (1,))

        assert exc_info.value.code == ErrorCode.DUPLICATE_STATEMENT

    def test_given_different_params_then_not_duplicate(self) -> None:
        profiler = StatementProfiler(detect_duplicates=True)
        profiler.add_profile(0.1, "SELECT * FROM commits WHERE revision = ?", (1,))
        profiler.add_profile(0.1, "SELECT * FROM commits WHERE revision = ?", (2,))

        assert len(profiler.profiles) == 2

    def test_ignored_statements_never_duplicate(self) -> None:
        profiler = StatementProfiler(detect_duplicates=True, ignored_statements=("BEGIN IMMEDIATE",))
        profiler.add_profile(0.1, "BEGIN IMMEDIATE", ())
        profiler.add_profile(0.1, "BEGIN IMMEDIATE", ())

        assert profiler.profiles == []

    def test_reset_forgets_statements(self) -> None:
        profiler = StatementProfiler(detect_duplicates=True)
        profiler.add_profile(0.1, "SELECT 1", ())
        profiler.reset()

        profiler.add_profile(0.1, "SELECT 1", ())
        assert len(profiler.profiles) == 1

    def test_given_many_statements_then_only_most_recent_kept(self) -> None:
        profiler = StatementProfiler(max_profiles=3)
        for revision in range(10):
            profiler.add_profile(0.1, "SELECT * FROM commits WHERE revision = ?", (revision,))

        assert [p.params for p in profiler.profiles] == [(7,), (8,), (9,)]

    def test_given_no_duplicate_detection_then_repeats_allowed_and_kept(self) -> None:
        profiler = StatementProfiler(max_profiles=5)
        for _ in range(3):
            profiler.add_profile(0.1, "SELECT 1", ())

        assert [p.statement for p in profiler.profiles] == ["SELECT 1"] * 3
