"""Tests for the rvx command line."""

from __future__ import annotations

import json
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from revindex.cli.main import cli
from revindex.db.database import Database
from revindex.log.extractors import (
    BugsExtractor,
    MergesExtractor,
    PathsExtractor,
    RefsExtractor,
    SummaryExtractor,
)
from revindex.log.message_parser import LogMessageParser
from revindex.log.revision_log import RevisionLog

runner = CliRunner()

URL = "svn://example.com/repo/proj/trunk"


@pytest.fixture
def config_file(temp_dir: Path) -> Path:
    path = temp_dir / "config.yaml"
    path.write_text(f"cache:\n  working_directory: {temp_dir / 'work'}\n")
    return path


@pytest.fixture
def revision_log(
    temp_db: Database, log_source: Any, make_commit: Callable[..., Any]
) -> RevisionLog:
    log_source.add(
        make_commit(1, "A /proj/trunk/a.txt", author="alice", message="JRA-1 initial\nimport"),
        make_commit(2, "A /proj/branches/x/a.txt", author="bob", message="JRA-2 branch"),
        make_commit(3, "M /proj/trunk/a.txt", author="alice", message="merge", merged=[2]),
    )
    log = RevisionLog(URL, "svn://example.com/repo", log_source, temp_db)
    log.register_extractor(SummaryExtractor())
    log.register_extractor(PathsExtractor())
    log.register_extractor(BugsExtractor(LogMessageParser(r"(JRA-\d+)")))
    log.register_extractor(MergesExtractor())
    log.register_extractor(RefsExtractor())
    log.refresh()
    return log


@pytest.fixture
def opened(revision_log: RevisionLog) -> Generator[list[Any], None, None]:
    """Patch every command's open_revision_log to return the fixture log."""
    calls: list[Any] = []

    def fake_open(config: Any, target: str, *, show_progress: bool = False) -> RevisionLog:
        calls.append((target, show_progress))
        return revision_log

    with (
        patch("revindex.cli.refresh.open_revision_log", side_effect=fake_open),
        patch("revindex.cli.find.open_revision_log", side_effect=fake_open),
        patch("revindex.cli.show.open_revision_log", side_effect=fake_open),
    ):
        yield calls


class TestMain:
    def test_help_lists_commands(self) -> None:
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("refresh", "find", "show", "merge-source", "cache"):
            assert command in result.output

    def test_given_invalid_config_then_fails(self, temp_dir: Path) -> None:
        bad = temp_dir / "bad.yaml"
        bad.write_text("repository:\n  batch_size: 0\n")

        result = runner.invoke(cli, ["--config", str(bad), "cache", "clear"])

        assert result.exit_code != 0
        assert "batch_size" in result.output


class TestRefreshCommand:
    def test_reports_last_revision(self, config_file: Path, opened: list[Any]) -> None:
        result = runner.invoke(cli, ["--config", str(config_file), "refresh", URL])

        assert result.exit_code == 0, result.output
        assert "r3" in result.output
        assert opened == [(URL, True)]


class TestFindCommand:
    """rvx find."""

    def test_prints_one_revision_per_line(self, config_file: Path, opened: list[Any]) -> None:
        result = runner.invoke(cli, ["--config", str(config_file), "find", URL, "bugs", "JRA-1", "JRA-2"])

        assert result.exit_code == 0, result.output
        assert result.output.split() == ["1", "2"]

    def test_json_output(self, config_file: Path, opened: list[Any]) -> None:
        result = runner.invoke(
            cli, ["--config", str(config_file), "find", "--json", URL, "refs", "all"]
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == [1, 2, 3]

    def test_given_unknown_extractor_then_fails(self, config_file: Path, opened: list[Any]) -> None:
        result = runner.invoke(cli, ["--config", str(config_file), "find", URL, "nope", "x"])

        assert result.exit_code == 1
        assert 'Extractor "nope" is not registered' in result.output

    def test_given_non_numeric_merge_revision_then_fails(
        self, config_file: Path, opened: list[Any]
    ) -> None:
        result = runner.invoke(cli, ["--config", str(config_file), "find", URL, "merges", "abc"])

        assert result.exit_code == 1
        assert 'cannot search for "abc"' in result.output
        assert isinstance(result.exception, SystemExit)


class TestShowCommand:
    def test_renders_table(self, config_file: Path, opened: list[Any]) -> None:
        result = runner.invoke(cli, ["--config", str(config_file), "show", URL, "1", "3"])

        assert result.exit_code == 0, result.output
        assert "r1" in result.output
        assert "JRA-1" in result.output
        assert "alice" in result.output
        assert "r2" in result.output  # merged by r3

    def test_given_unindexed_revision_then_fails(self, config_file: Path, opened: list[Any]) -> None:
        result = runner.invoke(cli, ["--config", str(config_file), "show", URL, "99"])

        assert result.exit_code == 1
        assert "99" in result.output


class TestMergeSourceCommand:
    def test_prints_merge_source(self) -> None:
        result = runner.invoke(cli, ["merge-source", "svn://h/r/p/branches/feature"])

        assert result.exit_code == 0
        assert result.output.strip() == "svn://h/r/p/trunk"

    def test_given_trunk_then_fails(self) -> None:
        result = runner.invoke(cli, ["merge-source", "svn://h/r/p/trunk"])

        assert result.exit_code == 1
        assert "No merge source detected" in result.output


class TestCacheCommand:
    def test_clear_removes_cache_files(self, config_file: Path, temp_dir: Path) -> None:
        work = temp_dir / "work"
        work.mkdir()
        (work / "command_abcd1234_DINF.cache").write_text("{}")
        (work / "other_abcd1234_DINF.cache").write_text("{}")

        result = runner.invoke(
            cli, ["--config", str(config_file), "cache", "clear", "--namespace", "command"]
        )

        assert result.exit_code == 0, result.output
        assert [p.name for p in work.iterdir()] == ["other_abcd1234_DINF.cache"]
        assert "1 cache file" in result.output
