"""Tests for the paths extractor."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from revindex.log.extractors.paths import PathsExtractor, resolve_path


@pytest.fixture
def paths(
    bind_extractor: Callable[[Any], Any], commit_store: Any, make_commit: Callable[..., Any]
) -> PathsExtractor:
    extractor = bind_extractor(PathsExtractor())
    commit_store.save(
        [
            make_commit(1, "A /proj/trunk/src/app.py", "A /proj/trunk/README"),
            make_commit(2, "M /proj/trunk/src/app.py"),
            make_commit(3, "A /proj/trunk/src_old/app.py"),
            make_commit(4, "M /proj/branches/1.x/src/app.py"),
            make_commit(5, "D /other/trunk/100%_done.txt"),
        ]
    )
    extractor.process(1, 5)
    return extractor


class TestResolvePath:
    """Relative criteria resolution."""

    @pytest.mark.parametrize(
        ("criterion", "scope", "expected"),
        [
            ("/abs/path", "/proj/", "/abs/path"),
            ("trunk/a", "/proj/", "/proj/trunk/a"),
            ("trunk/a", "proj", "/proj/trunk/a"),
            ("trunk/a", None, "/trunk/a"),
        ],
    )
    def test_resolve(self, criterion: str, scope: str | None, expected: str) -> None:
        assert resolve_path(criterion, scope) == expected


class TestPathsExtractor:
    """Path containment lookups."""

    def test_given_directory_when_find_then_matches_subtree_only(
        self, paths: PathsExtractor
    ) -> None:
        """A directory matches itself and its children, not siblings sharing a prefix."""
        assert paths.find(["/proj/trunk/src"]) == [1, 2]

    def test_given_file_when_find_then_matches_exact_path(self, paths: PathsExtractor) -> None:
        assert paths.find(["/proj/trunk/README"]) == [1]

    def test_given_relative_path_when_find_then_resolved_under_scope(
        self, paths: PathsExtractor
    ) -> None:
        assert paths.find(["branches"], "/proj/") == [4]

    def test_given_like_wildcards_in_path_when_find_then_matched_literally(
        self, paths: PathsExtractor
    ) -> None:
        assert paths.find(["/other/trunk/100%_done.txt"]) == [5]
        assert paths.find(["/other/trunk/100"]) == []

    def test_given_root_when_find_then_returns_every_revision(self, paths: PathsExtractor) -> None:
        assert paths.find(["/"]) == [1, 2, 3, 4, 5]

    def test_given_revisions_when_get_data_then_every_revision_present(
        self, paths: PathsExtractor
    ) -> None:
        """Revisions without rows map to an empty list."""
        data = paths.get_revisions_data([2, 99])

        assert data[99] == []
        assert data[2] == [
            {
                "action": "M",
                "path": "/proj/trunk/src/app.py",
                "kind": "file",
                "copy_path": None,
                "copy_revision": None,
            }
        ]

    def test_given_commit_order_when_get_data_then_preserved(self, paths: PathsExtractor) -> None:
        data = paths.get_revisions_data([1])
        assert [p["path"] for p in data[1]] == ["/proj/trunk/src/app.py", "/proj/trunk/README"]

    def test_given_range_reprocessed_then_no_duplicate_rows(self, paths: PathsExtractor) -> None:
        before = paths.get_revisions_data([1, 2, 3, 4, 5])

        paths.process(1, 5)
        paths.process(2, 3)

        assert paths.get_revisions_data([1, 2, 3, 4, 5]) == before
