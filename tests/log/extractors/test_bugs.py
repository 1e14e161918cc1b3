"""Tests for the bugs extractor."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from revindex.log.extractors.bugs import BugsExtractor, natural_key
from revindex.log.message_parser import LogMessageParser


@pytest.fixture
def bugs(
    bind_extractor: Callable[[Any], Any], commit_store: Any, make_commit: Callable[..., Any]
) -> BugsExtractor:
    extractor = bind_extractor(BugsExtractor(LogMessageParser(r"(JRA-\d+)")))
    commit_store.save(
        [
            make_commit(1, message="JRA-10 and JRA-9 fixed"),
            make_commit(2, message="no bug here"),
            make_commit(3, message="follow-up for JRA-10"),
        ]
    )
    extractor.process(1, 3)
    return extractor


class TestNaturalKey:
    def test_numbers_sort_numerically(self) -> None:
        assert sorted(["JRA-10", "JRA-9", "ABC-1"], key=natural_key) == ["ABC-1", "JRA-9", "JRA-10"]


class TestBugsExtractor:
    """Bug id indexing."""

    def test_given_message_with_bugs_when_get_data_then_sorted_ids(
        self, bugs: BugsExtractor
    ) -> None:
        assert bugs.get_revisions_data([1]) == {1: ["JRA-9", "JRA-10"]}

    def test_given_message_without_bugs_then_empty_payload(self, bugs: BugsExtractor) -> None:
        """No match indexes to an empty list, not an error."""
        assert bugs.get_revisions_data([2]) == {2: []}

    def test_given_bug_ids_when_find_then_returns_mentioning_revisions(
        self, bugs: BugsExtractor
    ) -> None:
        assert bugs.find(["JRA-10"]) == [1, 3]
        assert bugs.find(["JRA-9", "JRA-10"]) == [1, 3]
        assert bugs.find(["JRA-404"]) == []
        assert bugs.find([]) == []

    def test_given_no_logregex_when_processed_then_no_bugs(
        self, bind_extractor: Callable[[Any], Any], commit_store: Any, make_commit: Callable[..., Any]
    ) -> None:
        """Repositories without bugtraq:logregex index no bugs."""
        extractor = bind_extractor(BugsExtractor(LogMessageParser("")))
        commit_store.save([make_commit(1, message="JRA-1")])

        extractor.process(1, 1)

        assert extractor.get_revisions_data([1]) == {1: []}

    def test_given_range_reprocessed_then_output_unchanged(self, bugs: BugsExtractor) -> None:
        bugs.process(1, 3)
        assert bugs.find(["JRA-10"]) == [1, 3]
        assert bugs.get_revisions_data([1, 3]) == {1: ["JRA-9", "JRA-10"], 3: ["JRA-10"]}
