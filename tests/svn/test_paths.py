"""Tests for repository path helpers."""

import pytest

from revindex.svn.paths import (
    get_path_from_url,
    get_project_path,
    get_project_url,
    get_ref_by_path,
    get_ref_root,
    is_url,
    normalize_scope,
    relative_to_root,
)


class TestRefs:
    """Ref classification of repository paths."""

    @pytest.mark.parametrize(
        ("path", "ref", "project", "root"),
        [
            ("/proj/trunk/a.txt", "trunk", "/proj/", "/proj/trunk"),
            ("/proj/trunk", "trunk", "/proj/", "/proj/trunk"),
            ("/proj/branches/foo/x", "branches/foo", "/proj/", "/proj/branches/foo"),
            ("/proj/tags/bar/y", "tags/bar", "/proj/", "/proj/tags/bar"),
            ("/proj/releases/1.0", "releases/1.0", "/proj/", "/proj/releases/1.0"),
            ("/trunk/a", "trunk", "/", "/trunk"),
            ("/a/b/trunk/c", "trunk", "/a/b/", "/a/b/trunk"),
        ],
    )
    def test_classification(self, path: str, ref: str, project: str, root: str) -> None:
        assert get_ref_by_path(path) == ref
        assert get_project_path(path) == project
        assert get_ref_root(path) == root

    @pytest.mark.parametrize(
        "path", ["/README", "/proj/branches", "/proj/trunkish/a", "/proj/tags/"]
    )
    def test_paths_outside_refs(self, path: str) -> None:
        assert get_ref_by_path(path) is None
        assert get_project_path(path) is None
        assert get_ref_root(path) is None


class TestUrls:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("svn://host/repo/proj/trunk", "svn://host/repo/proj"),
            ("svn://host/repo/proj/branches/1.x/src", "svn://host/repo/proj"),
            ("svn://host/repo/proj/", "svn://host/repo/proj"),
        ],
    )
    def test_get_project_url(self, url: str, expected: str) -> None:
        assert get_project_url(url) == expected

    def test_is_url(self) -> None:
        assert is_url("https://host/repo")
        assert not is_url("/home/me/wc")

    def test_get_path_from_url(self) -> None:
        assert get_path_from_url("svn://host/repo/proj") == "/repo/proj"
        assert get_path_from_url("svn://host") == "/"

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("svn://host/repo", "/"),
            ("svn://host/repo/", "/"),
            ("svn://host/repo/proj/trunk", "/proj/trunk"),
        ],
    )
    def test_relative_to_root(self, url: str, expected: str) -> None:
        assert relative_to_root(url, "svn://host/repo") == expected

    @pytest.mark.parametrize(
        ("scope", "expected"), [("proj", "/proj/"), ("/proj", "/proj/"), ("/", "/"), ("", "/")]
    )
    def test_normalize_scope(self, scope: str, expected: str) -> None:
        assert normalize_scope(scope) == expected
