"""Repository path and URL helpers.

A project is the directory holding ``trunk``, ``branches``, ``tags`` and
``releases``; a ref is ``trunk`` or ``<branches|tags|releases>/<name>``.
"""

from __future__ import annotations

import re
from urllib.parse import urlparse

_REF_IN_PATH = re.compile(
    r"^(?P<project>.*?/)(?P<ref>trunk|(?:branches|tags|releases)/[^/]+)(?=/|$)"
)
_PROJECT_IN_URL = re.compile(r"^(?P<project>.*?)/(?:trunk|branches|tags|releases)(?=/|$)")


def is_url(path: str) -> bool:
    return "://" in path


def get_ref_by_path(path: str) -> str | None:
    """Ref of a repository path, e.g. ``branches/feature`` for ``/proj/branches/feature/a.txt``."""
    match = _REF_IN_PATH.match(path)
    return match.group("ref") if match else None


def get_project_path(path: str) -> str | None:
    """Project of a path, with trailing slash (``/proj/``), or None outside any ref."""
    match = _REF_IN_PATH.match(path)
    return match.group("project") if match else None


def get_ref_root(path: str) -> str | None:
    """Project plus ref without trailing slash, e.g. ``/proj/branches/feature``."""
    match = _REF_IN_PATH.match(path)
    return match.group("project") + match.group("ref") if match else None


def get_project_url(repository_url: str) -> str:
    """URL of the project containing ``repository_url`` (itself when no ref in it)."""
    match = _PROJECT_IN_URL.match(repository_url)
    return match.group("project") if match else repository_url.rstrip("/")


def get_path_from_url(url: str) -> str:
    """Repository-absolute path part of a URL (``/`` for the root)."""
    return urlparse(url).path or "/"


def normalize_scope(scope: str) -> str:
    """Directory scope with exactly one leading and trailing slash."""
    stripped = scope.strip("/")
    return f"/{stripped}/" if stripped else "/"


def relative_to_root(url: str, root_url: str) -> str:
    """Repository-absolute path of ``url`` inside the repository at ``root_url``."""
    root = root_url.rstrip("/")
    if url.rstrip("/") == root:
        return "/"
    if url.startswith(root + "/"):
        return url[len(root) :]
    return get_path_from_url(url)
