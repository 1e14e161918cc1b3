"""Parsers for ``svn ... --xml`` output."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import UTC, datetime

from dateutil import parser as date_parser

from revindex.log.models import Commit, PathAction, PathChange
from revindex.svn.errors import UnexpectedOutputError

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


@dataclass(frozen=True)
class InfoEntry:
    """The parts of ``svn info --xml`` the indexer relies on."""

    path: str
    url: str
    root_url: str
    revision: int
    last_changed_revision: int


def _parse_xml(content: str) -> ET.Element:
    try:
        return ET.fromstring(content)
    except ET.ParseError as e:
        raise UnexpectedOutputError(str(e)) from e


def _parse_date(text: str | None) -> datetime:
    if not text:
        return _EPOCH
    parsed = date_parser.isoparse(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def parse_info_xml(content: str) -> InfoEntry:
    root = _parse_xml(content)
    entry = root.find("entry")
    if entry is None:
        raise UnexpectedOutputError('no "entry" element in "svn info" output')

    commit = entry.find("commit")
    wc_root = entry.findtext("wc-info/wcroot-abspath")
    return InfoEntry(
        path=wc_root or entry.get("path", ""),
        url=entry.findtext("url", ""),
        root_url=entry.findtext("repository/root", ""),
        revision=int(entry.get("revision", "0")),
        last_changed_revision=int(commit.get("revision", "0")) if commit is not None else 0,
    )


def _parse_paths(logentry: ET.Element) -> tuple[PathChange, ...]:
    changes = []
    for node in logentry.findall("paths/path"):
        copy_revision = node.get("copyfrom-rev")
        changes.append(
            PathChange(
                action=PathAction.parse(node.get("action", "")),
                path=(node.text or "").strip(),
                kind=node.get("kind", ""),
                copy_path=node.get("copyfrom-path"),
                copy_revision=int(copy_revision) if copy_revision else None,
            )
        )
    return tuple(changes)


def parse_log_entry(logentry: ET.Element) -> Commit:
    merged = frozenset(
        int(nested.get("revision", "0"))
        for nested in logentry.findall("logentry")
        if nested.get("reverse-merge") != "true"
    )
    return Commit(
        revision=int(logentry.get("revision", "0")),
        author=logentry.findtext("author", ""),
        date=_parse_date(logentry.findtext("date")),
        message=logentry.findtext("msg", ""),
        paths=_parse_paths(logentry),
        merged_revisions=merged,
    )


def parse_log_xml(content: str) -> list[Commit]:
    """Top-level log entries of ``svn log --xml --verbose --use-merge-history``.

    Nested entries (merged revisions) become ``Commit.merged_revisions``;
    reverse merges are skipped. Result is ordered by revision.
    """
    root = _parse_xml(content)
    if root.tag != "log":
        raise UnexpectedOutputError(f'expected "log" root element, got "{root.tag}"')
    commits = [parse_log_entry(entry) for entry in root.findall("logentry")]
    return sorted(commits, key=lambda c: c.revision)
