"""Commit data model shared by the log source, the engine and extractors.

Commits are immutable: once indexed they are never rewritten, only new
ones are appended.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from revindex.core.errors import RevisionLogError


class PathAction(str, Enum):
    """What a commit did to a path."""

    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"
    REPLACED = "R"

    @classmethod
    def parse(cls, value: str) -> PathAction:
        try:
            return cls(value)
        except ValueError:
            raise RevisionLogError.data_anomaly(
                f'unknown path action "{value}"', action=value
            ) from None


@dataclass(frozen=True, slots=True)
class PathChange:
    """One path touched by a commit. Copy fields are set only for copies."""

    action: PathAction
    path: str
    kind: str = ""
    copy_path: str | None = None
    copy_revision: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action.value,
            "path": self.path,
            "kind": self.kind,
            "copy_path": self.copy_path,
            "copy_revision": self.copy_revision,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PathChange:
        return cls(
            action=PathAction.parse(data["action"]),
            path=data["path"],
            kind=data.get("kind", ""),
            copy_path=data.get("copy_path"),
            copy_revision=data.get("copy_revision"),
        )


@dataclass(frozen=True, slots=True)
class Commit:
    """One revision of the repository.

    ``merged_revisions`` is the merge set the commit records for its merge
    target. It may be the full snapshot or only the new part; the merges
    extractor attributes only revisions not seen on that target before.
    """

    revision: int
    author: str
    date: datetime
    message: str
    paths: tuple[PathChange, ...] = ()
    merged_revisions: frozenset[int] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.revision < 1:
            raise RevisionLogError.data_anomaly(
                f"revision must be positive, got {self.revision}", revision=self.revision
            )
        if self.date.tzinfo is None:
            object.__setattr__(self, "date", self.date.replace(tzinfo=UTC))

    @property
    def timestamp(self) -> float:
        return self.date.timestamp()

    def to_dict(self) -> dict[str, Any]:
        return {
            "revision": self.revision,
            "author": self.author,
            "date": self.date.astimezone(UTC).isoformat(),
            "message": self.message,
            "paths": [p.to_dict() for p in self.paths],
            "merged_revisions": sorted(self.merged_revisions),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Commit:
        return cls(
            revision=int(data["revision"]),
            author=data.get("author", ""),
            date=datetime.fromisoformat(data["date"]),
            message=data.get("message", ""),
            paths=tuple(PathChange.from_dict(p) for p in data.get("paths", [])),
            merged_revisions=frozenset(int(r) for r in data.get("merged_revisions", [])),
        )
