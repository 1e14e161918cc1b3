"""File-based storage for one cache entry."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any


class FileCacheStorage:
    """One JSON document per cache file.

    A missing or unreadable file reads as absent; writes replace the file
    atomically so a reader never sees half an entry.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        return self.path.exists()

    def size(self) -> int:
        return self.path.stat().st_size if self.path.exists() else 0

    def get(self) -> dict[str, Any] | None:
        try:
            with self.path.open(encoding="utf-8") as f:
                content = json.load(f)
        except (FileNotFoundError, json.JSONDecodeError, UnicodeDecodeError):
            return None
        return content if isinstance(content, dict) else None

    def set(self, content: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(content, f)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def invalidate(self) -> None:
        self.path.unlink(missing_ok=True)
