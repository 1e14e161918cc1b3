"""Bug id extraction from commit messages (``bugtraq:logregex`` convention).

A one-line expression extracts ids directly: every non-empty capture group
of every match is an id. A two-line expression first finds bug mentions
with line one, then extracts ids from each mention with line two.
"""

from __future__ import annotations

import re


class LogMessageParser:
    def __init__(self, logregex: str = "") -> None:
        lines = [line.strip() for line in logregex.strip().splitlines() if line.strip()]
        self._mention_regex: re.Pattern[str] | None = None
        self._id_regex: re.Pattern[str] | None = None

        if len(lines) >= 2:
            self._mention_regex = re.compile(lines[0], re.IGNORECASE)
            self._id_regex = re.compile(lines[1], re.IGNORECASE)
        elif lines:
            self._id_regex = re.compile(lines[0], re.IGNORECASE)

    @property
    def enabled(self) -> bool:
        return self._id_regex is not None

    def parse(self, message: str) -> list[str]:
        """Bug ids in ``message``, deduplicated, in order of appearance."""
        if self._id_regex is None or not message:
            return []

        if self._mention_regex is not None:
            chunks = [m.group(0) for m in self._mention_regex.finditer(message)]
        else:
            chunks = [message]

        bugs: list[str] = []
        for chunk in chunks:
            for match in self._id_regex.finditer(chunk):
                found = [g for g in match.groups() if g] if match.groups() else [match.group(0)]
                for bug in found:
                    if bug not in bugs:
                        bugs.append(bug)
        return bugs
