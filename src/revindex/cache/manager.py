"""Result cache for expensive remote queries.

Entries are addressed by ``namespace:key`` names and guarded by an
invalidator token and an optional expiration instant. A read with a
different invalidator, or after expiry, deletes the entry and reports a
miss; callers recompute and store again.

Durations are seconds (int, float rounded up, or numeric string) or symbolic
(``"1 year"``, ``"10 minutes"``). Symbolic durations are calendar-aware and
resolved against the clock when the entry is written.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import math
import re
import time
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import structlog
from dateutil.relativedelta import relativedelta

from revindex.cache.storage import FileCacheStorage
from revindex.config.constants import CACHE_FILE_SUFFIX, CACHE_KEY_SECRET
from revindex.core.errors import CacheError

logger = structlog.get_logger()

Duration = int | float | str | None

_SYMBOLIC_DURATION = re.compile(
    r"^\s*\+?\s*(?P<amount>\d+)\s*(?P<unit>second|sec|minute|min|hour|day|week|month|year)s?\s*$",
    re.IGNORECASE,
)

_UNIT_ALIASES = {
    "second": "seconds",
    "sec": "seconds",
    "minute": "minutes",
    "min": "minutes",
    "hour": "hours",
    "day": "days",
    "week": "weeks",
    "month": "months",
    "year": "years",
}


class CacheManager:
    """Cache entries stored as files in a working directory."""

    def __init__(self, working_directory: Path, clock: Callable[[], float] = time.time) -> None:
        self.working_directory = working_directory
        self._clock = clock

    def set(self, name: str, value: Any, invalidator: Any = None, duration: Duration = None) -> None:
        """Store ``value`` under ``name``; the entry expires ``duration`` from now."""
        seconds = self.duration_into_seconds(duration)
        storage = self._get_storage(name, duration)
        storage.set(
            {
                "name": name,
                "invalidator": invalidator,
                "duration": seconds,
                "expiration": self._clock() + seconds if seconds else None,
                "data": value,
            }
        )

    def get(self, name: str, invalidator: Any = None, duration: Duration = None) -> Any | None:
        """Return the cached value, or ``None`` when absent, stale or expired."""
        storage = self._get_storage(name, duration)
        entry = storage.get()

        if entry is None:
            logger.debug("cache_miss", name=name, file=storage.path.name)
            return None

        if entry.get("invalidator") != _normalize(invalidator):
            storage.invalidate()
            logger.debug("cache_invalidated", name=name, reason="invalidator")
            return None

        expiration = entry.get("expiration")
        if expiration and expiration <= self._clock():
            storage.invalidate()
            logger.debug("cache_invalidated", name=name, reason="expired")
            return None

        logger.debug("cache_hit", name=name, file=storage.path.name, size=storage.size())
        return entry.get("data")

    def delete(self, name: str, duration: Duration = None) -> None:
        self._get_storage(name, duration).invalidate()

    def remember(
        self,
        name: str,
        compute: Callable[[], Any],
        invalidator: Any = None,
        duration: Duration = None,
    ) -> Any:
        """Return the cached value, computing and storing it on a miss."""
        value = self.get(name, invalidator, duration)
        if value is None:
            value = compute()
            self.set(name, value, invalidator, duration)
        return value

    def clear(self, namespace: str | None = None) -> int:
        """Delete cache files (all, or one namespace); return how many."""
        if not self.working_directory.exists():
            return 0
        pattern = f"{namespace}_*{CACHE_FILE_SUFFIX}" if namespace else f"*{CACHE_FILE_SUFFIX}"
        removed = 0
        for path in self.working_directory.glob(pattern):
            path.unlink(missing_ok=True)
            removed += 1
        logger.info("cache_cleared", namespace=namespace, files=removed)
        return removed

    def duration_into_seconds(self, duration: Duration = None) -> int | None:
        """Convert a duration into seconds counted from now.

        ``None`` and ``""`` mean no expiration; ``0`` is kept as 0, which also
        stores no expiration.
        """
        if duration is None or duration == "":
            return None

        if isinstance(duration, bool):
            raise CacheError.invalid_duration(duration)

        if isinstance(duration, int | float):
            return _whole_seconds(duration)

        text = str(duration).strip()
        if text.isdigit():
            return int(text)

        match = _SYMBOLIC_DURATION.match(text)
        if match is None:
            raise CacheError.invalid_duration(duration)

        unit = _UNIT_ALIASES[match.group("unit").lower()]
        now = datetime.fromtimestamp(self._clock(), tz=UTC)
        later = now + relativedelta(**{unit: int(match.group("amount"))})
        return int((later - now).total_seconds())

    def _get_storage(self, name: str, duration: Duration = None) -> FileCacheStorage:
        namespace, sep, key = name.partition(":")
        if not sep or not namespace:
            raise CacheError.invalid_name(name)

        digest = hmac.new(CACHE_KEY_SECRET, key.encode("utf-8"), hashlib.sha1).hexdigest()[:8]
        filename = f"{namespace}_{digest}_D{_duration_label(duration)}{CACHE_FILE_SUFFIX}"
        return FileCacheStorage(self.working_directory / filename)


def _duration_label(duration: Duration) -> str:
    """Stable file name part for a duration, independent of the current date."""
    if duration is None or duration == "":
        return "INF"
    if isinstance(duration, int | float) and not isinstance(duration, bool):
        return str(_whole_seconds(duration))
    text = str(duration).strip()
    if text.isdigit():
        return text
    match = _SYMBOLIC_DURATION.match(text)
    if match is None:
        raise CacheError.invalid_duration(duration)
    return f"{int(match.group('amount'))}{_UNIT_ALIASES[match.group('unit').lower()]}"


def _whole_seconds(duration: int | float) -> int:
    """Whole seconds, rounded up."""
    if not math.isfinite(duration):
        raise CacheError.invalid_duration(duration)
    return math.ceil(duration)


def _normalize(value: Any) -> Any:
    """Round-trip through JSON so tuples compare equal to their stored lists."""
    return json.loads(json.dumps(value))
