"""Terminal feedback for long refreshes.

``status`` prints one styled line to stderr. ``batch_progress`` draws a
transient bar over revision batches when stderr is a terminal, muting
console log handlers while the bar is on screen (file outputs keep
logging).
"""

from __future__ import annotations

import logging
import sys
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager

import structlog
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TaskProgressColumn, TextColumn

logger = structlog.get_logger()

_console = Console(stderr=True)

_PREFIXES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
}

_live = threading.local()

RevisionBatch = tuple[int, int]


def is_console_suppressed() -> bool:
    return getattr(_live, "bar", False)


@contextmanager
def suppress_console_logs() -> Iterator[None]:
    previous = is_console_suppressed()
    _live.bar = True
    try:
        yield
    finally:
        _live.bar = previous


class ConsoleSuppressingFilter(logging.Filter):
    """Drops records while a progress bar owns the terminal."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: ARG002
        return not is_console_suppressed()


def _is_tty() -> bool:
    return sys.stderr.isatty()


def status(message: str, *, style: str = "info") -> None:
    """Print a status line to stderr, e.g. ``✓ Indexed up to r53``."""
    _console.print(f"{_PREFIXES.get(style, '')}{message}", highlight=False)
    logger.debug("status", message=message, style=style)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """``1 revision``, ``3 revisions``."""
    return f"{count} {singular if count == 1 else (plural or singular + 's')}"


def batch_progress(
    batches: Sequence[RevisionBatch],
    *,
    desc: str = "Indexing revisions",
    enabled: bool = True,
) -> Iterator[RevisionBatch]:
    """Yield inclusive ``(from, to)`` revision batches, advancing a bar by revisions."""
    total = sum(to_revision - from_revision + 1 for from_revision, to_revision in batches)

    if not (enabled and total and _is_tty()):
        yield from batches
        return

    columns = (
        TextColumn("  {task.description}"),
        BarColumn(bar_width=30, complete_style="cyan"),
        TaskProgressColumn(),
        MofNCompleteColumn(),
        TextColumn("revisions"),
    )
    with suppress_console_logs(), Progress(*columns, console=_console, transient=True) as bar:
        task = bar.add_task(desc, total=total)
        for from_revision, to_revision in batches:
            yield from_revision, to_revision
            bar.advance(task, to_revision - from_revision + 1)
