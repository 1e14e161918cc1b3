"""structlog setup for revindex.

Every event goes through the stdlib root logger so that one handler per
configured output (stderr, stdout or a log file) can pick its own renderer
and level. Console handlers go quiet while a progress bar is drawn.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from revindex.core.progress import ConsoleSuppressingFilter

if TYPE_CHECKING:
    from revindex.config.models import LoggingConfig, LogOutputConfig

_CONSOLE_DESTINATIONS = ("stderr", "stdout")

# Loggers of libraries that echo too much below WARNING
_NOISY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


def _level(name: str) -> int:
    return logging.getLevelNamesMapping().get(name.upper(), logging.INFO)


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
    ]


def _handler_for(output: LogOutputConfig, level: int) -> logging.Handler:
    console = output.destination in _CONSOLE_DESTINATIONS

    handler: logging.Handler
    if console:
        stream = sys.stderr if output.destination == "stderr" else sys.stdout
        handler = logging.StreamHandler(stream)
        handler.addFilter(ConsoleSuppressingFilter())
    else:
        log_file = Path(output.destination)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")

    renderer: structlog.types.Processor
    if output.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=console and sys.stderr.isatty(), pad_event_to=0, pad_level=False
        )

    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=_pre_chain())
    )
    handler.setLevel(_level(output.level) if output.level else level)
    return handler


def configure_logging(
    *,
    config: LoggingConfig | None = None,
    json_format: bool = False,
    level: str = "INFO",
) -> None:
    """Route structlog through stdlib logging.

    Without ``config`` a single stderr output is set up at ``level``, rendered
    as JSON when ``json_format`` is set. Safe to call more than once; each
    call replaces the previous handlers.
    """
    from revindex.config.models import LoggingConfig, LogOutputConfig

    if config is None:
        config = LoggingConfig(
            level=level.upper(),
            outputs=[LogOutputConfig(format="json" if json_format else "console")],
        )
    root_level = _level(config.level)

    structlog.configure(
        processors=[*_pre_chain(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()
    root.setLevel(root_level)
    for output in config.outputs:
        root.addHandler(_handler_for(output, root_level))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Logger bound to ``name`` (shown as ``logger=`` in every event)."""
    logger = structlog.get_logger()
    return logger.bind(logger=name) if name else logger  # type: ignore[no-any-return]
