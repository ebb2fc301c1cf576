"""structlog setup for the CLI. Everything is written to stderr; stdout carries tool JSON."""

from __future__ import annotations

import logging
import sys

import structlog
from structlog.types import Processor

_QUIET_LIBRARIES = ("httpx", "httpcore")


def _pre_chain() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def _route_stdlib(level: int, renderer: Processor) -> None:
    """Send stdlib records (httpx, httpcore) through the structlog renderer."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_pre_chain(),
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    # Per-request INFO lines from the HTTP stack only show up in DEBUG runs.
    library_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(library_level)


def configure_logging(log_level: str = "INFO", log_format: str = "console") -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR). Unknown names mean INFO.
        log_format: "json" for machine-readable lines, anything else for console output.
    """
    level = logging.getLevelNamesMapping().get(log_level.upper(), logging.INFO)
    renderer = _renderer(log_format)

    structlog.configure(
        processors=[*_pre_chain(), renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
    _route_stdlib(level, renderer)
