"""Structured logging configuration.

Log records go through structlog and are handed to the stdlib ``logging``
machinery, which writes them to stderr so command output on stdout stays
clean.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

DEFAULT_LOG_LEVEL = "WARNING"


def _build_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _select_renderer(json_logs: bool) -> Processor:
    if json_logs:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level '{level}'")
    return resolved


def configure_logging(level: str | int = DEFAULT_LOG_LEVEL, json_logs: bool = False) -> None:
    """Configure structlog on top of a stderr stdlib handler.

    Args:
        level: Minimum level name or number (e.g. "INFO")
        json_logs: Render JSON lines instead of human-readable console output
    """
    numeric_level = _resolve_level(level)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=numeric_level,
        force=True,
    )

    structlog.configure(
        processors=_build_processors() + [_select_renderer(json_logs)],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None, **initial_values: Any) -> Any:
    """Get a structured logger."""
    return structlog.get_logger(name, **initial_values)
