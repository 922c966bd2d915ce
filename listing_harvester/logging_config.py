"""Structured logging configuration."""

import logging
import sys
from typing import TextIO

import structlog


def configure_logging(
    level: str = "INFO",
    output: TextIO | None = None,
    json_format: bool = True,
) -> None:
    """Configure structlog for the harvester.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR).
        output: Output stream (default: the current sys.stderr).
        json_format: JSON lines when True, colored console output otherwise.
    """
    output = output or sys.stderr
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    # aiohttp and playwright log through the standard library
    logging.basicConfig(format="%(message)s", stream=output, level=numeric_level)
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    logger: structlog.typing.FilteringBoundLogger = structlog.get_logger(name)
    return logger


def bind_run_context(run_id: str) -> None:
    """Attach a run id to every log line emitted by the current task."""
    structlog.contextvars.bind_contextvars(run_id=run_id)


def clear_run_context() -> None:
    structlog.contextvars.unbind_contextvars("run_id")
