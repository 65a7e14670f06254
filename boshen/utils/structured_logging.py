"""Structured logging for engine diagnostics.

Configures structlog on top of stdlib logging so that both module loggers
(``logging.getLogger(__name__)``) and structured event loggers write to the
same stream. JSON output is the default; console rendering is available for
interactive development.
"""
import logging
import sys
from typing import TextIO

import structlog


def configure_structured_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    stream: TextIO | None = None,
) -> None:
    """Configure structured logging for an embedding application or test run.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render JSON lines; False renders human-readable console output
        stream: Output stream (defaults to stdout)
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    output = stream or sys.stdout

    logging.basicConfig(format="%(message)s", stream=output, level=level, force=True)

    renderer = (
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        BoundLogger instance for key/value event logging
    """
    return structlog.get_logger(name)
