"""Structured logging configuration."""

import logging
import sys
from typing import TextIO

import structlog

from esigate.fetch.context import AuthenticatedUser


_CALLER_KEYS = ("user_id", "character_id", "character_name")


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Configure structured logging for the gateway.

    JSON lines by default; a colored console renderer for local
    development.

    Args:
        level: Logging level (default: INFO).
        output: Output stream (default: stderr).
        json_format: Whether to use JSON format (default: True).
    """
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
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    # Route stdlib logging (httpx, redis) to the same stream
    logging.basicConfig(
        format="%(message)s",
        stream=output,
        level=level,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a bound logger instance.

    Args:
        name: Optional logger name.

    Returns:
        Bound logger instance.
    """
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger


def bind_caller_context(user: AuthenticatedUser) -> None:
    """Bind the caller identity to all subsequent log messages.

    Args:
        user: Authenticated caller on whose behalf upstream calls are made.
    """
    structlog.contextvars.bind_contextvars(
        user_id=user.user_id,
        character_id=user.character_id,
        character_name=user.character_name,
    )


def clear_caller_context() -> None:
    """Remove the caller identity from log messages."""
    structlog.contextvars.unbind_contextvars(*_CALLER_KEYS)
