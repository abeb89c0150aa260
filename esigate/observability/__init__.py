"""Observability module for logging."""

from esigate.observability.logging import (
    bind_caller_context,
    clear_caller_context,
    configure_logging,
    get_logger,
)


__all__ = [
    "bind_caller_context",
    "clear_caller_context",
    "configure_logging",
    "get_logger",
]
