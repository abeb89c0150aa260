"""Unit tests for structured logging configuration."""

import io
import json
import logging
from collections.abc import Generator

import pytest
import structlog

from esigate.fetch.context import AuthenticatedUser
from esigate.observability.logging import (
    bind_caller_context,
    clear_caller_context,
    configure_logging,
    get_logger,
)


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None]:
    """Restore structlog defaults after each test."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_output(self) -> None:
        """Test that events are rendered as JSON lines."""
        output = io.StringIO()
        configure_logging(output=output)

        get_logger("test").info("cache_hit", key="k")

        record = json.loads(output.getvalue().strip())
        assert record["event"] == "cache_hit"
        assert record["key"] == "k"
        assert record["level"] == "info"
        assert "timestamp" in record

    def test_level_filtering(self) -> None:
        """Test that events below the configured level are dropped."""
        output = io.StringIO()
        configure_logging(level=logging.WARNING, output=output)

        get_logger("test").info("dropped")
        get_logger("test").warning("kept")

        lines = output.getvalue().strip().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["event"] == "kept"


class TestCallerContext:
    """Tests for caller identity binding."""

    def test_bind_and_clear(self) -> None:
        """Test that caller fields appear until cleared."""
        output = io.StringIO()
        configure_logging(output=output)
        log = get_logger("test")

        bind_caller_context(
            AuthenticatedUser(user_id="u-1", character_id=7, character_name="Pilot")
        )
        log.info("with_caller")
        clear_caller_context()
        log.info("without_caller")

        first, second = (
            json.loads(line) for line in output.getvalue().strip().splitlines()
        )
        assert first["user_id"] == "u-1"
        assert first["character_id"] == 7
        assert first["character_name"] == "Pilot"
        assert "user_id" not in second
