"""Unit tests for status-differentiated backoff decisions."""

import httpx
import pytest

from esigate.fetch.retry import classify


class TestClassifyRetryable:
    """Tests for outcomes that are retried."""

    @pytest.mark.parametrize(
        ("attempt", "expected"),
        [(0, 1), (1, 2), (2, 4), (3, 8), (4, 10), (8, 10)],
    )
    def test_transport_error(self, attempt: int, expected: float) -> None:
        """Test transport backoff: 2^attempt seconds, capped at 10."""
        decision = classify(httpx.ConnectError("refused"), attempt)

        assert decision.retry is True
        assert decision.delay_seconds == expected

    @pytest.mark.parametrize(
        ("attempt", "expected"),
        [(0, 60), (1, 120), (2, 240), (3, 480), (4, 600), (6, 600)],
    )
    def test_error_limited_420(self, attempt: int, expected: float) -> None:
        """Test 420 backoff: 2^attempt minutes, capped at 10 minutes."""
        decision = classify(420, attempt)

        assert decision.retry is True
        assert decision.delay_seconds == expected

    @pytest.mark.parametrize(
        ("attempt", "expected"),
        [(0, 1), (1, 2), (2, 4), (4, 16), (5, 30), (9, 30)],
    )
    def test_server_error(self, attempt: int, expected: float) -> None:
        """Test 5xx backoff: 2^attempt seconds, capped at 30."""
        for status in (500, 502, 503, 504):
            decision = classify(status, attempt)

            assert decision.retry is True
            assert decision.delay_seconds == expected

    @pytest.mark.parametrize(
        ("attempt", "expected"),
        [(0, 1), (3, 8), (5, 32), (6, 60), (10, 60)],
    )
    def test_too_many_requests(self, attempt: int, expected: float) -> None:
        """Test 429 backoff: 2^attempt seconds, capped at 60."""
        decision = classify(429, attempt)

        assert decision.retry is True
        assert decision.delay_seconds == expected

    def test_420_backs_off_in_minutes_not_seconds(self) -> None:
        """Test that 420 waits far longer than 500 at the same attempt."""
        for attempt in range(3):
            limited = classify(420, attempt).delay_seconds
            server = classify(500, attempt).delay_seconds

            assert limited >= 60 * server


class TestClassifyTerminal:
    """Tests for outcomes that are returned to the caller."""

    @pytest.mark.parametrize("status", [200, 304, 400, 401, 403, 404, 422])
    def test_terminal(self, status: int) -> None:
        """Test that success, 304 and plain 4xx are never retried."""
        decision = classify(status, 0)

        assert decision.retry is False
        assert decision.delay_seconds == 0
