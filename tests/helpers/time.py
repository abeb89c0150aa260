"""Shared, deterministic timestamps for tests."""

from datetime import UTC, datetime, timedelta


# Fixed timestamp so cache expiry and TTL assertions are exact.
FIXED_NOW = datetime(2024, 6, 13, 12, 0, 0, tzinfo=UTC)


class FakeClock:
    """Manually advanced clock for cache managers."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        """Move the clock forward."""
        self.now += timedelta(seconds=seconds)
