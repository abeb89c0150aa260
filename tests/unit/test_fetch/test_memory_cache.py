"""Unit tests for the in-memory cache manager."""

from datetime import timedelta

import httpx
import pytest

from esigate.fetch.cache import MemoryCacheManager
from tests.helpers.time import FIXED_NOW, FakeClock


KEY = "https://esi.evetech.net/status/"
HEADERS = {
    "ETag": '"v1"',
    "Last-Modified": "Thu, 13 Jun 2024 11:00:00 GMT",
    "Cache-Control": "max-age=60",
}


@pytest.fixture
def clock() -> FakeClock:
    """Create a clock fixed at FIXED_NOW."""
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> MemoryCacheManager:
    """Create an empty memory cache on the fake clock."""
    return MemoryCacheManager(clock=clock)


class TestRoundTrip:
    """Tests for storing and reading entries."""

    def test_set_then_get(self, cache: MemoryCacheManager) -> None:
        """Test that a stored body reads back unchanged."""
        cache.set(KEY, b'{"players": 1}', HEADERS)

        assert cache.get(KEY) == b'{"players": 1}'

    def test_get_with_expiry(self, cache: MemoryCacheManager) -> None:
        """Test that the expiry follows max-age."""
        cache.set(KEY, b"body", HEADERS)

        result = cache.get_with_expiry(KEY)

        assert result == (b"body", FIXED_NOW + timedelta(seconds=60))

    def test_missing_key(self, cache: MemoryCacheManager) -> None:
        """Test that unknown keys miss."""
        assert cache.get(KEY) is None
        assert cache.get_with_expiry(KEY) is None
        assert cache.get_for_not_modified(KEY) is None
        assert cache.get_metadata(KEY) is None

    def test_set_replaces_entry(self, cache: MemoryCacheManager) -> None:
        """Test that a second set overwrites body and validators."""
        cache.set(KEY, b"old", HEADERS)
        cache.set(KEY, b"new", {"ETag": '"v2"'})

        metadata = cache.get_metadata(KEY)

        assert cache.get(KEY) == b"new"
        assert metadata is not None
        assert metadata.etag == '"v2"'
        assert metadata.last_modified == ""
        assert len(cache) == 1


class TestExpiry:
    """Tests for lazy expiry handling."""

    def test_expired_entry_misses(
        self, cache: MemoryCacheManager, clock: FakeClock
    ) -> None:
        """Test that an expired entry is not served as fresh."""
        cache.set(KEY, b"body", HEADERS)
        clock.advance(61)

        assert cache.get(KEY) is None
        assert cache.get_with_expiry(KEY) is None

    def test_expired_entry_kept_for_revalidation(
        self, cache: MemoryCacheManager, clock: FakeClock
    ) -> None:
        """Test that an expired body is still available after a 304."""
        cache.set(KEY, b"body", HEADERS)
        clock.advance(61)
        cache.get(KEY)

        assert cache.get_for_not_modified(KEY) == b"body"

    def test_expired_entry_without_validators_is_evicted(
        self, cache: MemoryCacheManager, clock: FakeClock
    ) -> None:
        """Test that reading an expired entry with no validators frees it."""
        for n in range(1000):
            cache.set(f"{KEY}?token=tok{n}", b"body", {})
        clock.advance(3600)

        results = [cache.get(f"{KEY}?token=tok{n}") for n in range(1000)]

        assert results == [None] * 1000
        assert len(cache) == 0
        assert cache.get_for_not_modified(f"{KEY}?token=tok0") is None

    def test_expired_entry_past_grace_is_evicted(
        self, cache: MemoryCacheManager, clock: FakeClock
    ) -> None:
        """Test that validators only keep an entry for the grace window."""
        cache.set(KEY, b"body", HEADERS)
        clock.advance(60 + 3601)

        assert cache.get_with_expiry(KEY) is None
        assert len(cache) == 0

    def test_custom_grace_window(self, clock: FakeClock) -> None:
        """Test that the grace window is configurable."""
        cache = MemoryCacheManager(clock=clock, grace=timedelta(seconds=10))
        cache.set(KEY, b"body", HEADERS)

        clock.advance(65)
        cache.get(KEY)
        assert len(cache) == 1

        clock.advance(10)
        cache.get(KEY)
        assert len(cache) == 0

    def test_refresh_expiry_moves_only_expiry(
        self, cache: MemoryCacheManager, clock: FakeClock
    ) -> None:
        """Test that refreshing keeps body and validators."""
        cache.set(KEY, b"body", HEADERS)
        clock.advance(61)

        cache.refresh_expiry(KEY, {"Cache-Control": "max-age=300"})

        metadata = cache.get_metadata(KEY)
        assert cache.get(KEY) == b"body"
        assert metadata is not None
        assert metadata.expires_at == clock.now + timedelta(seconds=300)
        assert metadata.etag == '"v1"'

    def test_refresh_expiry_missing_is_noop(self, cache: MemoryCacheManager) -> None:
        """Test that refreshing an unknown key does nothing."""
        cache.refresh_expiry(KEY, {"Cache-Control": "max-age=300"})

        assert cache.get_metadata(KEY) is None
        assert len(cache) == 0


class TestConditionalHeaders:
    """Tests for If-None-Match / If-Modified-Since propagation."""

    def test_sets_both_validators(self, cache: MemoryCacheManager) -> None:
        """Test that a cached entry's validators are sent."""
        cache.set(KEY, b"body", HEADERS)
        request = httpx.Request("GET", KEY)

        cache.set_conditional_headers(request, KEY)

        assert request.headers["If-None-Match"] == '"v1"'
        assert request.headers["If-Modified-Since"] == HEADERS["Last-Modified"]

    def test_expired_entry_still_sends_validators(
        self, cache: MemoryCacheManager, clock: FakeClock
    ) -> None:
        """Test that revalidation works after expiry."""
        cache.set(KEY, b"body", HEADERS)
        clock.advance(120)
        request = httpx.Request("GET", KEY)

        cache.set_conditional_headers(request, KEY)

        assert request.headers["If-None-Match"] == '"v1"'

    def test_no_entry_no_headers(self, cache: MemoryCacheManager) -> None:
        """Test that nothing is added without an entry."""
        request = httpx.Request("GET", KEY)

        cache.set_conditional_headers(request, KEY)

        assert "If-None-Match" not in request.headers
        assert "If-Modified-Since" not in request.headers

    def test_only_present_validators(self, cache: MemoryCacheManager) -> None:
        """Test that an empty Last-Modified is not sent."""
        cache.set(KEY, b"body", {"ETag": '"only-etag"'})
        request = httpx.Request("GET", KEY)

        cache.set_conditional_headers(request, KEY)

        assert request.headers["If-None-Match"] == '"only-etag"'
        assert "If-Modified-Since" not in request.headers
