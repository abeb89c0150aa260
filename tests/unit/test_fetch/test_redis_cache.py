"""Unit tests for the Redis cache manager."""

import json
from datetime import timedelta

import pytest

from esigate.fetch.errors import CacheBackendError
from esigate.fetch.redis_cache import RedisCacheManager, redis_ttl_ms
from tests.helpers.fakes import FakeRedis
from tests.helpers.time import FIXED_NOW, FakeClock


KEY = "https://esi.evetech.net/alliances/99000001/"
STORAGE_KEY = f"esi:cache:{KEY}"


@pytest.fixture
def fake_redis() -> FakeRedis:
    """Create an empty fake Redis."""
    return FakeRedis()


@pytest.fixture
def clock() -> FakeClock:
    """Create a clock fixed at FIXED_NOW."""
    return FakeClock()


@pytest.fixture
def cache(fake_redis: FakeRedis, clock: FakeClock) -> RedisCacheManager:
    """Create a Redis cache over the fake client."""
    return RedisCacheManager(fake_redis, clock=clock)  # type: ignore[arg-type]


class TestRedisTtl:
    """Tests for TTL computation."""

    def test_ttl_follows_expiry(self) -> None:
        """Test that TTL is the distance to expiry."""
        assert redis_ttl_ms(FIXED_NOW + timedelta(seconds=120), FIXED_NOW) == 120_000

    def test_ttl_floor(self) -> None:
        """Test the five-second minimum."""
        assert redis_ttl_ms(FIXED_NOW + timedelta(seconds=1), FIXED_NOW) == 5_000
        assert redis_ttl_ms(FIXED_NOW - timedelta(seconds=30), FIXED_NOW) == 5_000


class TestRedisRoundTrip:
    """Tests for storing and reading entries."""

    def test_set_uses_prefix_and_ttl(
        self, cache: RedisCacheManager, fake_redis: FakeRedis
    ) -> None:
        """Test that max-age=120 produces a ~120 s TTL under the prefix."""
        cache.set(KEY, b'{"name": "Test Alliance"}', {"Cache-Control": "max-age=120"})

        assert STORAGE_KEY in fake_redis.store
        assert fake_redis.px[STORAGE_KEY] == 120_000

    def test_body_byte_identical(self, cache: RedisCacheManager) -> None:
        """Test that binary-unsafe bytes survive serialization."""
        body = b'{"name": "\xc3\xa9"}\x00\xff'
        cache.set(KEY, body, {"Cache-Control": "max-age=120"})

        assert cache.get(KEY) == body

    def test_stored_json_shape(
        self, cache: RedisCacheManager, fake_redis: FakeRedis
    ) -> None:
        """Test the field names shared with other gateway instances."""
        cache.set(KEY, b"{}", {"ETag": '"e"', "Cache-Control": "max-age=60"})

        stored = json.loads(fake_redis.store[STORAGE_KEY])

        assert set(stored) == {"Data", "ETag", "LastModified", "Expires"}
        assert stored["Data"] == "e30="
        assert stored["ETag"] == '"e"'

    def test_get_with_expiry(self, cache: RedisCacheManager) -> None:
        """Test that the expiry is returned with the body."""
        cache.set(KEY, b"body", {"Cache-Control": "max-age=120"})

        result = cache.get_with_expiry(KEY)

        assert result == (b"body", FIXED_NOW + timedelta(seconds=120))

    def test_missing_key(self, cache: RedisCacheManager) -> None:
        """Test that unknown keys miss."""
        assert cache.get(KEY) is None
        assert cache.get_for_not_modified(KEY) is None
        assert cache.get_metadata(KEY) is None


class TestRedisExpiry:
    """Tests for expiry and refresh."""

    def test_expired_entry_deleted_on_read(
        self, cache: RedisCacheManager, fake_redis: FakeRedis, clock: FakeClock
    ) -> None:
        """Test that a stale entry read back is removed."""
        cache.set(KEY, b"body", {"Cache-Control": "max-age=10"})
        clock.advance(11)

        assert cache.get(KEY) is None
        assert STORAGE_KEY in fake_redis.deleted
        assert STORAGE_KEY not in fake_redis.store

    def test_refresh_expiry_rewrites_ttl(
        self, cache: RedisCacheManager, fake_redis: FakeRedis, clock: FakeClock
    ) -> None:
        """Test that refreshing stores the new expiry and TTL."""
        cache.set(KEY, b"body", {"ETag": '"v1"', "Cache-Control": "max-age=10"})
        clock.advance(8)

        cache.refresh_expiry(KEY, {"Cache-Control": "max-age=300"})

        metadata = cache.get_metadata(KEY)
        assert metadata is not None
        assert metadata.expires_at == clock.now + timedelta(seconds=300)
        assert metadata.etag == '"v1"'
        assert fake_redis.px[STORAGE_KEY] == 300_000

    def test_refresh_expiry_missing_is_noop(
        self, cache: RedisCacheManager, fake_redis: FakeRedis
    ) -> None:
        """Test that refreshing an unknown key writes nothing."""
        cache.refresh_expiry(KEY, {"Cache-Control": "max-age=300"})

        assert fake_redis.store == {}


class TestRedisFailures:
    """Tests for backend error surfacing."""

    def test_connection_error(
        self, cache: RedisCacheManager, fake_redis: FakeRedis
    ) -> None:
        """Test that Redis errors become CacheBackendError."""
        fake_redis.fail = True

        with pytest.raises(CacheBackendError):
            cache.get(KEY)
        with pytest.raises(CacheBackendError):
            cache.set(KEY, b"body", {})

    def test_corrupt_entry(
        self, cache: RedisCacheManager, fake_redis: FakeRedis
    ) -> None:
        """Test that an undecodable entry is reported, not ignored."""
        fake_redis.store[STORAGE_KEY] = b"not json"

        with pytest.raises(CacheBackendError) as exc_info:
            cache.get(KEY)

        assert "Corrupt cache entry" in str(exc_info.value)
