"""Redis-backed response cache shared across gateway instances.

Entries are JSON-serialized ``CacheEntry`` values stored under
``esi:cache:<key>``. Expiry is delegated to Redis through ``SET ... PX``;
no client-side lock is held.
"""

from datetime import datetime, timedelta

import httpx
import redis
import structlog
from pydantic import ValidationError

from esigate.fetch.cache import (
    Clock,
    HeaderMap,
    apply_conditional_headers,
    build_entry,
    compute_expiry,
    entry_metadata,
    utc_now,
)
from esigate.fetch.constants import MIN_REDIS_TTL_SECONDS, REDIS_KEY_PREFIX
from esigate.fetch.errors import CacheBackendError
from esigate.fetch.models import CacheEntry, CacheMetadata
from esigate.fetch.redact import redact_token


logger = structlog.get_logger()


def redis_ttl_ms(expires: datetime, now: datetime) -> int:
    """Compute the Redis TTL for an entry.

    Args:
        expires: Entry expiry.
        now: Current time.

    Returns:
        TTL in milliseconds, never below the five-second floor.
    """
    ttl = max(expires - now, timedelta(seconds=MIN_REDIS_TTL_SECONDS))
    return int(ttl.total_seconds() * 1000)


class RedisCacheManager:
    """Cache backend storing entries in Redis."""

    def __init__(self, client: redis.Redis, clock: Clock = utc_now) -> None:
        """Initialize the Redis cache.

        Args:
            client: Connected synchronous Redis client.
            clock: Source of the current time.
        """
        self._redis = client
        self._clock = clock
        self._log = logger.bind(component="cache", backend="redis")

    @staticmethod
    def storage_key(key: str) -> str:
        """Namespace a cache key for Redis."""
        return f"{REDIS_KEY_PREFIX}{key}"

    def _load(self, key: str) -> CacheEntry | None:
        """Read and decode an entry regardless of expiry."""
        storage_key = self.storage_key(key)
        try:
            raw = self._redis.get(storage_key)
        except redis.RedisError as e:
            msg = f"Redis GET failed for {redact_token(key)}: {e}"
            raise CacheBackendError(msg, endpoint=redact_token(key)) from e
        if raw is None:
            return None
        try:
            return CacheEntry.model_validate_json(raw)
        except ValidationError as e:
            msg = f"Corrupt cache entry for {redact_token(key)}: {e}"
            raise CacheBackendError(msg, endpoint=redact_token(key)) from e

    def _store(self, key: str, entry: CacheEntry) -> None:
        """Write an entry with a TTL derived from its expiry."""
        ttl_ms = redis_ttl_ms(entry.expires, self._clock())
        payload = entry.model_dump_json(by_alias=True)
        try:
            self._redis.set(self.storage_key(key), payload, px=ttl_ms)
        except redis.RedisError as e:
            msg = f"Redis SET failed for {redact_token(key)}: {e}"
            raise CacheBackendError(msg, endpoint=redact_token(key)) from e
        self._log.debug("cache_set", key=redact_token(key), ttl_ms=ttl_ms)

    def _fresh_entry(self, key: str) -> CacheEntry | None:
        entry = self._load(key)
        if entry is None:
            return None
        if entry.expires < self._clock():
            try:
                self._redis.delete(self.storage_key(key))
            except redis.RedisError as e:
                msg = f"Redis DEL failed for {redact_token(key)}: {e}"
                raise CacheBackendError(msg, endpoint=redact_token(key)) from e
            return None
        return entry

    def get(self, key: str) -> bytes | None:
        entry = self._fresh_entry(key)
        return entry.data if entry is not None else None

    def get_with_expiry(self, key: str) -> tuple[bytes, datetime] | None:
        entry = self._fresh_entry(key)
        if entry is None:
            return None
        return entry.data, entry.expires

    def get_for_not_modified(self, key: str) -> bytes | None:
        entry = self._load(key)
        return entry.data if entry is not None else None

    def get_metadata(self, key: str) -> CacheMetadata | None:
        entry = self._load(key)
        return entry_metadata(entry) if entry is not None else None

    def set(self, key: str, data: bytes, headers: HeaderMap) -> None:
        self._store(key, build_entry(data, headers, self._clock()))

    def refresh_expiry(self, key: str, headers: HeaderMap) -> None:
        entry = self._load(key)
        if entry is None:
            return
        entry.expires = compute_expiry(headers, self._clock())
        self._store(key, entry)

    def set_conditional_headers(self, request: httpx.Request, key: str) -> None:
        entry = self._load(key)
        if entry is not None:
            apply_conditional_headers(request, entry)
