"""Response cache managers for conditional requests (ETag/Last-Modified).

Two interchangeable backends satisfy ``CacheManager``: the in-process
``MemoryCacheManager`` defined here and ``RedisCacheManager`` in
``esigate.fetch.redis_cache``. Both compute entry expiry with
``compute_expiry`` so they agree on how aggressively to re-fetch.
"""

import threading
from collections.abc import Callable, Mapping
from datetime import UTC, datetime, timedelta
from email.utils import parsedate_to_datetime
from typing import Protocol

import httpx
import structlog

from esigate.fetch.constants import DEFAULT_CACHE_SECONDS, EXPIRED_ENTRY_GRACE_SECONDS
from esigate.fetch.models import CacheEntry, CacheMetadata
from esigate.fetch.redact import redact_token


logger = structlog.get_logger()

Clock = Callable[[], datetime]
HeaderMap = Mapping[str, str] | httpx.Headers


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def parse_cache_control_max_age(cache_control: str) -> int:
    """Extract the max-age directive from a Cache-Control value.

    Deliberately simple: takes the text after ``max-age=`` up to the next
    comma.

    Args:
        cache_control: Raw Cache-Control header value.

    Returns:
        max-age in seconds, or 0 if absent or unparseable.
    """
    if "max-age=" not in cache_control:
        return 0
    raw = cache_control.split("max-age=", 1)[1].split(",", 1)[0].strip()
    try:
        return int(raw)
    except ValueError:
        return 0


def parse_expires(value: str) -> datetime | None:
    """Parse an Expires header in RFC 1123 form.

    Accepts both the named-zone (``GMT``) and numeric-offset variants.

    Args:
        value: Raw Expires header value.

    Returns:
        Aware datetime, or None if the value is not a valid date.
    """
    try:
        parsed = parsedate_to_datetime(value)
    except (ValueError, TypeError, IndexError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def compute_expiry(headers: HeaderMap, now: datetime) -> datetime:
    """Compute when a cached response expires.

    Precedence: a parseable ``Expires`` header, then ``Cache-Control:
    max-age``, then a short default.

    Args:
        headers: Response headers.
        now: Current time.

    Returns:
        Expiry instant.
    """
    normalized = httpx.Headers(headers)

    expires = normalized.get("Expires")
    if expires:
        parsed = parse_expires(expires)
        if parsed is not None:
            return parsed

    cache_control = normalized.get("Cache-Control")
    if cache_control:
        max_age = parse_cache_control_max_age(cache_control)
        if max_age > 0:
            return now + timedelta(seconds=max_age)

    return now + timedelta(seconds=DEFAULT_CACHE_SECONDS)


def build_entry(data: bytes, headers: HeaderMap, now: datetime) -> CacheEntry:
    """Build a cache entry from a response body and its headers.

    Args:
        data: Response body.
        headers: Response headers.
        now: Current time.

    Returns:
        New cache entry.
    """
    normalized = httpx.Headers(headers)
    return CacheEntry(
        data=data,
        etag=normalized.get("ETag", ""),
        last_modified=normalized.get("Last-Modified", ""),
        expires=compute_expiry(normalized, now),
    )


def apply_conditional_headers(request: httpx.Request, entry: CacheEntry) -> None:
    """Copy an entry's validators onto a request.

    Args:
        request: Outgoing request.
        entry: Cached entry holding ETag/Last-Modified.
    """
    if entry.etag:
        request.headers["If-None-Match"] = entry.etag
    if entry.last_modified:
        request.headers["If-Modified-Since"] = entry.last_modified


def entry_metadata(entry: CacheEntry) -> CacheMetadata:
    """Describe an entry for cache-info surfacing."""
    return CacheMetadata(
        expires_at=entry.expires,
        etag=entry.etag,
        last_modified=entry.last_modified,
        cached=True,
    )


class CacheManager(Protocol):
    """Protocol for response cache backends.

    Implementations must behave identically; the backend is chosen once
    when the client is constructed.
    """

    def get(self, key: str) -> bytes | None:
        """Return the cached body if present and not expired."""
        ...

    def get_with_expiry(self, key: str) -> tuple[bytes, datetime] | None:
        """Return the cached body and its expiry if present and not expired."""
        ...

    def get_for_not_modified(self, key: str) -> bytes | None:
        """Return the cached body regardless of expiry.

        Only valid after the upstream confirmed the body with a 304.
        """
        ...

    def get_metadata(self, key: str) -> CacheMetadata | None:
        """Return diagnostic metadata for an entry."""
        ...

    def set(self, key: str, data: bytes, headers: HeaderMap) -> None:
        """Store a body with its validators and computed expiry."""
        ...

    def refresh_expiry(self, key: str, headers: HeaderMap) -> None:
        """Move an entry's expiry forward without touching its body."""
        ...

    def set_conditional_headers(self, request: httpx.Request, key: str) -> None:
        """Add If-None-Match/If-Modified-Since for a cached entry."""
        ...


class MemoryCacheManager:
    """In-process cache backend.

    A single dict guarded by one lock. Expiry is checked lazily on read.
    An expired entry that carries an ETag or Last-Modified stays in place
    for up to ``grace`` so its validators can still be sent with the next
    conditional request; any other expired entry is deleted by the read
    that finds it. There is no background sweeper.
    """

    def __init__(
        self,
        clock: Clock = utc_now,
        grace: timedelta = timedelta(seconds=EXPIRED_ENTRY_GRACE_SECONDS),
    ) -> None:
        """Initialize the memory cache.

        Args:
            clock: Source of the current time.
            grace: How long an expired entry with validators is kept for
                revalidation.
        """
        self._entries: dict[str, CacheEntry] = {}
        self._grace = grace
        self._lock = threading.Lock()
        self._clock = clock
        self._log = logger.bind(component="cache", backend="memory")

    def _fresh_entry(self, key: str) -> CacheEntry | None:
        """Look up an unexpired entry. Must be called while holding the lock."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        now = self._clock()
        if entry.expires >= now:
            return entry
        revalidatable = bool(entry.etag or entry.last_modified)
        if not revalidatable or now - entry.expires > self._grace:
            del self._entries[key]
        return None

    def get(self, key: str) -> bytes | None:
        with self._lock:
            entry = self._fresh_entry(key)
            return entry.data if entry is not None else None

    def get_with_expiry(self, key: str) -> tuple[bytes, datetime] | None:
        with self._lock:
            entry = self._fresh_entry(key)
            if entry is None:
                return None
            return entry.data, entry.expires

    def get_for_not_modified(self, key: str) -> bytes | None:
        with self._lock:
            entry = self._entries.get(key)
            return entry.data if entry is not None else None

    def get_metadata(self, key: str) -> CacheMetadata | None:
        with self._lock:
            entry = self._entries.get(key)
            return entry_metadata(entry) if entry is not None else None

    def set(self, key: str, data: bytes, headers: HeaderMap) -> None:
        entry = build_entry(data, headers, self._clock())
        with self._lock:
            self._entries[key] = entry
        self._log.debug(
            "cache_set",
            key=redact_token(key),
            expires=entry.expires.isoformat(),
            has_etag=bool(entry.etag),
        )

    def refresh_expiry(self, key: str, headers: HeaderMap) -> None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return
            entry.expires = compute_expiry(headers, self._clock())
        self._log.debug(
            "cache_refreshed",
            key=redact_token(key),
            expires=entry.expires.isoformat(),
        )

    def set_conditional_headers(self, request: httpx.Request, key: str) -> None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return
            apply_conditional_headers(request, entry)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
