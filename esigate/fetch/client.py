"""Generic cache-aware upstream accessor.

Every ESI resource family is served by the same template: a fresh cache
hit short-circuits the request; otherwise a conditional GET is sent
through the retry client and the outcome is interpreted here (304
revalidates the cached body, 200 replaces it, anything else is an error).
Resources are described declaratively with ``Endpoint``.
"""

import functools
import hashlib
import json
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from esigate.fetch.cache import CacheManager
from esigate.fetch.config import FetchConfig
from esigate.fetch.constants import (
    HEADER_PAGES,
    HTTP_STATUS_NOT_MODIFIED,
    HTTP_STATUS_OK,
)
from esigate.fetch.context import CallContext
from esigate.fetch.errors import (
    DecodeError,
    MissingTokenError,
    NotModifiedWithoutCacheError,
    UpstreamStatusError,
)
from esigate.fetch.metrics import FetchMetrics
from esigate.fetch.models import CacheInfo, FetchErrorClass, FetchResult
from esigate.fetch.redact import redact_token, token_fingerprint
from esigate.fetch.retry import RetryClient


logger = structlog.get_logger()

T = TypeVar("T")


@functools.cache
def _type_adapter(response_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(response_type)


@dataclass(frozen=True)
class Endpoint(Generic[T]):
    """Declarative description of one upstream resource.

    Attributes:
        name: Short name used in logs.
        path: Path template, e.g. ``/corporations/{corporation_id}/``.
        response_type: Type the JSON body decodes into.
        requires_auth: Whether a bearer token must be sent.
        paginated: Whether the resource is split across ``X-Pages`` pages.
    """

    name: str
    path: str
    response_type: Any
    requires_auth: bool = False
    paginated: bool = False

    def format_path(self, **params: Any) -> str:
        """Fill the path template with parameters."""
        return self.path.format(**params)

    def decode(self, body: bytes, url: str) -> T:
        """Decode a JSON body into the response type.

        Args:
            body: Raw response body.
            url: URL the body came from, for error context.

        Returns:
            Decoded value.

        Raises:
            DecodeError: If the body does not match the response type.
        """
        try:
            value: T = _type_adapter(self.response_type).validate_json(body)
        except ValidationError as e:
            raise DecodeError(url, str(e)) from e
        return value


class UpstreamClient:
    """Composes a cache manager and a retry client into typed fetches."""

    def __init__(
        self,
        config: FetchConfig,
        cache: CacheManager,
        retry_client: RetryClient,
    ) -> None:
        """Initialize the upstream client.

        Args:
            config: Fetch configuration.
            cache: Response cache backend.
            retry_client: Retry client sharing the process error budget.
        """
        self._config = config
        self._cache = cache
        self._retry = retry_client
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component="esi")

    @property
    def config(self) -> FetchConfig:
        """The fetch configuration."""
        return self._config

    @property
    def cache(self) -> CacheManager:
        """The response cache backend."""
        return self._cache

    def build_url(self, path: str, query: Mapping[str, Any] | None = None) -> str:
        """Build an absolute URL from a formatted path and query parameters."""
        url = f"{self._config.base_url}{path}"
        if not query:
            return url
        return str(httpx.URL(url, params=dict(query)))

    def cache_key(
        self,
        path: str,
        token: str | None = None,
        query: Mapping[str, Any] | None = None,
    ) -> str:
        """Build the cache key for a resource.

        Authenticated resources are keyed per credential so one caller can
        never be served another caller's data.

        Args:
            path: Formatted endpoint path.
            token: Bearer token for authenticated resources.
            query: Query parameters that select the resource.

        Returns:
            Cache key.
        """
        key = self.build_url(path, query)
        if token is None:
            return key
        if self._config.hash_tokens_in_cache_keys:
            token = token_fingerprint(token)
        separator = "&" if "?" in key else "?"
        return f"{key}{separator}token={token}"

    def build_request(
        self,
        method: str,
        url: str,
        token: str | None = None,
        json_body: Any = None,
    ) -> httpx.Request:
        """Build a request carrying the compliance headers.

        Args:
            method: HTTP method.
            url: Absolute URL.
            token: Bearer token, if the endpoint is authenticated.
            json_body: JSON payload for POST requests.

        Returns:
            Request ready for the retry client.
        """
        headers = {
            "User-Agent": self._config.user_agent,
            "Accept": "application/json",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return httpx.Request(method, url, headers=headers, json=json_body)

    def get(
        self,
        endpoint: Endpoint[T],
        *,
        token: str | None = None,
        ctx: CallContext | None = None,
        query: Mapping[str, Any] | None = None,
        **params: Any,
    ) -> T:
        """Fetch a resource and return only its data."""
        return self.fetch(endpoint, token=token, ctx=ctx, query=query, **params).data

    def fetch(
        self,
        endpoint: Endpoint[T],
        *,
        token: str | None = None,
        ctx: CallContext | None = None,
        query: Mapping[str, Any] | None = None,
        **params: Any,
    ) -> FetchResult[T]:
        """Fetch a resource through the cache.

        Args:
            endpoint: Resource description.
            token: Bearer token for authenticated endpoints.
            ctx: Call context for cancellation and caller identity.
            query: Query parameters; part of the cache key.
            **params: Values for the path template.

        Returns:
            Decoded data with cache information.

        Raises:
            MissingTokenError: Authenticated endpoint called without token.
            NotModifiedWithoutCacheError: 304 without a cached body.
            UpstreamStatusError: Terminal upstream status.
            DecodeError: Body did not match the response type.
        """
        start_time_ns = time.perf_counter_ns()
        path = endpoint.format_path(**params)
        url = self.build_url(path, query)
        if endpoint.requires_auth and not token:
            self._metrics.record_failure(FetchErrorClass.MISSING_TOKEN)
            raise MissingTokenError(url)

        key = self.cache_key(path, token if endpoint.requires_auth else None, query)
        log = self._log.bind(endpoint=endpoint.name, url=url)

        cached = self._cached_result(endpoint, key, url, log)
        if cached is not None:
            return cached

        if endpoint.paginated:
            result = self._fetch_pages(endpoint, url, key, token, ctx)
        else:
            request = self.build_request("GET", url, token)
            result = self._fetch_conditional(endpoint, request, key, ctx, log)

        self._log_complete(log, result, start_time_ns)
        return result

    def post(
        self,
        endpoint: Endpoint[T],
        payload: Any,
        *,
        ctx: CallContext | None = None,
        **params: Any,
    ) -> T:
        """Send an uncached POST and decode the response.

        Args:
            endpoint: Resource description.
            payload: JSON request body.
            ctx: Call context for cancellation and caller identity.
            **params: Values for the path template.

        Returns:
            Decoded data.
        """
        url = self.build_url(endpoint.format_path(**params))
        request = self.build_request("POST", url, json_body=payload)
        response = self._retry.do_with_retry(request, self._config.max_retries, ctx)
        try:
            if response.status_code != HTTP_STATUS_OK:
                self._metrics.record_failure(FetchErrorClass.HTTP_STATUS)
                raise UpstreamStatusError(url, response.status_code)
            body = response.content
        finally:
            response.close()
        self._metrics.record_bytes(len(body))
        return endpoint.decode(body, url)

    def post_with_cache(
        self,
        endpoint: Endpoint[T],
        payload: Any,
        *,
        ctx: CallContext | None = None,
        **params: Any,
    ) -> FetchResult[T]:
        """Send a POST whose response is cached per request body.

        The cache key is the URL plus a digest of the JSON payload, so the
        same body is served from cache and revalidated like a GET.

        Args:
            endpoint: Resource description.
            payload: JSON request body.
            ctx: Call context for cancellation and caller identity.
            **params: Values for the path template.

        Returns:
            Decoded data with cache information.
        """
        start_time_ns = time.perf_counter_ns()
        path = endpoint.format_path(**params)
        url = self.build_url(path)
        encoded = json.dumps(payload, separators=(",", ":")).encode("utf-8")
        key = f"{self.cache_key(path)}#{hashlib.sha256(encoded).hexdigest()}"
        log = self._log.bind(endpoint=endpoint.name, url=url)

        cached = self._cached_result(endpoint, key, url, log)
        if cached is not None:
            return cached

        request = self.build_request("POST", url, json_body=payload)
        result = self._fetch_conditional(endpoint, request, key, ctx, log)
        self._log_complete(log, result, start_time_ns)
        return result

    def _cached_result(
        self,
        endpoint: Endpoint[T],
        key: str,
        url: str,
        log: structlog.stdlib.BoundLogger,
    ) -> FetchResult[T] | None:
        """Serve a fresh cache entry, or None when a request is needed."""
        cached = self._cache.get_with_expiry(key)
        if cached is None:
            return None
        body, expires_at = cached
        try:
            data = endpoint.decode(body, url)
        except DecodeError as e:
            log.warning("cached_body_invalid", error=str(e))
            return None
        self._metrics.record_cache_hit()
        log.debug("cache_hit", expires_at=expires_at.isoformat())
        return FetchResult(
            data=data, cache=CacheInfo(cached=True, expires_at=expires_at)
        )

    def _cache_info(self, key: str, cached: bool) -> CacheInfo:
        metadata = self._cache.get_metadata(key)
        return CacheInfo(
            cached=cached, expires_at=metadata.expires_at if metadata else None
        )

    @staticmethod
    def _log_complete(
        log: structlog.stdlib.BoundLogger,
        result: FetchResult[Any],
        start_time_ns: int,
    ) -> None:
        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        log.info(
            "fetch_complete",
            cached=result.cache.cached,
            duration_ms=round(duration_ms, 2),
        )

    def _fetch_conditional(
        self,
        endpoint: Endpoint[T],
        request: httpx.Request,
        key: str,
        ctx: CallContext | None,
        log: structlog.stdlib.BoundLogger,
    ) -> FetchResult[T]:
        """Send a conditional request and interpret the response."""
        url = str(request.url)
        self._cache.set_conditional_headers(request, key)

        response = self._retry.do_with_retry(request, self._config.max_retries, ctx)
        try:
            status = response.status_code

            if status == HTTP_STATUS_NOT_MODIFIED:
                self._metrics.record_not_modified()
                body = self._cache.get_for_not_modified(key)
                if body is None:
                    self._metrics.record_failure(
                        FetchErrorClass.NOT_MODIFIED_WITHOUT_CACHE
                    )
                    log.warning("not_modified_without_cache", key=redact_token(key))
                    raise NotModifiedWithoutCacheError(url)
                self._cache.refresh_expiry(key, response.headers)
                data = endpoint.decode(body, url)
                return FetchResult(data=data, cache=self._cache_info(key, cached=True))

            if status != HTTP_STATUS_OK:
                self._metrics.record_failure(FetchErrorClass.HTTP_STATUS)
                log.error("upstream_error_status", status_code=status)
                raise UpstreamStatusError(url, status)

            body = response.content
            headers = response.headers
        finally:
            response.close()

        self._metrics.record_bytes(len(body))
        self._cache.set(key, body, headers)
        data = endpoint.decode(body, url)
        return FetchResult(data=data, cache=self._cache_info(key, cached=False))

    def _fetch_pages(
        self,
        endpoint: Endpoint[T],
        url: str,
        key: str,
        token: str | None,
        ctx: CallContext | None,
    ) -> FetchResult[T]:
        """Fetch every ``X-Pages`` page and concatenate the results.

        Only the first page is written to the cache, so a later cache hit
        returns page one alone.
        """
        items: list[Any] = []
        info = CacheInfo()
        page = 1

        while True:
            if page == 1:
                page_url = url
            else:
                page_url = str(httpx.URL(url).copy_merge_params({"page": page}))
            request = self.build_request("GET", page_url, token)
            response = self._retry.do_with_retry(
                request, self._config.max_retries, ctx
            )
            try:
                if response.status_code != HTTP_STATUS_OK:
                    self._metrics.record_failure(FetchErrorClass.HTTP_STATUS)
                    raise UpstreamStatusError(page_url, response.status_code)
                total_pages = _parse_pages(response.headers.get(HEADER_PAGES))
                body = response.content
                headers = response.headers
            finally:
                response.close()

            self._metrics.record_bytes(len(body))
            page_items = endpoint.decode(body, page_url)
            if page == 1:
                self._cache.set(key, body, headers)
                info = self._cache_info(key, cached=False)
            items.extend(page_items)  # type: ignore[call-overload]

            if page >= total_pages or not page_items:
                break
            page += 1

        data: T = items  # type: ignore[assignment]
        return FetchResult(data=data, cache=info)


def _parse_pages(value: str | None) -> int:
    if not value:
        return 1
    try:
        return int(value)
    except ValueError:
        return 1
