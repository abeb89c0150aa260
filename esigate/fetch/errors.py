"""Exceptions raised by the ESI fetch layer.

Every error carries enough context (endpoint, status code, attempt count)
for callers to log it meaningfully. None of them is swallowed inside the
layer.
"""

from esigate.fetch.models import FetchErrorClass


class EsiError(Exception):
    """Base exception for all fetch layer errors."""

    error_class: FetchErrorClass = FetchErrorClass.HTTP_STATUS

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        attempts: int | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
            endpoint: Upstream URL or endpoint involved.
            status_code: HTTP status code if one was received.
            attempts: Number of attempts made.
        """
        self.endpoint = endpoint
        self.status_code = status_code
        self.attempts = attempts
        super().__init__(message)


class TransportError(EsiError):
    """Network-level failure that persisted through every retry."""

    error_class = FetchErrorClass.TRANSPORT

    def __init__(self, endpoint: str, attempts: int, reason: str) -> None:
        super().__init__(
            f"Request to {endpoint} failed after {attempts} attempts: {reason}",
            endpoint=endpoint,
            attempts=attempts,
        )


class RetryExhaustedError(EsiError):
    """Retryable status (420, 429, 5xx) still returned on the last attempt."""

    error_class = FetchErrorClass.RETRY_EXHAUSTED

    def __init__(self, endpoint: str, status_code: int, attempts: int) -> None:
        super().__init__(
            f"Request to {endpoint} failed with status {status_code} "
            f"after {attempts} attempts",
            endpoint=endpoint,
            status_code=status_code,
            attempts=attempts,
        )


class UpstreamStatusError(EsiError):
    """Terminal upstream status; never retried."""

    error_class = FetchErrorClass.HTTP_STATUS

    def __init__(self, endpoint: str, status_code: int) -> None:
        super().__init__(
            f"ESI returned status {status_code} for {endpoint}",
            endpoint=endpoint,
            status_code=status_code,
        )


class NotModifiedWithoutCacheError(EsiError):
    """Upstream answered 304 but no cached body exists for the key.

    Indicates a cache eviction race or a cache key mismatch. It is never
    treated as a fresh fetch.
    """

    error_class = FetchErrorClass.NOT_MODIFIED_WITHOUT_CACHE

    def __init__(self, endpoint: str) -> None:
        super().__init__(
            f"ESI returned 304 Not Modified but no cached data is available "
            f"for {endpoint}",
            endpoint=endpoint,
            status_code=304,
        )


class DecodeError(EsiError):
    """Response body did not match the expected shape."""

    error_class = FetchErrorClass.DECODE

    def __init__(self, endpoint: str, reason: str) -> None:
        super().__init__(
            f"Failed to parse response from {endpoint}: {reason}",
            endpoint=endpoint,
        )


class ErrorBudgetExhaustedError(EsiError):
    """The upstream error budget is nearly spent."""

    error_class = FetchErrorClass.ERROR_BUDGET

    def __init__(self, remain: int, reset: str) -> None:
        self.remain = remain
        super().__init__(
            f"Approaching ESI error limit: only {remain} errors remaining "
            f"until {reset}"
        )


class RequestCancelledError(EsiError):
    """The caller cancelled the request while it was waiting to retry."""

    error_class = FetchErrorClass.CANCELLED

    def __init__(self, endpoint: str | None = None) -> None:
        super().__init__(
            f"Request to {endpoint or 'ESI'} was cancelled",
            endpoint=endpoint,
        )


class MissingTokenError(EsiError):
    """An authenticated endpoint was called without a bearer token."""

    error_class = FetchErrorClass.MISSING_TOKEN

    def __init__(self, endpoint: str) -> None:
        super().__init__(
            f"Endpoint {endpoint} requires a bearer token",
            endpoint=endpoint,
        )


class CacheBackendError(EsiError):
    """Cache store failure or an unreadable stored entry."""

    error_class = FetchErrorClass.CACHE_BACKEND


class InvalidRequestError(EsiError):
    """Request rejected before any I/O, e.g. too many IDs in one call."""

    error_class = FetchErrorClass.INVALID_REQUEST

    def __init__(self, endpoint: str, reason: str) -> None:
        super().__init__(f"Invalid request to {endpoint}: {reason}", endpoint=endpoint)
