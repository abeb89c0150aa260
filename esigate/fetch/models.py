"""Data models for the ESI fetch layer."""

import base64
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Generic, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer


T = TypeVar("T")


def _decode_base64(value: Any) -> Any:
    if isinstance(value, str):
        return base64.b64decode(value)
    return value


# Raw bytes in Python, standard base64 in JSON
Base64Body = Annotated[
    bytes,
    BeforeValidator(_decode_base64),
    PlainSerializer(lambda v: base64.b64encode(v).decode("ascii"), when_used="json"),
]


class FetchErrorClass(str, Enum):
    """Classification of fetch errors for metrics and logging.

    - TRANSPORT: DNS, connection or timeout failure after all retries
    - RETRY_EXHAUSTED: 420/429/5xx still returned on the last attempt
    - HTTP_STATUS: Terminal upstream status (non-retryable 4xx and others)
    - NOT_MODIFIED_WITHOUT_CACHE: 304 received with no cached body
    - DECODE: Body did not match the expected response shape
    - ERROR_BUDGET: Advisory error-budget gate tripped
    - CANCELLED: Caller cancelled the request during backoff
    - MISSING_TOKEN: Authenticated endpoint called without a token
    - CACHE_BACKEND: Cache store failure or corrupt entry
    - INVALID_REQUEST: Request rejected locally before any I/O
    """

    TRANSPORT = "TRANSPORT"
    RETRY_EXHAUSTED = "RETRY_EXHAUSTED"
    HTTP_STATUS = "HTTP_STATUS"
    NOT_MODIFIED_WITHOUT_CACHE = "NOT_MODIFIED_WITHOUT_CACHE"
    DECODE = "DECODE"
    ERROR_BUDGET = "ERROR_BUDGET"
    CANCELLED = "CANCELLED"
    MISSING_TOKEN = "MISSING_TOKEN"
    CACHE_BACKEND = "CACHE_BACKEND"
    INVALID_REQUEST = "INVALID_REQUEST"


class CacheEntry(BaseModel):
    """A cached upstream response body with its validators.

    Serialized as ``{Data, ETag, LastModified, Expires}`` with a base64
    body, the layout every gateway instance sharing a Redis store reads.
    """

    model_config = ConfigDict(populate_by_name=True)

    data: Base64Body = Field(alias="Data")
    etag: str = Field(default="", alias="ETag")
    last_modified: str = Field(default="", alias="LastModified")
    expires: datetime = Field(alias="Expires")


class CacheMetadata(BaseModel):
    """Diagnostic view of a cache entry."""

    model_config = ConfigDict(frozen=True)

    expires_at: datetime
    etag: str = ""
    last_modified: str = ""
    cached: bool = True


class CacheInfo(BaseModel):
    """Freshness information attached to fetch results."""

    model_config = ConfigDict(frozen=True)

    cached: bool = False
    expires_at: datetime | None = None


class FetchResult(BaseModel, Generic[T]):
    """Typed upstream data plus its cache information."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    data: T
    cache: CacheInfo = Field(default_factory=CacheInfo)


class ErrorBudget(BaseModel):
    """Snapshot of the upstream error budget.

    Attributes:
        remain: Chargeable errors left in the current window.
        reset: When the upstream resets the window.
        window: Window length in seconds.
    """

    model_config = ConfigDict(frozen=True)

    remain: int = 0
    reset: datetime | None = None
    window: int = 0


@dataclass(frozen=True)
class RetryDecision:
    """Outcome of classifying a response status or transport error.

    Attributes:
        retry: Whether another attempt should be made.
        delay_seconds: How long to wait before that attempt.
    """

    retry: bool
    delay_seconds: float = 0.0

    @classmethod
    def terminal(cls) -> "RetryDecision":
        """Build a decision that stops retrying."""
        return cls(retry=False)

    @classmethod
    def after(cls, delay_seconds: float) -> "RetryDecision":
        """Build a decision that retries after a delay."""
        return cls(retry=True, delay_seconds=delay_seconds)
