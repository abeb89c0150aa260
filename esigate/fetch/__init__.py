"""Resilient, cache-aware access to the ESI REST API.

This module provides:
- ETag/Last-Modified conditional requests backed by memory or Redis caches
- Status-differentiated exponential backoff for 420/429/5xx and network errors
- Shared tracking of the upstream error budget
- A generic typed fetch helper used by every resource family
"""

from esigate.fetch.budget import ErrorBudgetTracker
from esigate.fetch.cache import CacheManager, MemoryCacheManager, compute_expiry
from esigate.fetch.client import Endpoint, UpstreamClient
from esigate.fetch.config import FetchConfig
from esigate.fetch.context import AuthenticatedUser, CallContext, cancellable_sleep
from esigate.fetch.errors import (
    CacheBackendError,
    DecodeError,
    ErrorBudgetExhaustedError,
    EsiError,
    InvalidRequestError,
    MissingTokenError,
    NotModifiedWithoutCacheError,
    RequestCancelledError,
    RetryExhaustedError,
    TransportError,
    UpstreamStatusError,
)
from esigate.fetch.metrics import FetchMetrics
from esigate.fetch.models import (
    CacheEntry,
    CacheInfo,
    CacheMetadata,
    ErrorBudget,
    FetchErrorClass,
    FetchResult,
    RetryDecision,
)
from esigate.fetch.redact import redact_headers, redact_token
from esigate.fetch.redis_cache import RedisCacheManager
from esigate.fetch.retry import RetryClient, classify


__all__ = [
    # Client
    "Endpoint",
    "UpstreamClient",
    "RetryClient",
    "classify",
    # Cache
    "CacheManager",
    "MemoryCacheManager",
    "RedisCacheManager",
    "compute_expiry",
    # Budget
    "ErrorBudgetTracker",
    # Config and context
    "FetchConfig",
    "AuthenticatedUser",
    "CallContext",
    "cancellable_sleep",
    # Models
    "CacheEntry",
    "CacheInfo",
    "CacheMetadata",
    "ErrorBudget",
    "FetchErrorClass",
    "FetchResult",
    "RetryDecision",
    # Errors
    "EsiError",
    "TransportError",
    "RetryExhaustedError",
    "UpstreamStatusError",
    "NotModifiedWithoutCacheError",
    "DecodeError",
    "ErrorBudgetExhaustedError",
    "RequestCancelledError",
    "MissingTokenError",
    "CacheBackendError",
    "InvalidRequestError",
    # Metrics
    "FetchMetrics",
    # Redaction
    "redact_headers",
    "redact_token",
]
