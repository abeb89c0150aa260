"""Metrics collection for the ESI fetch layer."""

import threading
from dataclasses import dataclass, field
from typing import ClassVar

from esigate.fetch.models import FetchErrorClass


@dataclass
class FetchMetrics:
    """Metrics for upstream fetch operations.

    Singleton class that tracks request counts by status, cache hits,
    not-modified revalidations, retries and failures.
    """

    http_requests_total: dict[int, int] = field(default_factory=dict)
    http_cache_hits_total: int = 0
    http_not_modified_total: int = 0
    http_retry_total: int = 0
    http_failures_total: dict[str, int] = field(default_factory=dict)
    http_bytes_total: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    _instance: ClassVar["FetchMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "FetchMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_request(self, status_code: int) -> None:
        """Record an upstream response.

        Args:
            status_code: HTTP status code.
        """
        with self._lock:
            self.http_requests_total[status_code] = (
                self.http_requests_total.get(status_code, 0) + 1
            )

    def record_bytes(self, bytes_received: int) -> None:
        """Record body bytes received on a 200 response."""
        with self._lock:
            self.http_bytes_total += bytes_received

    def record_cache_hit(self) -> None:
        """Record a request served from a fresh cache entry."""
        with self._lock:
            self.http_cache_hits_total += 1

    def record_not_modified(self) -> None:
        """Record a 304 revalidation."""
        with self._lock:
            self.http_not_modified_total += 1

    def record_retry(self) -> None:
        """Record a retry attempt."""
        with self._lock:
            self.http_retry_total += 1

    def record_failure(self, error_class: FetchErrorClass) -> None:
        """Record a fetch failure.

        Args:
            error_class: Classification of the failure.
        """
        key = error_class.value
        with self._lock:
            self.http_failures_total[key] = self.http_failures_total.get(key, 0) + 1

    def to_dict(self) -> dict[str, int | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        with self._lock:
            return {
                "http_requests_total": dict(self.http_requests_total),
                "http_cache_hits_total": self.http_cache_hits_total,
                "http_not_modified_total": self.http_not_modified_total,
                "http_retry_total": self.http_retry_total,
                "http_failures_total": dict(self.http_failures_total),
                "http_bytes_total": self.http_bytes_total,
            }
