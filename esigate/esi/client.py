"""Top-level ESI client wiring every resource family together.

One ``EsiClient`` owns one ``httpx.Client``, one cache backend and one
error budget. Every family client shares them, so the budget reflects all
traffic the process sends upstream.
"""

from types import TracebackType

import httpx
import redis
import structlog

from esigate.esi.alliance import AllianceClient
from esigate.esi.assets import AssetsClient
from esigate.esi.character import CharacterClient
from esigate.esi.corporation import CorporationClient
from esigate.esi.killmails import KillmailClient
from esigate.esi.market import MarketClient
from esigate.esi.status import StatusClient
from esigate.esi.structures import StructuresClient
from esigate.esi.universe import UniverseClient
from esigate.fetch.budget import ErrorBudgetTracker
from esigate.fetch.cache import CacheManager, MemoryCacheManager
from esigate.fetch.client import UpstreamClient
from esigate.fetch.config import FetchConfig
from esigate.fetch.context import cancellable_sleep
from esigate.fetch.models import ErrorBudget
from esigate.fetch.redis_cache import RedisCacheManager
from esigate.fetch.retry import RetryClient, Sleeper
from esigate.settings.app import AppSettings


logger = structlog.get_logger()


class EsiClient:
    """Cache-aware, retrying client for every supported ESI family."""

    def __init__(
        self,
        config: FetchConfig | None = None,
        cache: CacheManager | None = None,
        *,
        budget: ErrorBudgetTracker | None = None,
        transport: httpx.BaseTransport | None = None,
        sleeper: Sleeper = cancellable_sleep,
    ) -> None:
        """Initialize the client.

        Args:
            config: Fetch configuration (defaults apply when omitted).
            cache: Cache backend; an in-memory cache when omitted.
            budget: Error budget tracker to share; a new one when omitted.
            transport: Custom httpx transport, e.g. ``httpx.MockTransport``.
            sleeper: Cancellable sleep used between retries.
        """
        self._config = config or FetchConfig()
        self._cache = cache if cache is not None else MemoryCacheManager()
        self._budget = budget or ErrorBudgetTracker(
            gate_threshold=self._config.budget_gate_threshold
        )
        self._http = httpx.Client(
            timeout=self._config.timeout_seconds,
            transport=transport,
        )
        self._retry = RetryClient(
            self._http,
            self._budget,
            enforce_error_budget=self._config.enforce_error_budget,
            budget_warning_threshold=self._config.budget_warning_threshold,
            sleeper=sleeper,
        )
        self._upstream = UpstreamClient(self._config, self._cache, self._retry)

        self.status = StatusClient(self._upstream)
        self.character = CharacterClient(self._upstream)
        self.corporation = CorporationClient(self._upstream)
        self.alliance = AllianceClient(self._upstream)
        self.killmails = KillmailClient(self._upstream)
        self.market = MarketClient(self._upstream)
        self.assets = AssetsClient(self._upstream)
        self.structures = StructuresClient(self._upstream)
        self.universe = UniverseClient(self._upstream)

        logger.info(
            "esi_client_initialized",
            base_url=self._config.base_url,
            cache_backend=type(self._cache).__name__,
            enforce_error_budget=self._config.enforce_error_budget,
        )

    @classmethod
    def with_redis(
        cls,
        redis_client: redis.Redis,
        config: FetchConfig | None = None,
        *,
        budget: ErrorBudgetTracker | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> "EsiClient":
        """Build a client whose cache is shared through Redis.

        Args:
            redis_client: Connected synchronous Redis client.
            config: Fetch configuration.
            budget: Error budget tracker to share.
            transport: Custom httpx transport.

        Returns:
            Client backed by ``RedisCacheManager``.
        """
        return cls(
            config,
            RedisCacheManager(redis_client),
            budget=budget,
            transport=transport,
        )

    @property
    def config(self) -> FetchConfig:
        """The fetch configuration."""
        return self._config

    @property
    def cache(self) -> CacheManager:
        """The response cache backend."""
        return self._cache

    @property
    def upstream(self) -> UpstreamClient:
        """The shared upstream accessor, for endpoints not wrapped here."""
        return self._upstream

    def get_error_limits(self) -> ErrorBudget:
        """Return a snapshot of the current error budget."""
        return self._budget.snapshot()

    def check_error_limits(self) -> None:
        """Raise if the error budget is nearly spent.

        Raises:
            ErrorBudgetExhaustedError: If fewer errors remain than the gate
                threshold allows.
        """
        self._budget.check()

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._http.close()

    def __enter__(self) -> "EsiClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


def build_client(settings: AppSettings) -> EsiClient:
    """Build a client from application settings.

    Args:
        settings: Loaded application settings.

    Returns:
        Client using the configured cache backend.
    """
    config = settings.to_fetch_config()
    if settings.cache_backend == "redis":
        return EsiClient.with_redis(redis.Redis.from_url(settings.redis_url), config)
    return EsiClient(config)
