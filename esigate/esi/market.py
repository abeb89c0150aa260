"""Market resources: regional orders, history, statistics and structure orders.

Order books are split across ``X-Pages`` pages. Without an explicit page
every page is fetched and concatenated; with one, only that page is
requested and cached under its own key.
"""

import datetime as dt
from typing import Any, Literal

from pydantic import BaseModel

from esigate.esi.base import ResourceClient
from esigate.fetch.client import Endpoint
from esigate.fetch.context import CallContext
from esigate.fetch.errors import InvalidRequestError
from esigate.fetch.models import FetchResult


OrderType = Literal["all", "buy", "sell"]


class MarketOrder(BaseModel):
    """An open buy or sell order."""

    order_id: int
    type_id: int
    location_id: int
    volume_total: int
    volume_remain: int
    min_volume: int = 1
    price: float
    is_buy_order: bool
    duration: int
    issued: dt.datetime
    range: str
    system_id: int | None = None


class MarketHistoryEntry(BaseModel):
    """One day of market activity for a type."""

    date: dt.date
    order_count: int
    volume: int
    highest: float
    average: float
    lowest: float


class MarketStats(BaseModel):
    """Aggregated order statistics for one type in a region."""

    type_id: int
    sell_order_count: int = 0
    sell_volume_remain: int = 0
    sell_orders_min: float = 0.0
    sell_orders_max: float = 0.0
    buy_order_count: int = 0
    buy_volume_remain: int = 0
    buy_orders_min: float = 0.0
    buy_orders_max: float = 0.0


MARKET_ORDERS: Endpoint[list[MarketOrder]] = Endpoint(
    "market_orders", "/markets/{region_id}/orders/", list[MarketOrder], paginated=True
)
MARKET_ORDERS_PAGE: Endpoint[list[MarketOrder]] = Endpoint(
    "market_orders_page", "/markets/{region_id}/orders/", list[MarketOrder]
)
MARKET_HISTORY: Endpoint[list[MarketHistoryEntry]] = Endpoint(
    "market_history", "/markets/{region_id}/history/", list[MarketHistoryEntry]
)
MARKET_STATS: Endpoint[list[MarketStats]] = Endpoint(
    "market_stats", "/markets/{region_id}/stats/", list[MarketStats]
)
MARKET_TYPES: Endpoint[list[int]] = Endpoint(
    "market_types", "/markets/{region_id}/types/", list[int], paginated=True
)
STRUCTURE_ORDERS: Endpoint[list[MarketOrder]] = Endpoint(
    "structure_orders",
    "/markets/structures/{structure_id}/",
    list[MarketOrder],
    requires_auth=True,
    paginated=True,
)
STRUCTURE_ORDERS_PAGE: Endpoint[list[MarketOrder]] = Endpoint(
    "structure_orders_page",
    "/markets/structures/{structure_id}/",
    list[MarketOrder],
    requires_auth=True,
)


def _select_pages(
    all_pages: Endpoint[list[MarketOrder]],
    single_page: Endpoint[list[MarketOrder]],
    page: int | None,
    query: dict[str, Any],
) -> tuple[Endpoint[list[MarketOrder]], dict[str, Any]]:
    """Pick the endpoint and query for an all-pages or single-page read.

    Raises:
        InvalidRequestError: If ``page`` is below 1.
    """
    if page is None:
        return all_pages, query
    if page < 1:
        raise InvalidRequestError(single_page.path, f"page must be >= 1, got {page}")
    return single_page, {**query, "page": page}


class MarketClient(ResourceClient):
    """Client for ``/markets/`` resources."""

    def get_market_orders(
        self,
        region_id: int,
        order_type: OrderType = "all",
        page: int | None = None,
        ctx: CallContext | None = None,
    ) -> list[MarketOrder]:
        """Get a region's market orders.

        Args:
            region_id: EVE region ID.
            order_type: Restrict to buy or sell orders.
            page: Single page to read; every page when omitted.
            ctx: Call context.

        Returns:
            Orders in upstream order.
        """
        return self.get_market_orders_with_cache(region_id, order_type, page, ctx).data

    def get_market_orders_with_cache(
        self,
        region_id: int,
        order_type: OrderType = "all",
        page: int | None = None,
        ctx: CallContext | None = None,
    ) -> FetchResult[list[MarketOrder]]:
        """Get a region's market orders with cache information."""
        query: dict[str, Any] = {}
        if order_type != "all":
            query["order_type"] = order_type
        endpoint, query = _select_pages(MARKET_ORDERS, MARKET_ORDERS_PAGE, page, query)
        return self._upstream.fetch(endpoint, ctx=ctx, query=query, region_id=region_id)

    def get_market_history(
        self, region_id: int, type_id: int, ctx: CallContext | None = None
    ) -> list[MarketHistoryEntry]:
        """Get a type's daily market history in a region."""
        return self.get_market_history_with_cache(region_id, type_id, ctx).data

    def get_market_history_with_cache(
        self, region_id: int, type_id: int, ctx: CallContext | None = None
    ) -> FetchResult[list[MarketHistoryEntry]]:
        """Get a type's daily market history with cache information."""
        return self._upstream.fetch(
            MARKET_HISTORY, ctx=ctx, query={"type_id": type_id}, region_id=region_id
        )

    def get_market_stats(
        self, region_id: int, ctx: CallContext | None = None
    ) -> list[MarketStats]:
        """Get per-type market statistics for a region."""
        return self._upstream.get(MARKET_STATS, ctx=ctx, region_id=region_id)

    def get_market_stats_with_cache(
        self, region_id: int, ctx: CallContext | None = None
    ) -> FetchResult[list[MarketStats]]:
        """Get per-type market statistics with cache information."""
        return self._upstream.fetch(MARKET_STATS, ctx=ctx, region_id=region_id)

    def get_market_types(
        self, region_id: int, ctx: CallContext | None = None
    ) -> list[int]:
        """List the type IDs with active orders in a region."""
        return self._upstream.get(MARKET_TYPES, ctx=ctx, region_id=region_id)

    def get_market_types_with_cache(
        self, region_id: int, ctx: CallContext | None = None
    ) -> FetchResult[list[int]]:
        """List active type IDs with cache information."""
        return self._upstream.fetch(MARKET_TYPES, ctx=ctx, region_id=region_id)

    def get_structure_orders(
        self,
        structure_id: int,
        token: str,
        page: int | None = None,
        ctx: CallContext | None = None,
    ) -> list[MarketOrder]:
        """Get the market orders in a player structure.

        Args:
            structure_id: Structure ID.
            token: Bearer token with structure market access.
            page: Single page to read; every page when omitted.
            ctx: Call context.

        Returns:
            Orders in upstream order.
        """
        return self.get_structure_orders_with_cache(structure_id, token, page, ctx).data

    def get_structure_orders_with_cache(
        self,
        structure_id: int,
        token: str,
        page: int | None = None,
        ctx: CallContext | None = None,
    ) -> FetchResult[list[MarketOrder]]:
        """Get a structure's market orders with cache information."""
        endpoint, query = _select_pages(
            STRUCTURE_ORDERS, STRUCTURE_ORDERS_PAGE, page, {}
        )
        return self._upstream.fetch(
            endpoint, token=token, ctx=ctx, query=query, structure_id=structure_id
        )
