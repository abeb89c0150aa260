"""Asset resources.

Asset lists are paginated upstream; the accessors here return every page
concatenated. Only the first page is cached, so a cache hit returns that
page alone until it expires.
"""

from pydantic import BaseModel

from esigate.esi.base import ResourceClient
from esigate.fetch.client import Endpoint
from esigate.fetch.context import CallContext
from esigate.fetch.models import FetchResult


class Asset(BaseModel):
    """An item owned by a character or corporation."""

    item_id: int
    type_id: int
    location_id: int
    location_flag: str
    location_type: str | None = None
    quantity: int
    is_singleton: bool
    is_blueprint_copy: bool | None = None


CHARACTER_ASSETS: Endpoint[list[Asset]] = Endpoint(
    "character_assets",
    "/characters/{character_id}/assets/",
    list[Asset],
    requires_auth=True,
    paginated=True,
)
CORPORATION_ASSETS: Endpoint[list[Asset]] = Endpoint(
    "corporation_assets",
    "/corporations/{corporation_id}/assets/",
    list[Asset],
    requires_auth=True,
    paginated=True,
)


class AssetsClient(ResourceClient):
    """Client for character and corporation assets."""

    def get_character_assets(
        self, character_id: int, token: str, ctx: CallContext | None = None
    ) -> list[Asset]:
        """Get every asset a character owns, across all pages."""
        return self._upstream.get(
            CHARACTER_ASSETS, token=token, ctx=ctx, character_id=character_id
        )

    def get_character_assets_with_cache(
        self, character_id: int, token: str, ctx: CallContext | None = None
    ) -> FetchResult[list[Asset]]:
        """Get every asset a character owns with cache information."""
        return self._upstream.fetch(
            CHARACTER_ASSETS, token=token, ctx=ctx, character_id=character_id
        )

    def get_corporation_assets(
        self, corporation_id: int, token: str, ctx: CallContext | None = None
    ) -> list[Asset]:
        """Get every asset a corporation owns, across all pages."""
        return self._upstream.get(
            CORPORATION_ASSETS, token=token, ctx=ctx, corporation_id=corporation_id
        )

    def get_corporation_assets_with_cache(
        self, corporation_id: int, token: str, ctx: CallContext | None = None
    ) -> FetchResult[list[Asset]]:
        """Get every asset a corporation owns with cache information."""
        return self._upstream.fetch(
            CORPORATION_ASSETS, token=token, ctx=ctx, corporation_id=corporation_id
        )
