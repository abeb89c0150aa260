"""Structure resources."""

from datetime import datetime

from pydantic import BaseModel

from esigate.esi.base import ResourceClient
from esigate.esi.killmails import Position
from esigate.fetch.client import Endpoint
from esigate.fetch.context import CallContext
from esigate.fetch.models import FetchResult


class StructureInfo(BaseModel):
    """A player-owned structure the token's character has docking access to."""

    name: str
    owner_id: int
    solar_system_id: int
    type_id: int | None = None
    position: Position | None = None
    services: list[str] = []
    state: str | None = None
    state_timer_start: datetime | None = None
    state_timer_end: datetime | None = None
    fuel_expires: datetime | None = None
    unanchors_at: datetime | None = None


STRUCTURE_INFO: Endpoint[StructureInfo] = Endpoint(
    "structure_info",
    "/universe/structures/{structure_id}/",
    StructureInfo,
    requires_auth=True,
)


class StructuresClient(ResourceClient):
    """Client for ``/universe/structures/`` resources."""

    def get_structure(
        self, structure_id: int, token: str, ctx: CallContext | None = None
    ) -> StructureInfo:
        """Get information about a structure.

        Args:
            structure_id: Structure ID.
            token: Token of a character with access to the structure.
            ctx: Call context.

        Returns:
            Structure information.
        """
        return self._upstream.get(
            STRUCTURE_INFO, token=token, ctx=ctx, structure_id=structure_id
        )

    def get_structure_with_cache(
        self, structure_id: int, token: str, ctx: CallContext | None = None
    ) -> FetchResult[StructureInfo]:
        """Get information about a player structure with cache information."""
        return self._upstream.fetch(
            STRUCTURE_INFO, token=token, ctx=ctx, structure_id=structure_id
        )
