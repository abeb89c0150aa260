"""Universe resources: solar systems and stations."""

from pydantic import BaseModel

from esigate.esi.base import ResourceClient
from esigate.fetch.client import Endpoint
from esigate.fetch.context import CallContext
from esigate.fetch.models import FetchResult


class SystemInfo(BaseModel):
    """A solar system."""

    system_id: int
    name: str
    constellation_id: int
    security_status: float
    security_class: str | None = None
    star_id: int | None = None
    stargates: list[int] = []
    stations: list[int] = []


class StationInfo(BaseModel):
    """An NPC station."""

    station_id: int
    name: str
    system_id: int
    type_id: int
    race_id: int | None = None
    owner: int | None = None
    max_dockable_ship_volume: float | None = None
    office_rental_cost: float | None = None
    reprocessing_efficiency: float | None = None
    services: list[str] = []


SYSTEM_INFO: Endpoint[SystemInfo] = Endpoint(
    "system_info", "/universe/systems/{system_id}/", SystemInfo
)
STATION_INFO: Endpoint[StationInfo] = Endpoint(
    "station_info", "/universe/stations/{station_id}/", StationInfo
)


class UniverseClient(ResourceClient):
    """Client for static universe resources."""

    def get_system_info(
        self, system_id: int, ctx: CallContext | None = None
    ) -> SystemInfo:
        """Get public information about a solar system."""
        return self._upstream.get(SYSTEM_INFO, ctx=ctx, system_id=system_id)

    def get_system_info_with_cache(
        self, system_id: int, ctx: CallContext | None = None
    ) -> FetchResult[SystemInfo]:
        """Get public information about a solar system with cache information."""
        return self._upstream.fetch(SYSTEM_INFO, ctx=ctx, system_id=system_id)

    def get_station_info(
        self, station_id: int, ctx: CallContext | None = None
    ) -> StationInfo:
        """Get public information about an NPC station."""
        return self._upstream.get(STATION_INFO, ctx=ctx, station_id=station_id)

    def get_station_info_with_cache(
        self, station_id: int, ctx: CallContext | None = None
    ) -> FetchResult[StationInfo]:
        """Get public information about an NPC station with cache information."""
        return self._upstream.fetch(STATION_INFO, ctx=ctx, station_id=station_id)
