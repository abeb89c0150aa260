"""Server status resource."""

from datetime import datetime

from pydantic import BaseModel

from esigate.esi.base import ResourceClient
from esigate.fetch.client import Endpoint
from esigate.fetch.context import CallContext
from esigate.fetch.models import FetchResult


class ServerStatus(BaseModel):
    """Tranquility server status."""

    players: int
    server_version: str
    start_time: datetime
    vip: bool | None = None


SERVER_STATUS: Endpoint[ServerStatus] = Endpoint("status", "/status/", ServerStatus)


class StatusClient(ResourceClient):
    """Client for ``/status/``."""

    def get_server_status(self, ctx: CallContext | None = None) -> ServerStatus:
        """Get the current server status."""
        return self._upstream.get(SERVER_STATUS, ctx=ctx)

    def get_server_status_with_cache(
        self, ctx: CallContext | None = None
    ) -> FetchResult[ServerStatus]:
        """Get the current server status with cache information."""
        return self._upstream.fetch(SERVER_STATUS, ctx=ctx)
