"""Shared plumbing for per-family ESI clients."""

from esigate.fetch.client import UpstreamClient


class ResourceClient:
    """Base class for one ESI resource family.

    Family clients only declare endpoints and typed accessors; fetching,
    caching and retrying are delegated to the shared ``UpstreamClient``.
    """

    def __init__(self, upstream: UpstreamClient) -> None:
        """Initialize the family client.

        Args:
            upstream: Shared cache-aware upstream accessor.
        """
        self._upstream = upstream
