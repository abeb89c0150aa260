"""Alliance resources."""

from datetime import datetime

from pydantic import BaseModel

from esigate.esi.base import ResourceClient
from esigate.fetch.client import Endpoint
from esigate.fetch.context import CallContext
from esigate.fetch.models import FetchResult


class AllianceInfo(BaseModel):
    """Public alliance information."""

    name: str
    ticker: str
    creator_corporation_id: int
    creator_id: int
    date_founded: datetime
    executor_corporation_id: int | None = None
    faction_id: int | None = None


class AllianceIcons(BaseModel):
    """Alliance logo URLs."""

    px64x64: str | None = None
    px128x128: str | None = None


class AllianceContact(BaseModel):
    """A contact on the alliance contact list."""

    contact_id: int
    contact_type: str
    standing: float
    label_ids: list[int] = []


class ContactLabel(BaseModel):
    """A label used to group alliance contacts."""

    label_id: int
    label_name: str


ALLIANCES: Endpoint[list[int]] = Endpoint("alliances", "/alliances/", list[int])
ALLIANCE_INFO: Endpoint[AllianceInfo] = Endpoint(
    "alliance_info", "/alliances/{alliance_id}/", AllianceInfo
)
ALLIANCE_CORPORATIONS: Endpoint[list[int]] = Endpoint(
    "alliance_corporations", "/alliances/{alliance_id}/corporations/", list[int]
)
ALLIANCE_ICONS: Endpoint[AllianceIcons] = Endpoint(
    "alliance_icons", "/alliances/{alliance_id}/icons/", AllianceIcons
)
ALLIANCE_CONTACTS: Endpoint[list[AllianceContact]] = Endpoint(
    "alliance_contacts",
    "/alliances/{alliance_id}/contacts/",
    list[AllianceContact],
    requires_auth=True,
)
ALLIANCE_CONTACT_LABELS: Endpoint[list[ContactLabel]] = Endpoint(
    "alliance_contact_labels",
    "/alliances/{alliance_id}/contacts/labels/",
    list[ContactLabel],
    requires_auth=True,
)


class AllianceClient(ResourceClient):
    """Client for ``/alliances/`` resources."""

    def get_alliances(self, ctx: CallContext | None = None) -> list[int]:
        """List the IDs of every active alliance."""
        return self._upstream.get(ALLIANCES, ctx=ctx)

    def get_alliances_with_cache(
        self, ctx: CallContext | None = None
    ) -> FetchResult[list[int]]:
        """List the IDs of every active alliance with cache information."""
        return self._upstream.fetch(ALLIANCES, ctx=ctx)

    def get_alliance_info(
        self, alliance_id: int, ctx: CallContext | None = None
    ) -> AllianceInfo:
        """Get public information about an alliance."""
        return self._upstream.get(ALLIANCE_INFO, ctx=ctx, alliance_id=alliance_id)

    def get_alliance_info_with_cache(
        self, alliance_id: int, ctx: CallContext | None = None
    ) -> FetchResult[AllianceInfo]:
        """Get public information about an alliance with cache information."""
        return self._upstream.fetch(ALLIANCE_INFO, ctx=ctx, alliance_id=alliance_id)

    def get_alliance_corporations(
        self, alliance_id: int, ctx: CallContext | None = None
    ) -> list[int]:
        """List the corporation IDs in an alliance."""
        return self._upstream.get(
            ALLIANCE_CORPORATIONS, ctx=ctx, alliance_id=alliance_id
        )

    def get_alliance_corporations_with_cache(
        self, alliance_id: int, ctx: CallContext | None = None
    ) -> FetchResult[list[int]]:
        """List the corporation IDs in an alliance with cache information."""
        return self._upstream.fetch(
            ALLIANCE_CORPORATIONS, ctx=ctx, alliance_id=alliance_id
        )

    def get_alliance_icons(
        self, alliance_id: int, ctx: CallContext | None = None
    ) -> AllianceIcons:
        """Get an alliance's icon URLs."""
        return self._upstream.get(ALLIANCE_ICONS, ctx=ctx, alliance_id=alliance_id)

    def get_alliance_icons_with_cache(
        self, alliance_id: int, ctx: CallContext | None = None
    ) -> FetchResult[AllianceIcons]:
        """Get an alliance's icon URLs with cache information."""
        return self._upstream.fetch(
            ALLIANCE_ICONS, ctx=ctx, alliance_id=alliance_id
        )

    def get_alliance_contacts(
        self, alliance_id: int, token: str, ctx: CallContext | None = None
    ) -> list[AllianceContact]:
        """Get the alliance contact list.

        Args:
            alliance_id: EVE alliance ID.
            token: Token of a character in the alliance's executor corporation.
            ctx: Call context.

        Returns:
            Contacts with their standings and labels.
        """
        return self._upstream.get(
            ALLIANCE_CONTACTS, token=token, ctx=ctx, alliance_id=alliance_id
        )

    def get_alliance_contacts_with_cache(
        self, alliance_id: int, token: str, ctx: CallContext | None = None
    ) -> FetchResult[list[AllianceContact]]:
        """Get an alliance's contacts with cache information."""
        return self._upstream.fetch(
            ALLIANCE_CONTACTS, token=token, ctx=ctx, alliance_id=alliance_id
        )

    def get_alliance_contact_labels(
        self, alliance_id: int, token: str, ctx: CallContext | None = None
    ) -> list[ContactLabel]:
        """Get an alliance's contact labels (requires a token)."""
        return self._upstream.get(
            ALLIANCE_CONTACT_LABELS, token=token, ctx=ctx, alliance_id=alliance_id
        )

    def get_alliance_contact_labels_with_cache(
        self, alliance_id: int, token: str, ctx: CallContext | None = None
    ) -> FetchResult[list[ContactLabel]]:
        """Get an alliance's contact labels with cache information."""
        return self._upstream.fetch(
            ALLIANCE_CONTACT_LABELS, token=token, ctx=ctx, alliance_id=alliance_id
        )
