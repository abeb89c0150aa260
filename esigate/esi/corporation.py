"""Corporation resources."""

from datetime import datetime

from pydantic import BaseModel

from esigate.esi.base import ResourceClient
from esigate.fetch.client import Endpoint
from esigate.fetch.context import CallContext
from esigate.fetch.models import FetchResult


class CorporationInfo(BaseModel):
    """Public corporation information."""

    name: str
    ticker: str
    member_count: int
    ceo_id: int
    creator_id: int
    tax_rate: float
    description: str | None = None
    url: str | None = None
    alliance_id: int | None = None
    date_founded: datetime | None = None
    faction_id: int | None = None
    home_station_id: int | None = None
    shares: int | None = None
    war_eligible: bool | None = None


class CorporationIcons(BaseModel):
    """Corporation logo URLs."""

    px64x64: str | None = None
    px128x128: str | None = None
    px256x256: str | None = None


class AllianceHistoryEntry(BaseModel):
    """One entry of a corporation's alliance history."""

    record_id: int
    start_date: datetime
    alliance_id: int | None = None
    is_deleted: bool | None = None


class MemberTracking(BaseModel):
    """Tracking information for one corporation member."""

    character_id: int
    base_id: int | None = None
    location_id: int | None = None
    logoff_date: datetime | None = None
    logon_date: datetime | None = None
    ship_type_id: int | None = None
    start_date: datetime | None = None


class MemberRoles(BaseModel):
    """Roles held and grantable by one corporation member."""

    character_id: int
    grantable_roles: list[str] = []
    grantable_roles_at_base: list[str] = []
    grantable_roles_at_hq: list[str] = []
    grantable_roles_at_other: list[str] = []
    roles: list[str] = []
    roles_at_base: list[str] = []
    roles_at_hq: list[str] = []
    roles_at_other: list[str] = []


class StructureService(BaseModel):
    """A service fitted to a structure."""

    name: str
    state: str


class CorporationStructure(BaseModel):
    """A structure owned by the corporation."""

    structure_id: int
    corporation_id: int
    type_id: int
    system_id: int
    profile_id: int
    state: str
    fuel_expires: datetime | None = None
    state_timer_start: datetime | None = None
    state_timer_end: datetime | None = None
    unanchors_at: datetime | None = None
    reinforce_hour: int | None = None
    services: list[StructureService] = []


class Standing(BaseModel):
    """Standing towards an NPC agent, corporation or faction."""

    from_id: int
    from_type: str
    standing: float


class WalletDivision(BaseModel):
    """Balance of one corporation wallet division."""

    division: int
    balance: float


CORPORATION_INFO: Endpoint[CorporationInfo] = Endpoint(
    "corporation_info", "/corporations/{corporation_id}/", CorporationInfo
)
CORPORATION_ICONS: Endpoint[CorporationIcons] = Endpoint(
    "corporation_icons", "/corporations/{corporation_id}/icons/", CorporationIcons
)
CORPORATION_ALLIANCE_HISTORY: Endpoint[list[AllianceHistoryEntry]] = Endpoint(
    "corporation_alliance_history",
    "/corporations/{corporation_id}/alliancehistory/",
    list[AllianceHistoryEntry],
)
CORPORATION_MEMBERS: Endpoint[list[int]] = Endpoint(
    "corporation_members",
    "/corporations/{corporation_id}/members/",
    list[int],
    requires_auth=True,
)
CORPORATION_MEMBER_TRACKING: Endpoint[list[MemberTracking]] = Endpoint(
    "corporation_member_tracking",
    "/corporations/{corporation_id}/membertracking/",
    list[MemberTracking],
    requires_auth=True,
)
CORPORATION_ROLES: Endpoint[list[MemberRoles]] = Endpoint(
    "corporation_roles",
    "/corporations/{corporation_id}/roles/",
    list[MemberRoles],
    requires_auth=True,
)
CORPORATION_STRUCTURES: Endpoint[list[CorporationStructure]] = Endpoint(
    "corporation_structures",
    "/corporations/{corporation_id}/structures/",
    list[CorporationStructure],
    requires_auth=True,
)
CORPORATION_STANDINGS: Endpoint[list[Standing]] = Endpoint(
    "corporation_standings",
    "/corporations/{corporation_id}/standings/",
    list[Standing],
    requires_auth=True,
)
CORPORATION_WALLETS: Endpoint[list[WalletDivision]] = Endpoint(
    "corporation_wallets",
    "/corporations/{corporation_id}/wallets/",
    list[WalletDivision],
    requires_auth=True,
)


class CorporationClient(ResourceClient):
    """Client for ``/corporations/`` resources.

    Public resources take only the corporation ID. Member, role, structure,
    standing and wallet resources need a token for a character holding the
    matching corporation role; entries are cached per token.
    """

    def get_corporation_info(
        self, corporation_id: int, ctx: CallContext | None = None
    ) -> CorporationInfo:
        """Get public information about a corporation."""
        return self._upstream.get(
            CORPORATION_INFO, ctx=ctx, corporation_id=corporation_id
        )

    def get_corporation_info_with_cache(
        self, corporation_id: int, ctx: CallContext | None = None
    ) -> FetchResult[CorporationInfo]:
        """Get public corporation information with cache details.

        Args:
            corporation_id: EVE corporation ID.
            ctx: Call context.

        Returns:
            Corporation information and whether it came from the cache.
        """
        return self._upstream.fetch(
            CORPORATION_INFO, ctx=ctx, corporation_id=corporation_id
        )

    def get_corporation_icons(
        self, corporation_id: int, ctx: CallContext | None = None
    ) -> CorporationIcons:
        """Get a corporation's icon URLs."""
        return self._upstream.get(
            CORPORATION_ICONS, ctx=ctx, corporation_id=corporation_id
        )

    def get_corporation_icons_with_cache(
        self, corporation_id: int, ctx: CallContext | None = None
    ) -> FetchResult[CorporationIcons]:
        """Get a corporation's icon URLs with cache information."""
        return self._upstream.fetch(
            CORPORATION_ICONS, ctx=ctx, corporation_id=corporation_id
        )

    def get_alliance_history(
        self, corporation_id: int, ctx: CallContext | None = None
    ) -> list[AllianceHistoryEntry]:
        """Get the alliances a corporation has belonged to."""
        return self._upstream.get(
            CORPORATION_ALLIANCE_HISTORY, ctx=ctx, corporation_id=corporation_id
        )

    def get_alliance_history_with_cache(
        self, corporation_id: int, ctx: CallContext | None = None
    ) -> FetchResult[list[AllianceHistoryEntry]]:
        """Get the alliances a corporation has belonged to with cache information."""
        return self._upstream.fetch(
            CORPORATION_ALLIANCE_HISTORY, ctx=ctx, corporation_id=corporation_id
        )

    def get_members(
        self, corporation_id: int, token: str, ctx: CallContext | None = None
    ) -> list[int]:
        """Get the character IDs of every corporation member."""
        return self._upstream.get(
            CORPORATION_MEMBERS, token=token, ctx=ctx, corporation_id=corporation_id
        )

    def get_members_with_cache(
        self, corporation_id: int, token: str, ctx: CallContext | None = None
    ) -> FetchResult[list[int]]:
        """List the character IDs of a corporation's members with cache information."""
        return self._upstream.fetch(
            CORPORATION_MEMBERS, token=token, ctx=ctx, corporation_id=corporation_id
        )

    def get_member_tracking(
        self, corporation_id: int, token: str, ctx: CallContext | None = None
    ) -> list[MemberTracking]:
        """Get member tracking data for a corporation."""
        return self._upstream.get(
            CORPORATION_MEMBER_TRACKING,
            token=token,
            ctx=ctx,
            corporation_id=corporation_id,
        )

    def get_member_tracking_with_cache(
        self, corporation_id: int, token: str, ctx: CallContext | None = None
    ) -> FetchResult[list[MemberTracking]]:
        """Get member tracking data for a corporation with cache information."""
        return self._upstream.fetch(
            CORPORATION_MEMBER_TRACKING,
            token=token,
            ctx=ctx,
            corporation_id=corporation_id,
        )

    def get_member_roles(
        self, corporation_id: int, token: str, ctx: CallContext | None = None
    ) -> list[MemberRoles]:
        """Get the roles of a corporation's members."""
        return self._upstream.get(
            CORPORATION_ROLES, token=token, ctx=ctx, corporation_id=corporation_id
        )

    def get_member_roles_with_cache(
        self, corporation_id: int, token: str, ctx: CallContext | None = None
    ) -> FetchResult[list[MemberRoles]]:
        """Get the roles of a corporation's members with cache information."""
        return self._upstream.fetch(
            CORPORATION_ROLES, token=token, ctx=ctx, corporation_id=corporation_id
        )

    def get_structures(
        self, corporation_id: int, token: str, ctx: CallContext | None = None
    ) -> list[CorporationStructure]:
        """Get the structures a corporation owns."""
        return self._upstream.get(
            CORPORATION_STRUCTURES,
            token=token,
            ctx=ctx,
            corporation_id=corporation_id,
        )

    def get_structures_with_cache(
        self, corporation_id: int, token: str, ctx: CallContext | None = None
    ) -> FetchResult[list[CorporationStructure]]:
        """Get the structures a corporation owns with cache information."""
        return self._upstream.fetch(
            CORPORATION_STRUCTURES,
            token=token,
            ctx=ctx,
            corporation_id=corporation_id,
        )

    def get_standings(
        self, corporation_id: int, token: str, ctx: CallContext | None = None
    ) -> list[Standing]:
        """Get a corporation's NPC standings."""
        return self._upstream.get(
            CORPORATION_STANDINGS,
            token=token,
            ctx=ctx,
            corporation_id=corporation_id,
        )

    def get_standings_with_cache(
        self, corporation_id: int, token: str, ctx: CallContext | None = None
    ) -> FetchResult[list[Standing]]:
        """Get a corporation's NPC standings with cache information."""
        return self._upstream.fetch(
            CORPORATION_STANDINGS,
            token=token,
            ctx=ctx,
            corporation_id=corporation_id,
        )

    def get_wallets(
        self, corporation_id: int, token: str, ctx: CallContext | None = None
    ) -> list[WalletDivision]:
        """Get a corporation's wallet divisions."""
        return self._upstream.get(
            CORPORATION_WALLETS, token=token, ctx=ctx, corporation_id=corporation_id
        )

    def get_wallets_with_cache(
        self, corporation_id: int, token: str, ctx: CallContext | None = None
    ) -> FetchResult[list[WalletDivision]]:
        """Get a corporation's wallet divisions with cache information."""
        return self._upstream.fetch(
            CORPORATION_WALLETS, token=token, ctx=ctx, corporation_id=corporation_id
        )
