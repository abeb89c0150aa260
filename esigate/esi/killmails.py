"""Killmail resources."""

from datetime import datetime

from pydantic import BaseModel

from esigate.esi.base import ResourceClient
from esigate.fetch.client import Endpoint
from esigate.fetch.context import CallContext
from esigate.fetch.models import FetchResult


class Position(BaseModel):
    x: float
    y: float
    z: float


class KillmailItem(BaseModel):
    """An item fitted to or carried by the victim's ship."""

    item_type_id: int
    flag: int
    singleton: int
    quantity_destroyed: int | None = None
    quantity_dropped: int | None = None
    items: list["KillmailItem"] = []


class Victim(BaseModel):
    ship_type_id: int
    damage_taken: int
    character_id: int | None = None
    corporation_id: int | None = None
    alliance_id: int | None = None
    faction_id: int | None = None
    position: Position | None = None
    items: list[KillmailItem] = []


class Attacker(BaseModel):
    damage_done: int
    final_blow: bool
    security_status: float
    character_id: int | None = None
    corporation_id: int | None = None
    alliance_id: int | None = None
    faction_id: int | None = None
    ship_type_id: int | None = None
    weapon_type_id: int | None = None


class Killmail(BaseModel):
    """A full killmail."""

    killmail_id: int
    killmail_time: datetime
    solar_system_id: int
    victim: Victim
    attackers: list[Attacker]
    moon_id: int | None = None
    war_id: int | None = None


class KillmailRef(BaseModel):
    """Reference to a killmail: the ID and hash needed to fetch it."""

    killmail_id: int
    killmail_hash: str


KILLMAIL: Endpoint[Killmail] = Endpoint(
    "killmail", "/killmails/{killmail_id}/{killmail_hash}/", Killmail
)
CHARACTER_RECENT_KILLMAILS: Endpoint[list[KillmailRef]] = Endpoint(
    "character_recent_killmails",
    "/characters/{character_id}/killmails/recent/",
    list[KillmailRef],
    requires_auth=True,
)
CORPORATION_RECENT_KILLMAILS: Endpoint[list[KillmailRef]] = Endpoint(
    "corporation_recent_killmails",
    "/corporations/{corporation_id}/killmails/recent/",
    list[KillmailRef],
    requires_auth=True,
)


class KillmailClient(ResourceClient):
    """Client for killmail resources."""

    def get_killmail(
        self, killmail_id: int, killmail_hash: str, ctx: CallContext | None = None
    ) -> Killmail:
        """Get a single killmail.

        Killmails are immutable once published, so upstream caches them for
        a long time.

        Args:
            killmail_id: Killmail ID.
            killmail_hash: Killmail hash.
            ctx: Call context.

        Returns:
            The killmail.
        """
        return self._upstream.get(
            KILLMAIL, ctx=ctx, killmail_id=killmail_id, killmail_hash=killmail_hash
        )

    def get_killmail_with_cache(
        self, killmail_id: int, killmail_hash: str, ctx: CallContext | None = None
    ) -> FetchResult[Killmail]:
        """Get a killmail by ID and hash with cache information."""
        return self._upstream.fetch(
            KILLMAIL, ctx=ctx, killmail_id=killmail_id, killmail_hash=killmail_hash
        )

    def get_character_recent_killmails(
        self, character_id: int, token: str, ctx: CallContext | None = None
    ) -> list[KillmailRef]:
        """List a character's recent killmail references."""
        return self._upstream.get(
            CHARACTER_RECENT_KILLMAILS,
            token=token,
            ctx=ctx,
            character_id=character_id,
        )

    def get_character_recent_killmails_with_cache(
        self, character_id: int, token: str, ctx: CallContext | None = None
    ) -> FetchResult[list[KillmailRef]]:
        """List a character's recent killmail references with cache information."""
        return self._upstream.fetch(
            CHARACTER_RECENT_KILLMAILS,
            token=token,
            ctx=ctx,
            character_id=character_id,
        )

    def get_corporation_recent_killmails(
        self, corporation_id: int, token: str, ctx: CallContext | None = None
    ) -> list[KillmailRef]:
        """List a corporation's recent killmail references."""
        return self._upstream.get(
            CORPORATION_RECENT_KILLMAILS,
            token=token,
            ctx=ctx,
            corporation_id=corporation_id,
        )

    def get_corporation_recent_killmails_with_cache(
        self, corporation_id: int, token: str, ctx: CallContext | None = None
    ) -> FetchResult[list[KillmailRef]]:
        """List a corporation's recent killmail references with cache information."""
        return self._upstream.fetch(
            CORPORATION_RECENT_KILLMAILS,
            token=token,
            ctx=ctx,
            corporation_id=corporation_id,
        )
