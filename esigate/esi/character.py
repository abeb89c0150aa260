"""Character resources: public profile and authenticated character data."""

from datetime import datetime

from pydantic import BaseModel

from esigate.esi.base import ResourceClient
from esigate.fetch.client import Endpoint
from esigate.fetch.constants import MAX_AFFILIATION_IDS
from esigate.fetch.context import CallContext
from esigate.fetch.errors import InvalidRequestError
from esigate.fetch.models import FetchResult


class CharacterInfo(BaseModel):
    """Public character information."""

    name: str
    corporation_id: int
    birthday: datetime
    gender: str
    race_id: int
    bloodline_id: int
    description: str | None = None
    alliance_id: int | None = None
    ancestry_id: int | None = None
    faction_id: int | None = None
    security_status: float | None = None
    title: str | None = None


class CharacterPortrait(BaseModel):
    """Portrait image URLs."""

    px64x64: str | None = None
    px128x128: str | None = None
    px256x256: str | None = None
    px512x512: str | None = None


class CorporationHistoryEntry(BaseModel):
    """One entry of a character's employment history."""

    corporation_id: int
    record_id: int
    start_date: datetime
    is_deleted: bool | None = None


class CharacterAffiliation(BaseModel):
    """Current corporation/alliance/faction of a character."""

    character_id: int
    corporation_id: int
    alliance_id: int | None = None
    faction_id: int | None = None


class CharacterAttributes(BaseModel):
    """Neural attributes and remap state."""

    charisma: int
    intelligence: int
    memory: int
    perception: int
    willpower: int
    accrued_remap_cooldown_date: datetime | None = None
    bonus_remaps: int | None = None
    last_remap_date: datetime | None = None


class Skill(BaseModel):
    """A trained skill."""

    skill_id: int
    skillpoints_in_skill: int
    trained_skill_level: int
    active_skill_level: int


class CharacterSkills(BaseModel):
    """All trained skills and skill point totals."""

    skills: list[Skill]
    total_sp: int
    unallocated_sp: int | None = None


class SkillQueueEntry(BaseModel):
    """One entry of the skill training queue."""

    skill_id: int
    finished_level: int
    queue_position: int
    start_date: datetime | None = None
    finish_date: datetime | None = None
    training_start_sp: int | None = None
    level_start_sp: int | None = None
    level_end_sp: int | None = None


class CharacterLocation(BaseModel):
    """Where the character currently is."""

    solar_system_id: int
    station_id: int | None = None
    structure_id: int | None = None


class CharacterShip(BaseModel):
    """The ship the character is currently flying."""

    ship_item_id: int
    ship_name: str
    ship_type_id: int


class CharacterOnline(BaseModel):
    """Online status and login history."""

    online: bool
    last_login: datetime | None = None
    last_logout: datetime | None = None
    logins: int | None = None


CHARACTER_INFO: Endpoint[CharacterInfo] = Endpoint(
    "character_info", "/characters/{character_id}/", CharacterInfo
)
CHARACTER_PORTRAIT: Endpoint[CharacterPortrait] = Endpoint(
    "character_portrait", "/characters/{character_id}/portrait/", CharacterPortrait
)
CHARACTER_CORPORATION_HISTORY: Endpoint[list[CorporationHistoryEntry]] = Endpoint(
    "character_corporation_history",
    "/characters/{character_id}/corporationhistory/",
    list[CorporationHistoryEntry],
)
CHARACTERS_AFFILIATION: Endpoint[list[CharacterAffiliation]] = Endpoint(
    "characters_affiliation", "/characters/affiliation/", list[CharacterAffiliation]
)
CHARACTER_ATTRIBUTES: Endpoint[CharacterAttributes] = Endpoint(
    "character_attributes",
    "/characters/{character_id}/attributes/",
    CharacterAttributes,
    requires_auth=True,
)
CHARACTER_SKILLS: Endpoint[CharacterSkills] = Endpoint(
    "character_skills",
    "/characters/{character_id}/skills/",
    CharacterSkills,
    requires_auth=True,
)
CHARACTER_SKILL_QUEUE: Endpoint[list[SkillQueueEntry]] = Endpoint(
    "character_skill_queue",
    "/characters/{character_id}/skillqueue/",
    list[SkillQueueEntry],
    requires_auth=True,
)
CHARACTER_LOCATION: Endpoint[CharacterLocation] = Endpoint(
    "character_location",
    "/characters/{character_id}/location/",
    CharacterLocation,
    requires_auth=True,
)
CHARACTER_SHIP: Endpoint[CharacterShip] = Endpoint(
    "character_ship",
    "/characters/{character_id}/ship/",
    CharacterShip,
    requires_auth=True,
)
CHARACTER_ONLINE: Endpoint[CharacterOnline] = Endpoint(
    "character_online",
    "/characters/{character_id}/online/",
    CharacterOnline,
    requires_auth=True,
)


class CharacterClient(ResourceClient):
    """Client for ``/characters/`` resources."""

    def get_character_info(
        self, character_id: int, ctx: CallContext | None = None
    ) -> CharacterInfo:
        """Get public information about a character.

        Args:
            character_id: EVE character ID.
            ctx: Call context.

        Returns:
            Public character information.
        """
        return self._upstream.get(CHARACTER_INFO, ctx=ctx, character_id=character_id)

    def get_character_info_with_cache(
        self, character_id: int, ctx: CallContext | None = None
    ) -> FetchResult[CharacterInfo]:
        """Get public information about a character with cache information."""
        return self._upstream.fetch(CHARACTER_INFO, ctx=ctx, character_id=character_id)

    def get_character_portrait(
        self, character_id: int, ctx: CallContext | None = None
    ) -> CharacterPortrait:
        """Get a character's portrait URLs."""
        return self._upstream.get(
            CHARACTER_PORTRAIT, ctx=ctx, character_id=character_id
        )

    def get_character_portrait_with_cache(
        self, character_id: int, ctx: CallContext | None = None
    ) -> FetchResult[CharacterPortrait]:
        """Get a character's portrait URLs with cache information."""
        return self._upstream.fetch(
            CHARACTER_PORTRAIT, ctx=ctx, character_id=character_id
        )

    def get_corporation_history(
        self, character_id: int, ctx: CallContext | None = None
    ) -> list[CorporationHistoryEntry]:
        """Get the corporations a character has belonged to."""
        return self._upstream.get(
            CHARACTER_CORPORATION_HISTORY, ctx=ctx, character_id=character_id
        )

    def get_corporation_history_with_cache(
        self, character_id: int, ctx: CallContext | None = None
    ) -> FetchResult[list[CorporationHistoryEntry]]:
        """Get the corporations a character has belonged to with cache information."""
        return self._upstream.fetch(
            CHARACTER_CORPORATION_HISTORY, ctx=ctx, character_id=character_id
        )

    def get_characters_affiliation(
        self, character_ids: list[int], ctx: CallContext | None = None
    ) -> list[CharacterAffiliation]:
        """Resolve corporation/alliance membership for many characters.

        This is an uncached POST. An empty list returns without a request.

        Args:
            character_ids: Up to 1000 character IDs.
            ctx: Call context.

        Returns:
            One affiliation per known character.

        Raises:
            InvalidRequestError: If more than 1000 IDs are given.
        """
        if not self._check_affiliation_ids(character_ids):
            return []
        return self._upstream.post(CHARACTERS_AFFILIATION, character_ids, ctx=ctx)

    def get_characters_affiliation_with_cache(
        self, character_ids: list[int], ctx: CallContext | None = None
    ) -> FetchResult[list[CharacterAffiliation]]:
        """Resolve affiliations, caching the response per list of IDs.

        The same validation as ``get_characters_affiliation`` applies.
        """
        if not self._check_affiliation_ids(character_ids):
            return FetchResult(data=[])
        return self._upstream.post_with_cache(
            CHARACTERS_AFFILIATION, character_ids, ctx=ctx
        )

    @staticmethod
    def _check_affiliation_ids(character_ids: list[int]) -> bool:
        """Validate an affiliation lookup, returning False when it is empty."""
        if len(character_ids) > MAX_AFFILIATION_IDS:
            raise InvalidRequestError(
                CHARACTERS_AFFILIATION.path,
                f"maximum {MAX_AFFILIATION_IDS} character IDs allowed per "
                f"request, got {len(character_ids)}",
            )
        return bool(character_ids)

    def get_character_attributes(
        self, character_id: int, token: str, ctx: CallContext | None = None
    ) -> CharacterAttributes:
        """Get a character's attributes."""
        return self._upstream.get(
            CHARACTER_ATTRIBUTES, token=token, ctx=ctx, character_id=character_id
        )

    def get_character_attributes_with_cache(
        self, character_id: int, token: str, ctx: CallContext | None = None
    ) -> FetchResult[CharacterAttributes]:
        """Get a character's attributes with cache information."""
        return self._upstream.fetch(
            CHARACTER_ATTRIBUTES, token=token, ctx=ctx, character_id=character_id
        )

    def get_character_skills(
        self, character_id: int, token: str, ctx: CallContext | None = None
    ) -> CharacterSkills:
        """Get a character's trained skills and total SP."""
        return self._upstream.get(
            CHARACTER_SKILLS, token=token, ctx=ctx, character_id=character_id
        )

    def get_character_skills_with_cache(
        self, character_id: int, token: str, ctx: CallContext | None = None
    ) -> FetchResult[CharacterSkills]:
        """Get a character's trained skills and total SP with cache information."""
        return self._upstream.fetch(
            CHARACTER_SKILLS, token=token, ctx=ctx, character_id=character_id
        )

    def get_character_skill_queue(
        self, character_id: int, token: str, ctx: CallContext | None = None
    ) -> list[SkillQueueEntry]:
        """Get a character's skill queue."""
        return self._upstream.get(
            CHARACTER_SKILL_QUEUE, token=token, ctx=ctx, character_id=character_id
        )

    def get_character_skill_queue_with_cache(
        self, character_id: int, token: str, ctx: CallContext | None = None
    ) -> FetchResult[list[SkillQueueEntry]]:
        """Get a character's skill queue with cache information."""
        return self._upstream.fetch(
            CHARACTER_SKILL_QUEUE, token=token, ctx=ctx, character_id=character_id
        )

    def get_character_location(
        self, character_id: int, token: str, ctx: CallContext | None = None
    ) -> CharacterLocation:
        """Get a character's current location."""
        return self._upstream.get(
            CHARACTER_LOCATION, token=token, ctx=ctx, character_id=character_id
        )

    def get_character_location_with_cache(
        self, character_id: int, token: str, ctx: CallContext | None = None
    ) -> FetchResult[CharacterLocation]:
        """Get a character's current location with cache information."""
        return self._upstream.fetch(
            CHARACTER_LOCATION, token=token, ctx=ctx, character_id=character_id
        )

    def get_character_ship(
        self, character_id: int, token: str, ctx: CallContext | None = None
    ) -> CharacterShip:
        """Get the ship a character is flying."""
        return self._upstream.get(
            CHARACTER_SHIP, token=token, ctx=ctx, character_id=character_id
        )

    def get_character_ship_with_cache(
        self, character_id: int, token: str, ctx: CallContext | None = None
    ) -> FetchResult[CharacterShip]:
        """Get the ship a character is flying with cache information."""
        return self._upstream.fetch(
            CHARACTER_SHIP, token=token, ctx=ctx, character_id=character_id
        )

    def get_character_online(
        self, character_id: int, token: str, ctx: CallContext | None = None
    ) -> CharacterOnline:
        """Get a character's online status."""
        return self._upstream.get(
            CHARACTER_ONLINE, token=token, ctx=ctx, character_id=character_id
        )

    def get_character_online_with_cache(
        self, character_id: int, token: str, ctx: CallContext | None = None
    ) -> FetchResult[CharacterOnline]:
        """Get a character's online status with cache information."""
        return self._upstream.fetch(
            CHARACTER_ONLINE, token=token, ctx=ctx, character_id=character_id
        )
