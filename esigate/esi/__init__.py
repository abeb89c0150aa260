"""Typed ESI resource families sharing one cache and error budget."""

from esigate.esi.alliance import AllianceClient
from esigate.esi.assets import AssetsClient
from esigate.esi.character import CharacterClient
from esigate.esi.client import EsiClient, build_client
from esigate.esi.corporation import CorporationClient
from esigate.esi.killmails import KillmailClient
from esigate.esi.market import MarketClient
from esigate.esi.status import StatusClient
from esigate.esi.structures import StructuresClient
from esigate.esi.universe import UniverseClient


__all__ = [
    "EsiClient",
    "build_client",
    "AllianceClient",
    "AssetsClient",
    "CharacterClient",
    "CorporationClient",
    "KillmailClient",
    "MarketClient",
    "StatusClient",
    "StructuresClient",
    "UniverseClient",
]
