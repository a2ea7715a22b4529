"""
Catalog - Static card and unit data.

Contains:
- Card definitions (tagged unit/spell/weapon variants)
- Closed effect descriptors for battlecries, spells and deathrattles
- The CardCatalog lookup and preset decks
- The tiered autobattler unit pool
"""

from .effects import EffectDescriptor, EffectKind, SummonSpec, TargetSide
from .cards import (
    Ability,
    CardDefinition,
    CardKind,
    Rarity,
    SpellCard,
    UnitCard,
    WeaponCard,
    BASIC_CARDS,
    COIN,
    PRESET_DECKS,
)
from .registry import CardCatalog, default_catalog, preset_deck
from .pool import PoolUnit, Tribe, UNIT_POOL, generate_opponent_roster, units_up_to_tier

__all__ = [
    "EffectDescriptor",
    "EffectKind",
    "SummonSpec",
    "TargetSide",
    "Ability",
    "CardDefinition",
    "CardKind",
    "Rarity",
    "SpellCard",
    "UnitCard",
    "WeaponCard",
    "BASIC_CARDS",
    "COIN",
    "PRESET_DECKS",
    "CardCatalog",
    "default_catalog",
    "preset_deck",
    "PoolUnit",
    "Tribe",
    "UNIT_POOL",
    "generate_opponent_roster",
    "units_up_to_tier",
]
