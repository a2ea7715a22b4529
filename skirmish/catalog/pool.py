"""
Autobattler unit pool - Tiered units available between combat phases.

The shop/economy that hands these to players lives outside the engine.
This module only knows the pool and how to build an opponent board for a
given round.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import math
import random

MAX_ROSTER_SIZE = 7
MAX_POOL_TIER = 3


class Tribe(Enum):
    BEAST = "beast"
    DEMON = "demon"
    DRAGON = "dragon"
    ELEMENTAL = "elemental"
    MECH = "mech"
    MURLOC = "murloc"
    PIRATE = "pirate"


@dataclass(frozen=True)
class PoolUnit:
    """An autobattler unit definition. Tier doubles as its combat weight."""
    unit_id: str
    name: str
    attack: int
    health: int
    tier: int
    tribe: Tribe | None = None


UNIT_POOL: dict[int, list[PoolUnit]] = {
    1: [
        PoolUnit("1", "Micro Bot", 1, 2, 1, Tribe.MECH),
        PoolUnit("2", "Sludge Crawler", 1, 2, 1, Tribe.MURLOC),
        PoolUnit("3", "Raging Worgen", 2, 2, 1),
        PoolUnit("4", "Rockpool Hunter", 2, 3, 1, Tribe.BEAST),
        PoolUnit("5", "Flame Imp", 3, 2, 1, Tribe.DEMON),
    ],
    2: [
        PoolUnit("6", "Harvester", 2, 3, 2, Tribe.MECH),
        PoolUnit("7", "Tidehunter", 2, 3, 2, Tribe.MURLOC),
        PoolUnit("8", "Bonebreaker Hyena", 2, 4, 2, Tribe.BEAST),
        PoolUnit("9", "Demon Guard", 3, 4, 2, Tribe.DEMON),
        PoolUnit("10", "Volcanic Drake", 3, 3, 2, Tribe.DRAGON),
    ],
    3: [
        PoolUnit("11", "Iron Hound", 4, 4, 3, Tribe.MECH),
        PoolUnit("12", "Murloc Warleader", 3, 3, 3, Tribe.MURLOC),
        PoolUnit("13", "Jungle Stalker", 4, 5, 3, Tribe.BEAST),
        PoolUnit("14", "Abyssal Lord", 5, 4, 3, Tribe.DEMON),
        PoolUnit("15", "Bronze Warden", 4, 5, 3, Tribe.DRAGON),
    ],
}


def all_units() -> list[PoolUnit]:
    return [unit for tier in sorted(UNIT_POOL) for unit in UNIT_POOL[tier]]


def get_unit(unit_id: str) -> PoolUnit | None:
    for unit in all_units():
        if unit.unit_id == unit_id:
            return unit
    return None


def units_up_to_tier(tier: int) -> list[PoolUnit]:
    """Every pool unit at or below the given tier."""
    return [unit for unit in all_units() if unit.tier <= tier]


def opponent_roster_size(round_number: int) -> int:
    return min(round_number // 2 + 1, MAX_ROSTER_SIZE)


def opponent_max_tier(round_number: int) -> int:
    return max(1, min(math.ceil(round_number / 2), MAX_POOL_TIER))


def generate_opponent_roster(
    round_number: int,
    rng: random.Random | None = None,
) -> list[PoolUnit]:
    """
    Build an opponent board for a round.

    Later rounds field more units and unlock higher tiers. Each unit's tier
    is drawn uniformly from the unlocked tiers, then a unit is drawn
    uniformly from that tier.
    """
    if round_number < 1:
        raise ValueError("round_number must be >= 1")
    rng = rng or random.Random()

    max_tier = opponent_max_tier(round_number)
    roster = []
    for _ in range(opponent_roster_size(round_number)):
        tier = rng.randint(1, max_tier)
        roster.append(rng.choice(UNIT_POOL[tier]))
    return roster
