"""
Card Definitions - Immutable card data for the duel.

Card structure:
- Kind (unit, spell, weapon), each a separate frozen dataclass
- Cost (mana)
- Kind-specific fields (attack/health, spell effect, weapon durability)
- Ability tags (battlecry, deathrattle, charge, taunt, divine_shield)

Definitions are never mutated after load. Runtime copies live in
engine_core.state (UnitInstance, Weapon).
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

from . import effects
from .effects import EffectDescriptor, SummonSpec


class CardKind(Enum):
    """Card kinds. The duel dispatches on this tag."""
    UNIT = "unit"
    SPELL = "spell"
    WEAPON = "weapon"


class Ability(Enum):
    """Ability tags a unit can carry."""
    BATTLECRY = "battlecry"
    DEATHRATTLE = "deathrattle"
    CHARGE = "charge"
    TAUNT = "taunt"
    DIVINE_SHIELD = "divine_shield"


class Rarity(Enum):
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


@dataclass(frozen=True)
class CardDefinition(ABC):
    """Fields shared by every card kind."""
    card_id: str
    name: str
    cost: int
    description: str = ""
    rarity: Rarity = Rarity.COMMON
    card_class: str = "neutral"

    @property
    @abstractmethod
    def kind(self) -> CardKind:
        pass

    def __deepcopy__(self, memo):
        # Definitions are shared by every state clone
        return self


@dataclass(frozen=True)
class UnitCard(CardDefinition):
    """A unit (minion) card."""
    attack: int = 0
    health: int = 1
    abilities: frozenset[Ability] = field(default_factory=frozenset)
    battlecry: EffectDescriptor | None = None
    deathrattle: EffectDescriptor | None = None

    @property
    def kind(self) -> CardKind:
        return CardKind.UNIT

    def has(self, ability: Ability) -> bool:
        return ability in self.abilities


@dataclass(frozen=True)
class SpellCard(CardDefinition):
    """A spell card. Resolved once and discarded."""
    effect: EffectDescriptor = field(default_factory=lambda: effects.draw(0))

    @property
    def kind(self) -> CardKind:
        return CardKind.SPELL


@dataclass(frozen=True)
class WeaponCard(CardDefinition):
    """A weapon card. Replaces the hero's equipped weapon."""
    attack: int = 0
    durability: int = 1

    @property
    def kind(self) -> CardKind:
        return CardKind.WEAPON


def _abilities(*tags: Ability) -> frozenset[Ability]:
    return frozenset(tags)


# ============================================================================
# Basic units
# ============================================================================

FOOTMAN = UnitCard(
    card_id="basic_minion_1",
    name="Footman",
    cost=1,
    attack=1,
    health=2,
    abilities=_abilities(Ability.TAUNT),
    description="Taunt",
)

APPRENTICE_MAGE = UnitCard(
    card_id="basic_minion_2",
    name="Apprentice Mage",
    cost=2,
    attack=1,
    health=3,
    abilities=_abilities(Ability.BATTLECRY),
    battlecry=effects.damage(1),
    description="Battlecry: Deal 1 damage.",
)

CHARGING_WARRIOR = UnitCard(
    card_id="basic_minion_3",
    name="Charging Warrior",
    cost=3,
    attack=2,
    health=2,
    abilities=_abilities(Ability.CHARGE),
    description="Charge",
)

SQUAD_LEADER = UnitCard(
    card_id="basic_minion_4",
    name="Squad Leader",
    cost=3,
    attack=2,
    health=2,
    abilities=_abilities(Ability.BATTLECRY),
    battlecry=effects.buff_all(1, 0),
    description="Battlecry: Give your other units +1 Attack.",
)

GHOUL = UnitCard(
    card_id="basic_minion_5",
    name="Ghoul",
    cost=3,
    attack=2,
    health=3,
    abilities=_abilities(Ability.DEATHRATTLE),
    deathrattle=effects.draw(1),
    description="Deathrattle: Draw a card.",
)

STORMWIND_KNIGHT = UnitCard(
    card_id="basic_minion_6",
    name="Stormwind Knight",
    cost=4,
    attack=2,
    health=5,
    abilities=_abilities(Ability.TAUNT),
    description="Taunt",
)

EXPLOSIVE_ENGINEER = UnitCard(
    card_id="basic_minion_7",
    name="Explosive Engineer",
    cost=5,
    attack=3,
    health=3,
    abilities=_abilities(Ability.DEATHRATTLE),
    deathrattle=effects.aoe_damage(2),
    description="Deathrattle: Deal 2 damage to all enemy units.",
    rarity=Rarity.RARE,
)

FIELD_COMMANDER = UnitCard(
    card_id="basic_minion_8",
    name="Field Commander",
    cost=6,
    attack=4,
    health=5,
    abilities=_abilities(Ability.BATTLECRY),
    battlecry=effects.buff_all(2, 2),
    description="Battlecry: Give your other units +2/+2.",
    rarity=Rarity.RARE,
)

EGG_SAC = UnitCard(
    card_id="basic_minion_9",
    name="Egg Sac",
    cost=2,
    attack=0,
    health=2,
    abilities=_abilities(Ability.DEATHRATTLE),
    deathrattle=effects.summon(
        SummonSpec(card_id="token_hatchling", name="Hatchling", attack=4, health=4, cost=4)
    ),
    description="Deathrattle: Summon a 4/4 Hatchling.",
    rarity=Rarity.RARE,
)

SHIELDED_SQUIRE = UnitCard(
    card_id="basic_minion_10",
    name="Shielded Squire",
    cost=1,
    attack=1,
    health=1,
    abilities=_abilities(Ability.DIVINE_SHIELD),
    description="Divine Shield",
)

# ============================================================================
# Basic spells
# ============================================================================

FIREBALL = SpellCard(
    card_id="basic_spell_1",
    name="Fireball",
    cost=4,
    effect=effects.damage(6),
    description="Deal 6 damage.",
    card_class="mage",
)

HEALING_TOUCH = SpellCard(
    card_id="basic_spell_2",
    name="Healing Touch",
    cost=3,
    effect=effects.heal(8),
    description="Restore 8 Health.",
    card_class="priest",
)

ARCANE_INTELLECT = SpellCard(
    card_id="basic_spell_3",
    name="Arcane Intellect",
    cost=3,
    effect=effects.draw(2),
    description="Draw 2 cards.",
    card_class="mage",
)

FLAMESTRIKE = SpellCard(
    card_id="basic_spell_4",
    name="Flamestrike",
    cost=7,
    effect=effects.aoe_damage(4),
    description="Deal 4 damage to all enemy units.",
    rarity=Rarity.RARE,
    card_class="mage",
)

# Given to the second player at the start of the duel
COIN = SpellCard(
    card_id="coin",
    name="The Coin",
    cost=0,
    effect=effects.gain_mana(1),
    description="Gain 1 Mana Crystal this turn only.",
)

# ============================================================================
# Basic weapons
# ============================================================================

BATTLE_AXE = WeaponCard(
    card_id="basic_weapon_1",
    name="Battle Axe",
    cost=3,
    attack=3,
    durability=2,
    card_class="warrior",
)

LIGHT_DAGGER = WeaponCard(
    card_id="basic_weapon_2",
    name="Light Dagger",
    cost=1,
    attack=1,
    durability=2,
    card_class="rogue",
)


BASIC_CARDS: list[CardDefinition] = [
    FOOTMAN,
    APPRENTICE_MAGE,
    CHARGING_WARRIOR,
    SQUAD_LEADER,
    GHOUL,
    STORMWIND_KNIGHT,
    EXPLOSIVE_ENGINEER,
    FIELD_COMMANDER,
    EGG_SAC,
    SHIELDED_SQUIRE,
    FIREBALL,
    HEALING_TOUCH,
    ARCANE_INTELLECT,
    FLAMESTRIKE,
    COIN,
    BATTLE_AXE,
    LIGHT_DAGGER,
]


PRESET_DECKS: dict[str, list[str]] = {
    "warrior": [
        "basic_minion_1", "basic_minion_1",
        "basic_minion_3", "basic_minion_3",
        "basic_minion_4", "basic_minion_4",
        "basic_minion_5", "basic_minion_5",
        "basic_minion_6", "basic_minion_6",
        "basic_minion_7", "basic_minion_7",
        "basic_minion_8", "basic_minion_8",
        "basic_weapon_1", "basic_weapon_1",
        "basic_spell_2", "basic_spell_2",
        "basic_spell_3", "basic_spell_3",
    ],
    "mage": [
        "basic_minion_1", "basic_minion_1",
        "basic_minion_2", "basic_minion_2",
        "basic_minion_4", "basic_minion_4",
        "basic_minion_5", "basic_minion_5",
        "basic_minion_6", "basic_minion_6",
        "basic_minion_7", "basic_minion_7",
        "basic_minion_8",
        "basic_spell_1", "basic_spell_1",
        "basic_spell_3", "basic_spell_3",
        "basic_spell_4", "basic_spell_4",
    ],
}
