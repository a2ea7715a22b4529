"""
Duel State - Authoritative state of one duel.

Design principles:
- One DuelState per session, owned by the session
- Mutated only by the Reducer (which works on a clone and commits on success)
- Serializable: snapshot() produces a JSON-ready dict, redacted per viewer
- Card definitions are shared; runtime instances are copies
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
from copy import deepcopy
from enum import Enum

from ..catalog.cards import Ability, CardDefinition, CardKind, UnitCard, WeaponCard
from ..catalog.effects import EffectDescriptor, SummonSpec

MAX_BOARD_SIZE = 7
MAX_HAND_SIZE = 10
MAX_MANA = 10
HERO_MAX_HEALTH = 30

# Target reference sentinel for "the hero" (unit references are board indices)
HERO_TARGET = -1


class DuelPhase(Enum):
    """Lifecycle of a duel."""
    WAITING = "waiting"
    ACTIVE = "active"
    ENDED = "ended"


class EndReason(Enum):
    HERO_DEFEATED = "hero_defeated"
    DRAW = "draw"
    DISCONNECT = "disconnect"


@dataclass
class CardInstance:
    """A card in a hand or deck. The definition is shared and immutable."""
    instance_id: str
    card: CardDefinition

    @property
    def card_id(self) -> str:
        return self.card.card_id


@dataclass
class UnitInstance:
    """
    A live unit on a board.

    Derived from a UnitCard (or a SummonSpec) at play time. Health may go
    to or below zero between a damage step and the next cleanup pass.
    """
    instance_id: str
    card_id: str
    name: str
    attack: int
    health: int
    max_health: int
    abilities: set[Ability] = field(default_factory=set)
    acted: bool = True
    deathrattle: EffectDescriptor | None = None

    @classmethod
    def from_card(cls, card: UnitCard, instance_id: str) -> UnitInstance:
        return cls(
            instance_id=instance_id,
            card_id=card.card_id,
            name=card.name,
            attack=card.attack,
            health=card.health,
            max_health=card.health,
            abilities=set(card.abilities),
            acted=Ability.CHARGE not in card.abilities,
            deathrattle=card.deathrattle,
        )

    @classmethod
    def from_summon(cls, spec: SummonSpec, instance_id: str) -> UnitInstance:
        """Summoned units cannot attack until their owner's next turn."""
        return cls(
            instance_id=instance_id,
            card_id=spec.card_id,
            name=spec.name,
            attack=spec.attack,
            health=spec.health,
            max_health=spec.health,
            acted=True,
        )

    @property
    def is_dead(self) -> bool:
        return self.health <= 0

    def has(self, ability: Ability) -> bool:
        return ability in self.abilities


@dataclass
class Weapon:
    """An equipped weapon."""
    card_id: str
    name: str
    attack: int
    durability: int

    @classmethod
    def from_card(cls, card: WeaponCard) -> Weapon:
        return cls(
            card_id=card.card_id,
            name=card.name,
            attack=card.attack,
            durability=card.durability,
        )


@dataclass
class Hero:
    """A side's hero. Health has no floor; <= 0 ends the duel."""
    health: int = HERO_MAX_HEALTH
    armor: int = 0
    attacked: bool = False

    @property
    def attack(self) -> int:
        # Heroes never counter-attack
        return 0

    def take_damage(self, amount: int) -> int:
        """Apply damage, armor first. Returns damage dealt to health."""
        absorbed = min(self.armor, amount)
        self.armor -= absorbed
        self.health -= amount - absorbed
        return amount - absorbed


@dataclass
class Mana:
    """
    current <= max <= MAX_MANA at all times.

    temporary holds one-shot mana (e.g. The Coin) that is spent first and
    expires at the end of the turn.
    """
    current: int = 0
    max: int = 0
    temporary: int = 0

    @property
    def available(self) -> int:
        return self.current + self.temporary

    def spend(self, cost: int) -> None:
        from_temporary = min(self.temporary, cost)
        self.temporary -= from_temporary
        self.current -= cost - from_temporary

    def refill(self) -> None:
        """Grow max by one (up to MAX_MANA) and refill current."""
        self.max = min(MAX_MANA, self.max + 1)
        self.current = self.max
        self.temporary = 0


@dataclass
class SideState:
    """
    State for one side of a duel.

    hand: draw order
    board: play order, at most MAX_BOARD_SIZE units
    deck: remaining draw pile, top first
    """
    side: int
    name: str = ""
    hand: list[CardInstance] = field(default_factory=list)
    board: list[UnitInstance] = field(default_factory=list)
    deck: list[CardInstance] = field(default_factory=list)
    hero: Hero = field(default_factory=Hero)
    mana: Mana = field(default_factory=Mana)
    weapon: Weapon | None = None
    fatigue: int = 0

    @property
    def board_full(self) -> bool:
        return len(self.board) >= MAX_BOARD_SIZE

    def unit_at(self, index: int | None) -> UnitInstance | None:
        """Unit at a board index, or None if the reference is stale."""
        if index is None or index < 0 or index >= len(self.board):
            return None
        return self.board[index]

    def living_units(self) -> list[UnitInstance]:
        return [u for u in self.board if not u.is_dead]


@dataclass
class DuelState:
    """
    Complete duel state at a point in time.

    This is the canonical state the engine operates on.
    All state changes go through the reducer.
    """
    duel_id: str
    phase: DuelPhase = DuelPhase.WAITING
    active_side: int | None = None
    turn_number: int = 0
    sides: list[SideState] = field(default_factory=lambda: [SideState(side=0), SideState(side=1)])
    winner: int | None = None
    end_reason: EndReason | None = None

    # Counter for unique instance ids
    next_instance: int = 0

    def side(self, index: int) -> SideState:
        return self.sides[index]

    @staticmethod
    def opponent_of(index: int) -> int:
        return 1 - index

    @property
    def is_active(self) -> bool:
        return self.phase == DuelPhase.ACTIVE

    def new_instance_id(self, prefix: str = "c") -> str:
        self.next_instance += 1
        return f"{prefix}{self.next_instance}"

    def load_deck(self, index: int, cards: list[CardDefinition]) -> None:
        """Put an ordered list of definitions in a side's deck."""
        self.sides[index].deck = [
            CardInstance(instance_id=self.new_instance_id(), card=card)
            for card in cards
        ]

    def clone(self) -> DuelState:
        """Deep copy the state (definitions are shared)."""
        return deepcopy(self)

    def snapshot(self, viewer: int | None = None) -> dict[str, Any]:
        """
        Serialize the state for a viewer.

        The viewer's own hand and deck are shown in full. The opponent's
        hand and deck collapse to counts. viewer=None hides both hands
        (spectator view).
        """
        return {
            "duel_id": self.duel_id,
            "phase": self.phase.value,
            "active_side": self.active_side,
            "turn_number": self.turn_number,
            "winner": self.winner,
            "end_reason": self.end_reason.value if self.end_reason else None,
            "viewer": viewer,
            "sides": [
                _side_snapshot(side, revealed=(viewer == side.side))
                for side in self.sides
            ],
        }


# ============================================================================
# Serialization helpers
# ============================================================================

def card_summary(card: CardDefinition) -> dict[str, Any]:
    """JSON-ready description of a card definition."""
    data: dict[str, Any] = {
        "card_id": card.card_id,
        "name": card.name,
        "cost": card.cost,
        "kind": card.kind.value,
        "description": card.description,
        "rarity": card.rarity.value,
        "card_class": card.card_class,
    }
    if card.kind == CardKind.UNIT:
        data["attack"] = card.attack
        data["health"] = card.health
        data["abilities"] = sorted(a.value for a in card.abilities)
    elif card.kind == CardKind.WEAPON:
        data["attack"] = card.attack
        data["durability"] = card.durability
    else:
        data["target_required"] = card.effect.target_required
    return data


def unit_summary(unit: UnitInstance) -> dict[str, Any]:
    return {
        "instance_id": unit.instance_id,
        "card_id": unit.card_id,
        "name": unit.name,
        "attack": unit.attack,
        "health": unit.health,
        "max_health": unit.max_health,
        "abilities": sorted(a.value for a in unit.abilities),
        "acted": unit.acted,
    }


def _hand_card(instance: CardInstance) -> dict[str, Any]:
    data = card_summary(instance.card)
    data["instance_id"] = instance.instance_id
    return data


def _side_snapshot(side: SideState, revealed: bool) -> dict[str, Any]:
    data: dict[str, Any] = {
        "side": side.side,
        "name": side.name,
        "hero": {"health": side.hero.health, "armor": side.hero.armor},
        "mana": {
            "current": side.mana.current,
            "max": side.mana.max,
            "temporary": side.mana.temporary,
        },
        "weapon": (
            {
                "card_id": side.weapon.card_id,
                "name": side.weapon.name,
                "attack": side.weapon.attack,
                "durability": side.weapon.durability,
            }
            if side.weapon else None
        ),
        "fatigue": side.fatigue,
        "board": [unit_summary(u) for u in side.board],
        "hand_count": len(side.hand),
        "deck_count": len(side.deck),
    }
    if revealed:
        data["hand"] = [_hand_card(c) for c in side.hand]
        data["deck"] = [_hand_card(c) for c in side.deck]
    return data
