"""
Effect Descriptors - Closed description of what a card does.

Every battlecry, spell and deathrattle is described by one EffectDescriptor:
- kind: which primitive the resolver runs
- value: the numeric magnitude (damage, heal amount, cards drawn, mana)
- attack_delta / health_delta: for buffs
- summon: the unit a summon effect creates
- target_required: whether the player picks a target when playing the card
- side: which side's board/hero the target reference points into

The resolver matches exhaustively on EffectKind, so there is no runtime
shape-checking of payloads.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class EffectKind(Enum):
    """Primitive effects the resolver knows how to apply."""
    DAMAGE = "damage"
    HEAL = "heal"
    DRAW = "draw"
    AOE_DAMAGE = "aoe_damage"
    BUFF = "buff"
    BUFF_ALL = "buff_all"
    GAIN_MANA = "gain_mana"
    SUMMON = "summon"


class TargetSide(Enum):
    """Side a target reference is resolved against, relative to the source."""
    FRIENDLY = "friendly"
    ENEMY = "enemy"


# Kinds that hit the opposing side unless a descriptor says otherwise
_ENEMY_BY_DEFAULT = {EffectKind.DAMAGE, EffectKind.AOE_DAMAGE}


@dataclass(frozen=True)
class SummonSpec:
    """A unit created by a summon effect (usually a deathrattle)."""
    card_id: str
    name: str
    attack: int
    health: int
    cost: int = 0


@dataclass(frozen=True)
class EffectDescriptor:
    """
    A single effect attached to a card.

    Examples:
    - EffectDescriptor(EffectKind.DAMAGE, value=6, target_required=True)
    - EffectDescriptor(EffectKind.AOE_DAMAGE, value=4)
    - EffectDescriptor(EffectKind.SUMMON, summon=SummonSpec(...))
    """
    kind: EffectKind
    value: int = 0
    attack_delta: int = 0
    health_delta: int = 0
    summon: SummonSpec | None = None
    target_required: bool = False
    side: TargetSide | None = None

    @property
    def target_side(self) -> TargetSide:
        """Side the target reference points into."""
        if self.side is not None:
            return self.side
        if self.kind in _ENEMY_BY_DEFAULT:
            return TargetSide.ENEMY
        return TargetSide.FRIENDLY


# ============================================================================
# Helper constructors
# ============================================================================

def damage(value: int, target_required: bool = True) -> EffectDescriptor:
    return EffectDescriptor(EffectKind.DAMAGE, value=value, target_required=target_required)


def heal(value: int, target_required: bool = True) -> EffectDescriptor:
    return EffectDescriptor(EffectKind.HEAL, value=value, target_required=target_required)


def draw(count: int) -> EffectDescriptor:
    return EffectDescriptor(EffectKind.DRAW, value=count)


def aoe_damage(value: int) -> EffectDescriptor:
    return EffectDescriptor(EffectKind.AOE_DAMAGE, value=value)


def buff(attack_delta: int, health_delta: int, target_required: bool = True) -> EffectDescriptor:
    return EffectDescriptor(
        EffectKind.BUFF,
        attack_delta=attack_delta,
        health_delta=health_delta,
        target_required=target_required,
    )


def buff_all(attack_delta: int, health_delta: int) -> EffectDescriptor:
    """Buff every other friendly unit."""
    return EffectDescriptor(EffectKind.BUFF_ALL, attack_delta=attack_delta, health_delta=health_delta)


def gain_mana(value: int) -> EffectDescriptor:
    return EffectDescriptor(EffectKind.GAIN_MANA, value=value)


def summon(spec: SummonSpec) -> EffectDescriptor:
    return EffectDescriptor(EffectKind.SUMMON, summon=spec)
