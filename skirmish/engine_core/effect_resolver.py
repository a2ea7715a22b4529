"""
Effect Resolver - Applies effect descriptors to a duel state.

This module handles:
- Spell effects
- Battlecries (after the unit has been placed)
- Deathrattles (called by the cleanup pass)
- The shared draw operation (with fatigue)

Target references that resolve to nothing are a silent no-op here. By the
time nested resolution runs, a reference may have gone stale because of an
earlier step in the same chain (e.g. the target already died). Validation
of top-level references belongs to the reducer.

The resolver never removes dead units; that is the cleanup pass's job.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import logging

from ..catalog.cards import Ability
from ..catalog.effects import EffectDescriptor, EffectKind, TargetSide
from .action import DuelEvent
from .state import (
    DuelState,
    SideState,
    UnitInstance,
    CardInstance,
    HERO_MAX_HEALTH,
    HERO_TARGET,
    MAX_HAND_SIZE,
)

logger = logging.getLogger(__name__)

Handler = Callable[[DuelState, EffectDescriptor, int, "int | None", "str | None"], None]


@dataclass
class EffectResolver:
    """
    Resolves effects against a state it does not own.

    Events produced during resolution are appended to `events` in order.
    """
    events: list[DuelEvent] = field(default_factory=list)

    def resolve(
        self,
        state: DuelState,
        effect: EffectDescriptor,
        source_side: int,
        target: int | None = None,
        source_instance_id: str | None = None,
    ) -> None:
        """
        Resolve one effect.

        Args:
            state: Duel state to mutate
            effect: The descriptor to apply
            source_side: Side that owns the card producing the effect
            target: Board index or HERO_TARGET, into effect.target_side
            source_instance_id: The unit producing the effect, if any
        """
        handler = self._get_handler(effect.kind)
        if handler is None:
            raise ValueError(f"No handler for effect kind: {effect.kind}")
        handler(state, effect, source_side, target, source_instance_id)

    def target_side_index(self, effect: EffectDescriptor, source_side: int) -> int:
        if effect.target_side == TargetSide.ENEMY:
            return DuelState.opponent_of(source_side)
        return source_side

    def _get_handler(self, kind: EffectKind) -> Handler | None:
        handlers = {
            EffectKind.DAMAGE: self._handle_damage,
            EffectKind.HEAL: self._handle_heal,
            EffectKind.DRAW: self._handle_draw,
            EffectKind.AOE_DAMAGE: self._handle_aoe_damage,
            EffectKind.BUFF: self._handle_buff,
            EffectKind.BUFF_ALL: self._handle_buff_all,
            EffectKind.GAIN_MANA: self._handle_gain_mana,
            EffectKind.SUMMON: self._handle_summon,
        }
        return handlers.get(kind)

    # =========================================================================
    # Handlers
    # =========================================================================

    def _handle_damage(self, state, effect, source_side, target, source_id):
        side_index = self.target_side_index(effect, source_side)
        self.damage(state, side_index, target, effect.value)

    def _handle_heal(self, state, effect, source_side, target, source_id):
        side_index = self.target_side_index(effect, source_side)
        self.heal(state, side_index, target, effect.value)

    def _handle_draw(self, state, effect, source_side, target, source_id):
        for _ in range(effect.value):
            self.draw(state, source_side)

    def _handle_aoe_damage(self, state, effect, source_side, target, source_id):
        side_index = self.target_side_index(effect, source_side)
        self.aoe_damage(state, side_index, effect.value)

    def _handle_buff(self, state, effect, source_side, target, source_id):
        side_index = self.target_side_index(effect, source_side)
        unit = state.side(side_index).unit_at(target)
        if unit is None:
            return
        self.buff(state, side_index, unit, effect.attack_delta, effect.health_delta)

    def _handle_buff_all(self, state, effect, source_side, target, source_id):
        side_index = self.target_side_index(effect, source_side)
        for unit in list(state.side(side_index).board):
            if unit.instance_id == source_id or unit.is_dead:
                continue
            self.buff(state, side_index, unit, effect.attack_delta, effect.health_delta)

    def _handle_gain_mana(self, state, effect, source_side, target, source_id):
        self.gain_mana(state, source_side, effect.value)

    def _handle_summon(self, state, effect, source_side, target, source_id):
        if effect.summon is None:
            return
        side = state.side(self.target_side_index(effect, source_side))
        if side.board_full:
            self.events.append(DuelEvent("summon_suppressed", {
                "side": side.side,
                "card_id": effect.summon.card_id,
                "reason": "board_full",
            }))
            return
        unit = UnitInstance.from_summon(effect.summon, state.new_instance_id("u"))
        side.board.append(unit)
        self.events.append(DuelEvent("unit_summoned", {
            "side": side.side,
            "instance_id": unit.instance_id,
            "card_id": unit.card_id,
            "index": len(side.board) - 1,
        }))

    # =========================================================================
    # Primitives
    # =========================================================================

    def damage(self, state: DuelState, side_index: int, target: int | None, amount: int) -> None:
        """Damage the hero or a unit on a side. Stale references do nothing."""
        side = state.side(side_index)
        if target == HERO_TARGET:
            self.damage_hero(side, amount)
            return
        unit = side.unit_at(target)
        if unit is not None:
            self.damage_unit(side, unit, amount)

    def damage_hero(self, side: SideState, amount: int) -> None:
        dealt = side.hero.take_damage(amount)
        self.events.append(DuelEvent("hero_damaged", {
            "side": side.side,
            "amount": dealt,
            "health": side.hero.health,
        }))

    def damage_unit(self, side: SideState, unit: UnitInstance, amount: int) -> None:
        """Damage a unit. No clamp: health may go negative until cleanup."""
        if amount <= 0:
            return
        if unit.has(Ability.DIVINE_SHIELD):
            unit.abilities.discard(Ability.DIVINE_SHIELD)
            self.events.append(DuelEvent("divine_shield_popped", {
                "side": side.side,
                "instance_id": unit.instance_id,
            }))
            return
        unit.health -= amount
        self.events.append(DuelEvent("unit_damaged", {
            "side": side.side,
            "instance_id": unit.instance_id,
            "amount": amount,
            "health": unit.health,
        }))

    def heal(self, state: DuelState, side_index: int, target: int | None, amount: int) -> None:
        """Heal the hero (capped at HERO_MAX_HEALTH) or a unit (capped at max health)."""
        side = state.side(side_index)
        if target == HERO_TARGET:
            before = side.hero.health
            side.hero.health = min(HERO_MAX_HEALTH, side.hero.health + amount)
            healed = max(0, side.hero.health - before)
            self.events.append(DuelEvent("hero_healed", {
                "side": side.side,
                "amount": healed,
                "health": side.hero.health,
            }))
            return
        unit = side.unit_at(target)
        if unit is None:
            return
        before = unit.health
        unit.health = min(unit.max_health, unit.health + amount)
        self.events.append(DuelEvent("unit_healed", {
            "side": side.side,
            "instance_id": unit.instance_id,
            "amount": max(0, unit.health - before),
            "health": unit.health,
        }))

    def aoe_damage(self, state: DuelState, side_index: int, amount: int) -> None:
        """Damage every unit on a side. Deaths are resolved afterwards by cleanup."""
        side = state.side(side_index)
        for unit in list(side.board):
            self.damage_unit(side, unit, amount)

    def buff(self, state: DuelState, side_index: int, unit: UnitInstance,
             attack_delta: int, health_delta: int) -> None:
        unit.attack += attack_delta
        unit.health += health_delta
        unit.max_health += health_delta
        self.events.append(DuelEvent("unit_buffed", {
            "side": side_index,
            "instance_id": unit.instance_id,
            "attack": unit.attack,
            "health": unit.health,
        }))

    def gain_mana(self, state: DuelState, side_index: int, value: int) -> None:
        """One-shot mana for this turn only. Max mana is unchanged."""
        mana = state.side(side_index).mana
        mana.temporary += value
        self.events.append(DuelEvent("mana_gained", {
            "side": side_index,
            "amount": value,
            "available": mana.available,
        }))

    def draw(self, state: DuelState, side_index: int) -> CardInstance | None:
        """
        Draw the top card of a side's deck.

        Empty deck: the hero takes fatigue damage (1, then 2, then 3, ...)
        and nothing is added to the hand. Full hand: the card is burned.
        """
        side = state.side(side_index)
        if not side.deck:
            side.fatigue += 1
            self.events.append(DuelEvent("fatigue", {
                "side": side_index,
                "amount": side.fatigue,
            }))
            self.damage_hero(side, side.fatigue)
            return None

        card = side.deck.pop(0)
        if len(side.hand) >= MAX_HAND_SIZE:
            self.events.append(DuelEvent("card_burned", {
                "side": side_index,
                "card_id": card.card_id,
            }))
            return None

        side.hand.append(card)
        self.events.append(DuelEvent("card_drawn", {"side": side_index}))
        return card
