"""
Reducer - Applies actions to duel state.

The reducer is the single point of state mutation.
All state changes must go through apply_action().

Design principles:
- (state, action) -> ActionResult with a new state
- Validates before applying
- Applies to a clone, so a rejected action never leaves a partial mutation
- Delegates card effects to EffectResolver
- Every accepted action ends with a CleanupPass
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import random

from ..catalog.cards import COIN, CardKind, Ability
from ..errors import ErrorKind
from .action import Action, ActionType, ActionResult, DuelEvent
from .cleanup import CleanupPass
from .effect_resolver import EffectResolver
from .state import (
    CardInstance,
    DuelPhase,
    DuelState,
    EndReason,
    UnitInstance,
    Weapon,
    HERO_TARGET,
)

logger = logging.getLogger(__name__)

FIRST_SIDE_OPENING_HAND = 3
SECOND_SIDE_OPENING_HAND = 4


@dataclass
class Reducer:
    """
    Reducer applies actions to duel state.

    Stateless apart from its random source (first turn, deck shuffle).
    """
    rng: random.Random = field(default_factory=random.Random)

    def apply(self, state: DuelState, action: Action) -> ActionResult:
        """
        Apply an action to the duel state.

        Returns ActionResult with new state or error. The input state is
        never modified.
        """
        validation_error = self._validate_action(state, action)
        if validation_error:
            return validation_error

        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                ErrorKind.ILLEGAL_ACTION,
            )

        new_state = state.clone()
        resolver = EffectResolver()
        try:
            return handler(new_state, action, resolver)
        except Exception:
            logger.exception("Handler failed for %s on duel %s", action.action_type, state.duel_id)
            return ActionResult.failure("Internal error while resolving action", ErrorKind.INTERNAL_ERROR)

    def _validate_action(self, state: DuelState, action: Action) -> ActionResult | None:
        """
        Validate phase and turn ownership.

        Returns a failure result if invalid, None if valid.
        """
        if action.action_type == ActionType.START:
            if state.phase != DuelPhase.WAITING:
                return ActionResult.failure("Duel has already started", ErrorKind.ILLEGAL_ACTION)
            return None

        if state.phase != DuelPhase.ACTIVE:
            return ActionResult.failure(
                f"Duel is {state.phase.value} - no actions allowed",
                ErrorKind.ILLEGAL_ACTION,
            )

        side = action.payload.side
        if side not in (0, 1):
            return ActionResult.failure(f"Unknown side: {side}", ErrorKind.ILLEGAL_ACTION)

        turn_actions = {ActionType.PLAY_CARD, ActionType.ATTACK, ActionType.END_TURN}
        if action.action_type in turn_actions and side != state.active_side:
            return ActionResult.failure(f"Not side {side}'s turn", ErrorKind.ILLEGAL_ACTION)

        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.START: self._handle_start,
            ActionType.PLAY_CARD: self._handle_play_card,
            ActionType.ATTACK: self._handle_attack,
            ActionType.END_TURN: self._handle_end_turn,
            ActionType.FORFEIT: self._handle_forfeit,
        }
        return handlers.get(action_type)

    def _finish(self, state: DuelState, resolver: EffectResolver) -> ActionResult:
        CleanupPass(resolver).run(state)
        return ActionResult.success_with_state(state, resolver.events)

    # =========================================================================
    # Handlers
    # =========================================================================

    def _handle_start(self, state: DuelState, action: Action, resolver: EffectResolver) -> ActionResult:
        """Pick the first side, deal opening hands, set mana to 1/1."""
        first = action.payload.params.get("first_side")
        if first is None:
            first = self.rng.randint(0, 1)
        second = DuelState.opponent_of(first)

        if action.payload.params.get("shuffle", True):
            for side in state.sides:
                self.rng.shuffle(side.deck)

        state.phase = DuelPhase.ACTIVE
        state.active_side = first
        state.turn_number = 1

        for _ in range(FIRST_SIDE_OPENING_HAND):
            resolver.draw(state, first)
        for _ in range(SECOND_SIDE_OPENING_HAND):
            resolver.draw(state, second)
        state.side(second).hand.append(
            CardInstance(instance_id=state.new_instance_id(), card=COIN)
        )

        for side in state.sides:
            side.mana.current = 1
            side.mana.max = 1

        resolver.events.append(DuelEvent("duel_started", {"first_side": first}))
        logger.info("Duel %s started, side %d goes first", state.duel_id, first)
        return self._finish(state, resolver)

    def _handle_play_card(self, state: DuelState, action: Action, resolver: EffectResolver) -> ActionResult:
        """Play a card from hand: pay mana, place/cast/equip, resolve effects."""
        side_index = action.payload.side
        side = state.side(side_index)
        hand_index = action.payload.hand_index
        target = action.payload.target

        if hand_index is None or hand_index < 0 or hand_index >= len(side.hand):
            return ActionResult.failure(f"No card at hand index {hand_index}", ErrorKind.INVALID_INDEX)

        card = side.hand[hand_index].card
        if card.cost > side.mana.available:
            return ActionResult.failure(
                f"{card.name} costs {card.cost}, only {side.mana.available} mana available",
                ErrorKind.INSUFFICIENT_MANA,
            )
        if card.kind == CardKind.UNIT and side.board_full:
            return ActionResult.failure("Board is full", ErrorKind.CAPACITY_EXCEEDED)

        side.hand.pop(hand_index)
        side.mana.spend(card.cost)
        resolver.events.append(DuelEvent("card_played", {
            "side": side_index,
            "card_id": card.card_id,
            "kind": card.kind.value,
            "target": target,
        }))

        if card.kind == CardKind.UNIT:
            unit = UnitInstance.from_card(card, state.new_instance_id("u"))
            side.board.append(unit)
            if card.battlecry is not None:
                resolver.resolve(
                    state,
                    card.battlecry,
                    source_side=side_index,
                    target=target,
                    source_instance_id=unit.instance_id,
                )
        elif card.kind == CardKind.SPELL:
            resolver.resolve(state, card.effect, source_side=side_index, target=target)
        elif card.kind == CardKind.WEAPON:
            side.weapon = Weapon.from_card(card)

        return self._finish(state, resolver)

    def _handle_attack(self, state: DuelState, action: Action, resolver: EffectResolver) -> ActionResult:
        """Attack with a unit (or the armed hero) into an enemy unit or hero."""
        side_index = action.payload.side
        side = state.side(side_index)
        enemy = state.side(DuelState.opponent_of(side_index))
        attacker_index = action.payload.attacker_index
        target = action.payload.target

        # Resolve the attacker
        hero_attack = attacker_index == HERO_TARGET
        if hero_attack:
            if side.weapon is None:
                return ActionResult.failure("Hero has no weapon equipped", ErrorKind.INVALID_ATTACKER)
            attack_value = side.weapon.attack
            acted = side.hero.attacked
            attacker = None
        else:
            attacker = side.unit_at(attacker_index)
            if attacker is None:
                return ActionResult.failure(f"No unit at board index {attacker_index}", ErrorKind.INVALID_ATTACKER)
            if attacker.attack <= 0:
                return ActionResult.failure(f"{attacker.name} has no attack", ErrorKind.INVALID_ATTACKER)
            attack_value = attacker.attack
            acted = attacker.acted

        # Resolve the target
        target_unit = None
        if target != HERO_TARGET:
            target_unit = enemy.unit_at(target)
            if target_unit is None:
                return ActionResult.failure(f"No enemy unit at board index {target}", ErrorKind.INVALID_TARGET)

        if acted:
            return ActionResult.failure("Attacker has already acted this turn", ErrorKind.ALREADY_ACTED)

        taunts = [u for u in enemy.board if u.has(Ability.TAUNT)]
        if taunts and (target_unit is None or not target_unit.has(Ability.TAUNT)):
            return ActionResult.failure("A unit with taunt must be attacked first", ErrorKind.INVALID_TARGET)

        resolver.events.append(DuelEvent("attack", {
            "side": side_index,
            "attacker": attacker_index,
            "target": target,
        }))

        # Damage exchange. Heroes never counter-attack.
        if target_unit is None:
            resolver.damage_hero(enemy, attack_value)
            counter = 0
        else:
            counter = target_unit.attack
            resolver.damage_unit(enemy, target_unit, attack_value)

        if hero_attack:
            if counter > 0:
                resolver.damage_hero(side, counter)
            side.hero.attacked = True
            side.weapon.durability -= 1
            if side.weapon.durability <= 0:
                resolver.events.append(DuelEvent("weapon_destroyed", {
                    "side": side_index,
                    "card_id": side.weapon.card_id,
                }))
                side.weapon = None
        else:
            resolver.damage_unit(side, attacker, counter)
            attacker.acted = True

        return self._finish(state, resolver)

    def _handle_end_turn(self, state: DuelState, action: Action, resolver: EffectResolver) -> ActionResult:
        """Pass the turn: grow and refill mana, draw, wake units."""
        ending = state.side(action.payload.side)
        ending.mana.temporary = 0

        next_index = DuelState.opponent_of(action.payload.side)
        state.active_side = next_index
        state.turn_number += 1
        side = state.side(next_index)

        side.mana.refill()
        resolver.events.append(DuelEvent("turn_started", {
            "side": next_index,
            "turn_number": state.turn_number,
            "mana": side.mana.max,
        }))
        resolver.draw(state, next_index)
        for unit in side.board:
            unit.acted = False
        side.hero.attacked = False

        return self._finish(state, resolver)

    def _handle_forfeit(self, state: DuelState, action: Action, resolver: EffectResolver) -> ActionResult:
        """A participant left: the remaining side wins immediately."""
        state.phase = DuelPhase.ENDED
        state.winner = DuelState.opponent_of(action.payload.side)
        state.end_reason = EndReason.DISCONNECT
        resolver.events.append(DuelEvent("duel_ended", {
            "winner": state.winner,
            "reason": state.end_reason.value,
        }))
        logger.info("Duel %s forfeited by side %d", state.duel_id, action.payload.side)
        return ActionResult.success_with_state(state, resolver.events)


def apply_action(state: DuelState, action: Action, rng: random.Random | None = None) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a reducer and applies the action.
    """
    reducer = Reducer(rng=rng) if rng is not None else Reducer()
    return reducer.apply(state, action)
