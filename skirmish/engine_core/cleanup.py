"""
Cleanup Pass - Removes dead units and fires their deathrattles.

Runs after every operation that can reduce health. A deathrattle can
damage other units, so the sweep repeats until a full pass over both
boards removes nothing. The loop has a hard ceiling so adversarial
deathrattle chains always terminate.

After the boards are stable, hero health decides whether the duel ends.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging

from .action import DuelEvent
from .effect_resolver import EffectResolver
from .state import DuelPhase, DuelState, EndReason, SideState, UnitInstance

logger = logging.getLogger(__name__)

MAX_CLEANUP_PASSES = 32


def _index_of(board: list[UnitInstance], unit: UnitInstance) -> int | None:
    for i, candidate in enumerate(board):
        if candidate is unit:
            return i
    return None


@dataclass
class CleanupPass:
    """Fixed-point sweep over both boards."""
    resolver: EffectResolver

    def run(self, state: DuelState) -> int:
        """
        Sweep until stable, then run the terminal check.

        Returns the number of units removed.
        """
        removed_total = 0
        for pass_number in range(MAX_CLEANUP_PASSES):
            removed = self._sweep(state)
            removed_total += removed
            if removed == 0:
                break
            logger.debug("Cleanup pass %d removed %d unit(s)", pass_number + 1, removed)
        else:
            logger.warning(
                "Cleanup hit %d passes on duel %s; dropping remaining dead units",
                MAX_CLEANUP_PASSES,
                state.duel_id,
            )
            for side in state.sides:
                for unit in [u for u in side.board if u.is_dead]:
                    self._remove(side, unit)
                    removed_total += 1

        self.check_terminal(state)
        return removed_total

    def _sweep(self, state: DuelState) -> int:
        removed = 0
        for side in state.sides:
            for unit in list(side.board):
                if not unit.is_dead:
                    continue
                if not self._remove(side, unit):
                    continue
                removed += 1
                if unit.deathrattle is not None:
                    self.resolver.events.append(DuelEvent("deathrattle", {
                        "side": side.side,
                        "instance_id": unit.instance_id,
                        "effect": unit.deathrattle.kind.value,
                    }))
                    self.resolver.resolve(
                        state,
                        unit.deathrattle,
                        source_side=side.side,
                        target=None,
                        source_instance_id=unit.instance_id,
                    )
        return removed

    def _remove(self, side: SideState, unit: UnitInstance) -> bool:
        index = _index_of(side.board, unit)
        if index is None:
            return False
        side.board.pop(index)
        self.resolver.events.append(DuelEvent("unit_died", {
            "side": side.side,
            "instance_id": unit.instance_id,
            "card_id": unit.card_id,
        }))
        return True

    def check_terminal(self, state: DuelState) -> bool:
        """End the duel if a hero is at or below zero health."""
        if state.phase != DuelPhase.ACTIVE:
            return False
        dead = [side.side for side in state.sides if side.hero.health <= 0]
        if not dead:
            return False

        state.phase = DuelPhase.ENDED
        if len(dead) == 2:
            state.winner = None
            state.end_reason = EndReason.DRAW
        else:
            state.winner = DuelState.opponent_of(dead[0])
            state.end_reason = EndReason.HERO_DEFEATED
        self.resolver.events.append(DuelEvent("duel_ended", {
            "winner": state.winner,
            "reason": state.end_reason.value,
        }))
        logger.info(
            "Duel %s ended: winner=%s reason=%s",
            state.duel_id,
            state.winner,
            state.end_reason.value,
        )
        return True
