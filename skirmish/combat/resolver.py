"""
Combat Resolver - Unattended autobattler combat.

Given two roster snapshots, sides take turns attacking until one side has
no living units or the step cap is reached:

1. The first acting side is chosen uniformly at random
2. The attacker is usually the acting side's highest-attack unit
3. The defender is usually the other side's lowest-health unit
4. Both units damage each other simultaneously (at least 1 each)
5. Units at or below zero health are marked dead
6. The acting side flips

The winner deals damage equal to the summed tier of its living units.
Selection noise keeps combats from being fully predictable while still
favouring sensible trades. The resolver is pure computation over copies
and never touches live duel state.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable
import logging
import random

from .roster import RosterUnit, living, snapshot_roster

logger = logging.getLogger(__name__)

# Selection tuning
ATTACKER_FOCUS_CHANCE = 0.8
DEFENDER_FOCUS_CHANCE = 0.7
MAX_COMBAT_STEPS = 50


class CombatSide(Enum):
    PLAYER = "player"
    OPPONENT = "opponent"

    @property
    def other(self) -> CombatSide:
        return CombatSide.OPPONENT if self is CombatSide.PLAYER else CombatSide.PLAYER


class CombatResult(Enum):
    """Result from the player's perspective."""
    WIN = "win"
    LOSS = "loss"
    TIE = "tie"


@dataclass
class CombatEvent:
    """One entry of the playback log."""
    step: int
    kind: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"step": self.step, "kind": self.kind, **self.data}


@dataclass
class CombatOutcome:
    """
    Result of one combat.

    damage is dealt to the losing player (zero on a tie).
    player/opponent hold the final roster state, dead units included.
    """
    result: CombatResult
    damage: int
    events: list[CombatEvent]
    steps: int
    player: list[RosterUnit]
    opponent: list[RosterUnit]
    round_number: int = 1
    hit_step_cap: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "result": self.result.value,
            "damage": self.damage,
            "steps": self.steps,
            "round_number": self.round_number,
            "hit_step_cap": self.hit_step_cap,
            "events": [e.to_dict() for e in self.events],
            "player": [u.to_dict() for u in self.player],
            "opponent": [u.to_dict() for u in self.opponent],
        }


class CombatResolver:
    """
    Simulates autobattler combat.

    Usage:
        resolver = CombatResolver()
        outcome = resolver.resolve(player_units, opponent_units, round_number=3)

    rng defaults to an unseeded random.Random; pass one to steer tests.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def resolve(
        self,
        player: Iterable[Any],
        opponent: Iterable[Any],
        round_number: int = 1,
    ) -> CombatOutcome:
        """
        Run one combat to completion.

        Args:
            player: The player's units (copied, never mutated)
            opponent: The opponent's units (copied, never mutated)
            round_number: Display label only

        Returns:
            CombatOutcome with result, damage and the event log
        """
        rosters = {
            CombatSide.PLAYER: snapshot_roster(player),
            CombatSide.OPPONENT: snapshot_roster(opponent),
        }
        events: list[CombatEvent] = [
            CombatEvent(0, "combat_started", {
                "round_number": round_number,
                "player": [u.to_dict() for u in rosters[CombatSide.PLAYER]],
                "opponent": [u.to_dict() for u in rosters[CombatSide.OPPONENT]],
            })
        ]

        steps = 0
        hit_cap = False
        if self._both_alive(rosters):
            acting = CombatSide.PLAYER if self.rng.random() < 0.5 else CombatSide.OPPONENT
            events.append(CombatEvent(0, "first_attacker", {"side": acting.value}))

            while True:
                if steps >= MAX_COMBAT_STEPS:
                    hit_cap = True
                    events.append(CombatEvent(steps, "step_cap_reached", {"cap": MAX_COMBAT_STEPS}))
                    break
                steps += 1
                self._exchange(steps, acting, rosters, events)
                if not self._both_alive(rosters):
                    break
                acting = acting.other

        return self._finish(rosters, events, steps, round_number, hit_cap)

    # =========================================================================
    # Steps
    # =========================================================================

    def _both_alive(self, rosters: dict[CombatSide, list[RosterUnit]]) -> bool:
        return all(living(roster) for roster in rosters.values())

    def _select(
        self,
        units: list[RosterUnit],
        key: Callable[[RosterUnit], int],
        focus_chance: float,
    ) -> RosterUnit:
        """Usually the best unit by key, otherwise a uniformly random one."""
        ordered = sorted(units, key=key)
        if self.rng.random() < focus_chance:
            return ordered[0]
        return self.rng.choice(units)

    def select_attacker(self, units: list[RosterUnit]) -> RosterUnit:
        return self._select(units, lambda u: -u.attack, ATTACKER_FOCUS_CHANCE)

    def select_defender(self, units: list[RosterUnit]) -> RosterUnit:
        return self._select(units, lambda u: u.health, DEFENDER_FOCUS_CHANCE)

    def _exchange(
        self,
        step: int,
        acting: CombatSide,
        rosters: dict[CombatSide, list[RosterUnit]],
        events: list[CombatEvent],
    ) -> None:
        attacker_roster = rosters[acting]
        defender_roster = rosters[acting.other]
        attacker = self.select_attacker(living(attacker_roster))
        defender = self.select_defender(living(defender_roster))

        events.append(CombatEvent(step, "attack", {
            "side": acting.value,
            "attacker": attacker_roster.index(attacker),
            "defender": defender_roster.index(defender),
            "attacker_name": attacker.name,
            "defender_name": defender.name,
        }))

        # Both hits land before either death is checked
        to_defender = max(1, attacker.attack)
        to_attacker = max(1, defender.attack)
        defender.health -= to_defender
        attacker.health -= to_attacker

        events.append(CombatEvent(step, "damage", {
            "side": acting.other.value,
            "index": defender_roster.index(defender),
            "amount": to_defender,
            "health": defender.health,
        }))
        events.append(CombatEvent(step, "damage", {
            "side": acting.value,
            "index": attacker_roster.index(attacker),
            "amount": to_attacker,
            "health": attacker.health,
        }))

        for side, roster, unit in (
            (acting.other, defender_roster, defender),
            (acting, attacker_roster, attacker),
        ):
            if unit.health <= 0 and not unit.dead:
                unit.dead = True
                events.append(CombatEvent(step, "death", {
                    "side": side.value,
                    "index": roster.index(unit),
                    "name": unit.name,
                }))

    def _finish(
        self,
        rosters: dict[CombatSide, list[RosterUnit]],
        events: list[CombatEvent],
        steps: int,
        round_number: int,
        hit_cap: bool,
    ) -> CombatOutcome:
        player_alive = living(rosters[CombatSide.PLAYER])
        opponent_alive = living(rosters[CombatSide.OPPONENT])

        if player_alive and not opponent_alive:
            result = CombatResult.WIN
            damage = sum(u.tier for u in player_alive)
        elif opponent_alive and not player_alive:
            result = CombatResult.LOSS
            damage = sum(u.tier for u in opponent_alive)
        else:
            result = CombatResult.TIE
            damage = 0

        events.append(CombatEvent(steps, "combat_ended", {
            "result": result.value,
            "damage": damage,
        }))
        logger.info(
            "Combat round %d resolved: %s for %d damage after %d step(s)",
            round_number,
            result.value,
            damage,
            steps,
        )
        return CombatOutcome(
            result=result,
            damage=damage,
            events=events,
            steps=steps,
            player=rosters[CombatSide.PLAYER],
            opponent=rosters[CombatSide.OPPONENT],
            round_number=round_number,
            hit_step_cap=hit_cap,
        )
