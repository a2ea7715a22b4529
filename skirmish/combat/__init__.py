"""
Combat - Autobattler combat resolution.

Two rosters fight unattended; the result and a playback log come back.
"""

from .roster import RosterUnit, snapshot_roster, to_roster_unit, living
from .resolver import (
    CombatResolver,
    CombatOutcome,
    CombatEvent,
    CombatResult,
    CombatSide,
    ATTACKER_FOCUS_CHANCE,
    DEFENDER_FOCUS_CHANCE,
    MAX_COMBAT_STEPS,
)

__all__ = [
    "RosterUnit",
    "snapshot_roster",
    "to_roster_unit",
    "living",
    "CombatResolver",
    "CombatOutcome",
    "CombatEvent",
    "CombatResult",
    "CombatSide",
    "ATTACKER_FOCUS_CHANCE",
    "DEFENDER_FOCUS_CHANCE",
    "MAX_COMBAT_STEPS",
]
