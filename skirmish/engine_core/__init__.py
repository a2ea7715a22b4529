"""
Engine Core - Authoritative duel state management and effect resolution.

The engine is the runtime that:
1. Holds a DuelState per duel
2. Validates actions (turn, indices, mana, acted flags)
3. Applies actions via the reducer
4. Resolves battlecries, spells and deathrattles
5. Sweeps dead units with the cleanup pass until stable
"""

from .state import (
    DuelState,
    DuelPhase,
    EndReason,
    SideState,
    UnitInstance,
    CardInstance,
    Hero,
    Mana,
    Weapon,
    HERO_TARGET,
    HERO_MAX_HEALTH,
    MAX_BOARD_SIZE,
    MAX_HAND_SIZE,
    MAX_MANA,
)
from .action import Action, ActionType, ActionPayload, ActionResult, DuelEvent
from .effect_resolver import EffectResolver
from .cleanup import CleanupPass, MAX_CLEANUP_PASSES
from .reducer import Reducer, apply_action

__all__ = [
    "DuelState",
    "DuelPhase",
    "EndReason",
    "SideState",
    "UnitInstance",
    "CardInstance",
    "Hero",
    "Mana",
    "Weapon",
    "HERO_TARGET",
    "HERO_MAX_HEALTH",
    "MAX_BOARD_SIZE",
    "MAX_HAND_SIZE",
    "MAX_MANA",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "DuelEvent",
    "EffectResolver",
    "CleanupPass",
    "MAX_CLEANUP_PASSES",
    "Reducer",
    "apply_action",
]
