"""
Action System - Actions, payloads, and results.

Actions represent:
1. Participant actions (play card, attack, end turn)
2. System actions (start the duel, forfeit on disconnect)

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..errors import ErrorKind


class ActionType(Enum):
    """Types of actions in the system."""
    # Participant actions
    PLAY_CARD = "play_card"
    ATTACK = "attack"
    END_TURN = "end_turn"

    # System actions
    START = "start"
    FORFEIT = "forfeit"


@dataclass
class ActionPayload:
    """
    Payload for an action.

    target is a board index into the side the effect/attack points at, or
    HERO_TARGET for the hero, or None for "no target".
    """
    side: int | None = None
    hand_index: int | None = None
    attacker_index: int | None = None
    target: int | None = None

    # Generic params (e.g. forced first side for START)
    params: dict[str, Any] = field(default_factory=dict)


@dataclass
class Action:
    """
    A complete action to be applied to the duel state.

    Actions are validated before application and applied atomically by
    the reducer.
    """
    action_type: ActionType
    payload: ActionPayload

    @classmethod
    def start(cls, first_side: int | None = None) -> Action:
        """Factory for the start transition. first_side=None picks at random."""
        return cls(
            action_type=ActionType.START,
            payload=ActionPayload(params={"first_side": first_side}),
        )

    @classmethod
    def play_card(cls, side: int, hand_index: int, target: int | None = None) -> Action:
        """Factory for play-card action."""
        return cls(
            action_type=ActionType.PLAY_CARD,
            payload=ActionPayload(side=side, hand_index=hand_index, target=target),
        )

    @classmethod
    def attack(cls, side: int, attacker_index: int, target: int) -> Action:
        """Factory for attack action."""
        return cls(
            action_type=ActionType.ATTACK,
            payload=ActionPayload(side=side, attacker_index=attacker_index, target=target),
        )

    @classmethod
    def end_turn(cls, side: int) -> Action:
        """Factory for end-turn action."""
        return cls(
            action_type=ActionType.END_TURN,
            payload=ActionPayload(side=side),
        )

    @classmethod
    def forfeit(cls, side: int) -> Action:
        """Factory for a forced loss (participant disconnected)."""
        return cls(
            action_type=ActionType.FORFEIT,
            payload=ActionPayload(side=side),
        )


@dataclass
class DuelEvent:
    """Something that happened while an action resolved."""
    kind: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, **self.data}


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New state (if succeeded)
    - Error kind and message (if failed)
    - Events, in resolution order
    """
    success: bool
    new_state: Any | None = None  # DuelState
    error: str | None = None
    error_code: ErrorKind | None = None
    events: list[DuelEvent] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: ErrorKind) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        events: list[DuelEvent] | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(success=True, new_state=state, events=events or [])
