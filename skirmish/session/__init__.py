"""
Session Module - Duel session management.

Handles:
- Session lifecycle (waiting → active → ended → purged)
- Seating participants and loading their decks
- Routing participant actions through the reducer
- Per-participant outbound events with redacted state
"""

from .events import (
    OutboundEvent,
    SESSION_JOINED,
    SESSION_STARTED,
    STATE_UPDATED,
    SESSION_ENDED,
    ACTION_REJECTED,
    PONG,
    CONNECTED,
)
from .manager import SessionManager, Session, Participant, DEFAULT_GRACE_PERIOD_SECONDS

__all__ = [
    "OutboundEvent",
    "SESSION_JOINED",
    "SESSION_STARTED",
    "STATE_UPDATED",
    "SESSION_ENDED",
    "ACTION_REJECTED",
    "PONG",
    "CONNECTED",
    "SessionManager",
    "Session",
    "Participant",
    "DEFAULT_GRACE_PERIOD_SECONDS",
]
