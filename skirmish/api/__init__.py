"""
API Module - Network interface.

Exposes the engine via REST and WebSocket:
1. Clients create duel sessions over REST
2. Participants join and play over a per-participant WebSocket
3. Autobattler combats resolve over REST

All state is session-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    CombatRequest,
    OpponentRequest,
    # Responses
    SessionResponse,
    SessionListResponse,
    CardListResponse,
    DeckListResponse,
    CombatResponse,
    OpponentResponse,
    ErrorResponse,
    HealthResponse,
    # Shared
    CardInfo,
    ParticipantInfo,
    RosterUnitIn,
    RosterUnitOut,
    ErrorCode,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CombatRequest",
    "OpponentRequest",
    # Responses
    "SessionResponse",
    "SessionListResponse",
    "CardListResponse",
    "DeckListResponse",
    "CombatResponse",
    "OpponentResponse",
    "ErrorResponse",
    "HealthResponse",
    # Shared
    "CardInfo",
    "ParticipantInfo",
    "RosterUnitIn",
    "RosterUnitOut",
    "ErrorCode",
    # Service
    "APIService",
    "create_app",
]
