"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between clients and the engine.
Inbound WebSocket messages are validated here too.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has been purged
- SESSION_FULL: Session already has two participants
- UNKNOWN_CARD: A deck references a card id the catalog does not know
- NOT_PARTICIPANT: Connection is not seated in the session
- ILLEGAL_ACTION / INVALID_* / INSUFFICIENT_MANA / ALREADY_ACTED /
  CAPACITY_EXCEEDED: Duel action rejected
- VALIDATION_ERROR: Malformed request or message
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union, Any
from pydantic import BaseModel, Field, TypeAdapter, model_validator

from ..errors import ErrorKind

# One taxonomy end to end
ErrorCode = ErrorKind


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    WAITING = "waiting"
    ACTIVE = "active"
    ENDED = "ended"


class CombatResultTag(str, Enum):
    WIN = "win"
    LOSS = "loss"
    TIE = "tie"


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """Card definition for display."""
    card_id: str
    name: str
    cost: int
    kind: str = Field(description="unit, spell or weapon")
    description: str = ""
    rarity: str = "common"
    card_class: str = "neutral"
    attack: Optional[int] = None
    health: Optional[int] = None
    durability: Optional[int] = None
    abilities: list[str] = Field(default_factory=list)
    target_required: Optional[bool] = None

    model_config = {"from_attributes": True}


class ParticipantInfo(BaseModel):
    """A seated participant."""
    name: str
    side: int


class RosterUnitIn(BaseModel):
    """A unit submitted for autobattler combat."""
    name: str
    attack: int = Field(..., ge=0)
    health: int = Field(..., ge=1)
    max_health: Optional[int] = Field(None, ge=1)
    tier: int = Field(1, ge=1, description="Combat weight")
    unit_id: Optional[str] = None

    @model_validator(mode="after")
    def check_max_health(self) -> "RosterUnitIn":
        if self.max_health is not None and self.max_health < self.health:
            raise ValueError("max_health must be at least health")
        return self


class RosterUnitOut(BaseModel):
    """A unit's final state after combat."""
    unit_id: Optional[str] = None
    name: str
    attack: int
    health: int
    max_health: int
    tier: int
    dead: bool

    model_config = {"from_attributes": True}


class PoolUnitInfo(BaseModel):
    """An autobattler pool unit."""
    unit_id: str
    name: str
    attack: int
    health: int
    tier: int
    tribe: Optional[str] = None


# =============================================================================
# Request Models
# =============================================================================

class CombatRequest(BaseModel):
    """
    Request to resolve one autobattler combat.

    When opponent is omitted, one is generated for round_number.
    """
    player: list[RosterUnitIn] = Field(default_factory=list, max_length=7)
    opponent: Optional[list[RosterUnitIn]] = Field(None, max_length=7)
    round_number: int = Field(1, ge=1, description="Display label; also sizes a generated opponent")


class OpponentRequest(BaseModel):
    """Request to generate an opponent roster."""
    round_number: int = Field(1, ge=1)


# =============================================================================
# WebSocket Messages (client → server)
# =============================================================================

class JoinMessage(BaseModel):
    """Take a seat in the session. deck wins over preset; neither = warrior."""
    type: Literal["join"]
    name: str = Field("Player", min_length=1, max_length=40)
    deck: Optional[list[str]] = None
    preset: Optional[str] = None


class PlayCardMessage(BaseModel):
    type: Literal["play_card"]
    hand_index: int
    target: Optional[int] = Field(None, description="Board index, or -1 for the hero")


class AttackMessage(BaseModel):
    type: Literal["attack"]
    attacker_index: int = Field(..., description="Board index, or -1 for the armed hero")
    target: int = Field(..., description="Board index, or -1 for the hero")


class EndTurnMessage(BaseModel):
    type: Literal["end_turn"]


class PingMessage(BaseModel):
    type: Literal["ping"]


ClientMessage = Annotated[
    Union[JoinMessage, PlayCardMessage, AttackMessage, EndTurnMessage, PingMessage],
    Field(discriminator="type"),
]

client_message_adapter = TypeAdapter(ClientMessage)


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    error_code: ErrorCode
    details: Optional[dict[str, Any]] = None


class SessionResponse(BaseModel):
    """Session status."""
    session_id: str
    status: SessionStatus
    participants: list[ParticipantInfo] = Field(default_factory=list)
    active_side: Optional[int] = None
    turn_number: int = 0
    winner: Optional[int] = None
    end_reason: Optional[str] = None
    created_at: float
    ended_at: Optional[float] = None
    api_version: str = "v1"


class SessionListResponse(BaseModel):
    """Response listing sessions."""
    sessions: list[SessionResponse]
    count: int


class CardListResponse(BaseModel):
    cards: list[CardInfo]
    count: int


class DeckListResponse(BaseModel):
    """Preset decks by name, as ordered card ids."""
    decks: dict[str, list[str]]


class CombatResponse(BaseModel):
    """Result of one autobattler combat, from the player's perspective."""
    result: CombatResultTag
    damage: int
    steps: int
    round_number: int
    hit_step_cap: bool = False
    player: list[RosterUnitOut]
    opponent: list[RosterUnitOut]
    events: list[dict[str, Any]] = Field(
        default_factory=list, description="Ordered playback log"
    )
    api_version: str = "v1"


class OpponentResponse(BaseModel):
    """A generated opponent roster."""
    round_number: int
    roster_size: int
    max_tier: int
    units: list[PoolUnitInfo]


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
