"""
API Service - Business logic layer between the API and the engine.

The service:
1. Translates requests to session registry / combat resolver calls
2. Validates inbound WebSocket messages
3. Formats responses with the pydantic schemas

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging
import random

from pydantic import ValidationError

from ..catalog import CardCatalog, PRESET_DECKS, default_catalog, preset_deck
from ..catalog.pool import (
    PoolUnit,
    generate_opponent_roster,
    opponent_max_tier,
    opponent_roster_size,
)
from ..combat import CombatResolver
from ..engine_core.state import card_summary
from ..errors import ErrorKind, SessionError
from ..session import (
    DEFAULT_GRACE_PERIOD_SECONDS,
    OutboundEvent,
    PONG,
    Session,
    SessionManager,
)
from ..session.events import rejected
from .schemas import (
    AttackMessage,
    CardInfo,
    CardListResponse,
    CombatRequest,
    CombatResponse,
    DeckListResponse,
    EndTurnMessage,
    JoinMessage,
    OpponentRequest,
    OpponentResponse,
    ParticipantInfo,
    PingMessage,
    PlayCardMessage,
    PoolUnitInfo,
    RosterUnitOut,
    SessionListResponse,
    SessionResponse,
    SessionStatus,
    client_message_adapter,
)

logger = logging.getLogger(__name__)

DEFAULT_PRESET = "warrior"


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        # Create a session, then seat participants over the socket
        session = service.create_session()
        events = service.handle_message(session.session_id, "p1", {"type": "join"})

        # Autobattler combat
        outcome = service.resolve_combat(CombatRequest(player=[...]))
    """
    catalog: CardCatalog = field(default_factory=default_catalog)
    session_manager: SessionManager | None = None
    combat_resolver: CombatResolver = field(default_factory=CombatResolver)
    rng: random.Random = field(default_factory=random.Random)
    grace_period_seconds: float = DEFAULT_GRACE_PERIOD_SECONDS

    def __post_init__(self):
        if self.session_manager is None:
            self.session_manager = SessionManager(
                self.catalog,
                grace_period_seconds=self.grace_period_seconds,
            )

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(self) -> SessionResponse:
        self.session_manager.purge_expired()
        return self._session_response(self.session_manager.create_session())

    def get_session(self, session_id: str) -> SessionResponse:
        """Raises SessionError if the session is missing."""
        return self._session_response(self.session_manager.require_session(session_id))

    def list_sessions(self) -> SessionListResponse:
        self.session_manager.purge_expired()
        sessions = [self._session_response(s) for s in self.session_manager.list_sessions()]
        return SessionListResponse(sessions=sessions, count=len(sessions))

    def purge_expired(self) -> list[str]:
        return self.session_manager.purge_expired()

    def _session_response(self, session: Session) -> SessionResponse:
        duel = session.duel
        return SessionResponse(
            session_id=session.session_id,
            status=SessionStatus(session.status.value),
            participants=[
                ParticipantInfo(name=p.name, side=p.side) for p in session.participants
            ],
            active_side=duel.active_side,
            turn_number=duel.turn_number,
            winner=duel.winner,
            end_reason=duel.end_reason.value if duel.end_reason else None,
            created_at=session.created_at,
            ended_at=session.ended_at,
        )

    # =========================================================================
    # Participant messages
    # =========================================================================

    def handle_message(
        self,
        session_id: str,
        participant_id: str,
        message: Any,
    ) -> list[OutboundEvent]:
        """
        Validate and dispatch one inbound WebSocket message.

        Failures never raise: they come back as an action-rejected event
        for the sender.
        """
        try:
            parsed = client_message_adapter.validate_python(message)
        except ValidationError as e:
            return [rejected(participant_id, ErrorKind.VALIDATION_ERROR.value, _first_error(e))]

        try:
            if isinstance(parsed, PingMessage):
                return [OutboundEvent(PONG, {}, recipient=participant_id)]
            if isinstance(parsed, JoinMessage):
                return self._join(session_id, participant_id, parsed)

            self._check_seat(session_id, participant_id)
            if isinstance(parsed, PlayCardMessage):
                return self.session_manager.play_card(participant_id, parsed.hand_index, parsed.target)
            if isinstance(parsed, AttackMessage):
                return self.session_manager.attack(participant_id, parsed.attacker_index, parsed.target)
            if isinstance(parsed, EndTurnMessage):
                return self.session_manager.end_turn(participant_id)
        except SessionError as e:
            logger.debug("Message from %s rejected: %s", participant_id, e.message)
            return [rejected(participant_id, e.kind.value, e.message)]

        return [rejected(participant_id, ErrorKind.VALIDATION_ERROR.value, "Unsupported message")]

    def disconnect(self, participant_id: str) -> list[OutboundEvent]:
        return self.session_manager.disconnect(participant_id)

    def _join(self, session_id: str, participant_id: str, message: JoinMessage) -> list[OutboundEvent]:
        if message.deck is not None:
            deck_ids = message.deck
        else:
            name = message.preset or DEFAULT_PRESET
            try:
                deck_ids = preset_deck(name)
            except KeyError as e:
                raise SessionError(ErrorKind.VALIDATION_ERROR, f"Unknown preset deck: {name}") from e
        return self.session_manager.join_session(session_id, participant_id, message.name, deck_ids)

    def _check_seat(self, session_id: str, participant_id: str) -> None:
        self.session_manager.require_session(session_id)
        seated = self.session_manager.find_session_for(participant_id)
        if seated is None or seated.session_id != session_id:
            raise SessionError(
                ErrorKind.NOT_PARTICIPANT,
                f"Not seated in session {session_id}",
            )

    # =========================================================================
    # Catalog
    # =========================================================================

    def list_cards(self) -> CardListResponse:
        cards = [CardInfo(**card_summary(card)) for card in self.catalog.cards()]
        return CardListResponse(cards=cards, count=len(cards))

    def list_decks(self) -> DeckListResponse:
        return DeckListResponse(decks={name: list(ids) for name, ids in PRESET_DECKS.items()})

    # =========================================================================
    # Autobattler
    # =========================================================================

    def generate_opponent(self, request: OpponentRequest) -> OpponentResponse:
        units = generate_opponent_roster(request.round_number, self.rng)
        return OpponentResponse(
            round_number=request.round_number,
            roster_size=opponent_roster_size(request.round_number),
            max_tier=opponent_max_tier(request.round_number),
            units=[_pool_unit_info(u) for u in units],
        )

    def resolve_combat(self, request: CombatRequest) -> CombatResponse:
        """Resolve one combat; generates the opponent when none is given."""
        player = [u.model_dump() for u in request.player]
        if request.opponent is not None:
            opponent: list[Any] = [u.model_dump() for u in request.opponent]
        else:
            opponent = generate_opponent_roster(request.round_number, self.rng)

        outcome = self.combat_resolver.resolve(player, opponent, round_number=request.round_number)
        return CombatResponse(
            result=outcome.result.value,
            damage=outcome.damage,
            steps=outcome.steps,
            round_number=outcome.round_number,
            hit_step_cap=outcome.hit_step_cap,
            player=[RosterUnitOut.model_validate(u) for u in outcome.player],
            opponent=[RosterUnitOut.model_validate(u) for u in outcome.opponent],
            events=[e.to_dict() for e in outcome.events],
        )


def _pool_unit_info(unit: PoolUnit) -> PoolUnitInfo:
    return PoolUnitInfo(
        unit_id=unit.unit_id,
        name=unit.name,
        attack=unit.attack,
        health=unit.health,
        tier=unit.tier,
        tribe=unit.tribe.value if unit.tribe else None,
    )


def _first_error(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
