"""
Session Manager - Creates and manages duel sessions.

LIFECYCLE:
1. create_session → empty session in `waiting`
2. First join → participant takes side 0, deck loaded
3. Second join → participant takes side 1, duel starts
4. Participants act (play card, attack, end turn) until a hero falls
   or a participant disconnects
5. Session `ended` → kept for a grace period, then purged

A `waiting` session with nobody seated is purged after the same grace
period, counted from creation or from when its last participant left.

PERSISTENCE RULES:
- In-memory only; nothing outlives the process
- Sessions are independent; the card catalog is the only shared structure

Every operation runs to completion before the next one starts, so no
partially applied action is ever observable.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable
import logging
import time
import uuid

from ..catalog import CardCatalog
from ..engine_core import Action, ActionResult, DuelPhase, DuelState, Reducer
from ..errors import ErrorKind, SessionError, UnknownCardError
from .events import (
    OutboundEvent,
    SESSION_ENDED,
    SESSION_JOINED,
    SESSION_STARTED,
    STATE_UPDATED,
    rejected,
)

logger = logging.getLogger(__name__)

DEFAULT_GRACE_PERIOD_SECONDS = 60.0
MAX_PARTICIPANTS = 2


@dataclass
class Participant:
    """A connected participant and the side they play."""
    participant_id: str
    name: str
    side: int


@dataclass
class Session:
    """
    A duel session.

    Contains:
    - The authoritative DuelState (replaced wholesale on every accepted action)
    - The participants, in join order (join order = side index)
    - Lifecycle timestamps

    The lifecycle follows the duel phase: waiting → active → ended.
    """
    session_id: str
    created_at: float
    duel: DuelState
    participants: list[Participant] = field(default_factory=list)
    ended_at: float | None = None
    # Set when the last waiting participant leaves
    vacated_at: float | None = None

    @property
    def status(self) -> DuelPhase:
        return self.duel.phase

    def is_full(self) -> bool:
        return len(self.participants) >= MAX_PARTICIPANTS

    def is_active(self) -> bool:
        """Check if session is still accepting actions."""
        return self.duel.phase != DuelPhase.ENDED

    def participant(self, participant_id: str) -> Participant | None:
        for p in self.participants:
            if p.participant_id == participant_id:
                return p
        return None

    def side_of(self, participant_id: str) -> int | None:
        p = self.participant(participant_id)
        return p.side if p else None


class SessionManager:
    """
    Manages duel sessions.

    Responsibilities:
    - Create sessions and seat participants
    - Route participant actions to the reducer and commit accepted states
    - Turn results into per-recipient, redacted outbound events
    - Purge ended and abandoned sessions after the grace period

    No persistence - sessions are in-memory only.
    """

    def __init__(
        self,
        catalog: CardCatalog,
        reducer: Reducer | None = None,
        grace_period_seconds: float = DEFAULT_GRACE_PERIOD_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.catalog = catalog
        self.reducer = reducer or Reducer()
        self.grace_period_seconds = grace_period_seconds
        self.clock = clock
        self._sessions: dict[str, Session] = {}
        # participant id -> session id, for participants of live sessions
        self._participants: dict[str, str] = {}

    # =========================================================================
    # Lookup
    # =========================================================================

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def require_session(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionError(ErrorKind.SESSION_NOT_FOUND, f"Session {session_id} not found")
        return session

    def find_session_for(self, participant_id: str) -> Session | None:
        """The live session a participant is seated in, if any."""
        session_id = self._participants.get(participant_id)
        if session_id is None:
            return None
        return self._sessions.get(session_id)

    def list_sessions(self) -> list[Session]:
        return list(self._sessions.values())

    def snapshot_for(self, session_id: str, participant_id: str | None = None) -> dict[str, Any]:
        """
        The session's duel state as seen by a participant.

        Non-participants get the spectator view (both hands hidden).
        """
        session = self.require_session(session_id)
        viewer = session.side_of(participant_id) if participant_id else None
        return session.duel.snapshot(viewer)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def create_session(self) -> Session:
        """Allocate an empty session in the waiting state."""
        session_id = str(uuid.uuid4())
        session = Session(
            session_id=session_id,
            created_at=self.clock(),
            duel=DuelState(duel_id=session_id),
        )
        self._sessions[session_id] = session
        logger.info("Session %s created", session_id)
        return session

    def join_session(
        self,
        session_id: str,
        participant_id: str,
        name: str,
        deck_ids: list[str],
    ) -> list[OutboundEvent]:
        """
        Seat a participant with their deck.

        The second join starts the duel.

        Raises:
            SessionError: session missing or full, participant already
                seated somewhere, or unknown card ids in the deck
        """
        session = self.require_session(session_id)
        if participant_id in self._participants:
            raise SessionError(
                ErrorKind.ILLEGAL_ACTION,
                f"Participant {participant_id} has already joined a session",
            )
        if session.status != DuelPhase.WAITING or session.is_full():
            raise SessionError(ErrorKind.SESSION_FULL, f"Session {session_id} is full")

        try:
            cards = self.catalog.build_deck(deck_ids)
        except UnknownCardError as e:
            raise SessionError(ErrorKind.UNKNOWN_CARD, e.message) from e

        side = len(session.participants)
        session.participants.append(Participant(participant_id, name, side))
        session.duel.load_deck(side, cards)
        session.duel.side(side).name = name
        self._participants[participant_id] = session_id
        logger.info("Participant %s joined session %s as side %d", participant_id, session_id, side)

        events = [
            OutboundEvent(
                SESSION_JOINED,
                {"session_id": session_id, "side": side, "name": name},
                recipient=participant_id,
            )
        ]
        if session.is_full():
            events.extend(self._start(session))
        return events

    def _start(self, session: Session) -> list[OutboundEvent]:
        result = self.reducer.apply(session.duel, Action.start())
        if not result.success:
            raise SessionError(result.error_code, result.error)
        session.duel = result.new_state
        logger.info("Session %s started", session.session_id)

        events = [e.to_dict() for e in result.events]
        return [
            OutboundEvent(
                SESSION_STARTED,
                {
                    "first_side": session.duel.active_side,
                    "state": session.duel.snapshot(p.side),
                    "events": events,
                },
                recipient=p.participant_id,
            )
            for p in session.participants
        ]

    def disconnect(self, participant_id: str) -> list[OutboundEvent]:
        """
        A participant left.

        In an active duel the remaining participant wins at once. In a
        waiting session the seat is released.
        """
        session = self.find_session_for(participant_id)
        self._participants.pop(participant_id, None)
        if session is None:
            return []

        if session.status == DuelPhase.WAITING:
            self._release_seat(session, participant_id)
            return []

        if session.status != DuelPhase.ACTIVE:
            return []

        side = session.side_of(participant_id)
        result = self.reducer.apply(session.duel, Action.forfeit(side))
        if not result.success:
            raise SessionError(result.error_code, result.error)
        session.duel = result.new_state
        logger.info("Participant %s disconnected from session %s", participant_id, session.session_id)
        return self._end(session, result, exclude=participant_id)

    def _release_seat(self, session: Session, participant_id: str) -> None:
        # Only side 0 can be seated while waiting; reset the duel with it
        session.participants = [
            p for p in session.participants if p.participant_id != participant_id
        ]
        session.duel = DuelState(duel_id=session.session_id)
        if not session.participants:
            session.vacated_at = self.clock()
        logger.info("Participant %s left waiting session %s", participant_id, session.session_id)

    def _end(
        self,
        session: Session,
        result: ActionResult,
        exclude: str | None = None,
    ) -> list[OutboundEvent]:
        """Mark the session ended and tell every remaining participant."""
        session.ended_at = self.clock()
        for p in session.participants:
            self._participants.pop(p.participant_id, None)
        duel = session.duel
        logger.info(
            "Session %s ended: winner=%s reason=%s",
            session.session_id,
            duel.winner,
            duel.end_reason.value if duel.end_reason else None,
        )

        events = [e.to_dict() for e in result.events]
        return [
            OutboundEvent(
                SESSION_ENDED,
                {
                    "winner": duel.winner,
                    "reason": duel.end_reason.value if duel.end_reason else None,
                    "state": duel.snapshot(p.side),
                    "events": events,
                },
                recipient=p.participant_id,
            )
            for p in session.participants
            if p.participant_id != exclude
        ]

    def purge_expired(self) -> list[str]:
        """
        Drop sessions idle for longer than the grace period.

        Ended sessions expire from their end time. Waiting sessions with
        no participants expire from creation or from when they were
        vacated. Called periodically to free memory. Returns the purged ids.
        """
        now = self.clock()
        expired = []
        for session_id, session in self._sessions.items():
            idle_since = self._idle_since(session)
            if idle_since is not None and now - idle_since >= self.grace_period_seconds:
                expired.append(session_id)
        for session_id in expired:
            del self._sessions[session_id]
            logger.info("Session %s purged", session_id)
        return expired

    @staticmethod
    def _idle_since(session: Session) -> float | None:
        if session.ended_at is not None:
            return session.ended_at
        if session.status == DuelPhase.WAITING and not session.participants:
            return session.vacated_at if session.vacated_at is not None else session.created_at
        return None

    # =========================================================================
    # Participant actions
    # =========================================================================

    def play_card(
        self,
        participant_id: str,
        hand_index: int,
        target: int | None = None,
    ) -> list[OutboundEvent]:
        session, side = self._seat(participant_id)
        return self._apply(session, participant_id, Action.play_card(side, hand_index, target))

    def attack(self, participant_id: str, attacker_index: int, target: int) -> list[OutboundEvent]:
        session, side = self._seat(participant_id)
        return self._apply(session, participant_id, Action.attack(side, attacker_index, target))

    def end_turn(self, participant_id: str) -> list[OutboundEvent]:
        session, side = self._seat(participant_id)
        return self._apply(session, participant_id, Action.end_turn(side))

    def _seat(self, participant_id: str) -> tuple[Session, int]:
        session = self.find_session_for(participant_id)
        if session is None:
            raise SessionError(
                ErrorKind.NOT_PARTICIPANT,
                f"Participant {participant_id} is not in a session",
            )
        return session, session.side_of(participant_id)

    def _apply(self, session: Session, participant_id: str, action: Action) -> list[OutboundEvent]:
        """
        Run an action through the reducer and commit it if accepted.

        A rejection leaves the session untouched and only tells the actor.
        """
        result = self.reducer.apply(session.duel, action)
        if not result.success:
            logger.debug(
                "Rejected %s from %s in session %s: %s",
                action.action_type.value,
                participant_id,
                session.session_id,
                result.error,
            )
            return [rejected(participant_id, result.error_code.value, result.error)]

        session.duel = result.new_state
        if session.duel.phase == DuelPhase.ENDED:
            return self._end(session, result)

        events = [e.to_dict() for e in result.events]
        return [
            OutboundEvent(
                STATE_UPDATED,
                {"state": session.duel.snapshot(p.side), "events": events},
                recipient=p.participant_id,
            )
            for p in session.participants
        ]
