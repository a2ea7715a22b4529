"""
Tests for the session manager.

Tests:
- Create / join / start
- Join errors
- Action routing and per-participant delivery
- Disconnects and the grace-period purge
"""

import pytest

from ..catalog import PRESET_DECKS
from ..catalog.cards import FIREBALL
from ..engine_core.state import CardInstance, DuelPhase, HERO_TARGET
from ..errors import ErrorKind, SessionError
from ..session import (
    ACTION_REJECTED,
    SESSION_ENDED,
    SESSION_JOINED,
    SESSION_STARTED,
    STATE_UPDATED,
)

WARRIOR = PRESET_DECKS["warrior"]
MAGE = PRESET_DECKS["mage"]


@pytest.fixture
def started(manager):
    """A started session with participants "alice" (side 0) and "bob" (side 1)."""
    session = manager.create_session()
    manager.join_session(session.session_id, "alice", "Alice", WARRIOR)
    manager.join_session(session.session_id, "bob", "Bob", MAGE)
    return session


def acting_ids(manager, session):
    """(participant whose turn it is, the other participant)."""
    duel = manager.get_session(session.session_id).duel
    active = session.participants[duel.active_side].participant_id
    waiting = session.participants[1 - duel.active_side].participant_id
    return active, waiting


class TestLifecycle:
    """Tests for creating, joining and starting."""

    def test_create_session(self, manager):
        session = manager.create_session()

        assert session.status == DuelPhase.WAITING
        assert manager.get_session(session.session_id) is session
        assert session.participants == []

    def test_first_join(self, manager):
        session = manager.create_session()

        events = manager.join_session(session.session_id, "alice", "Alice", WARRIOR)

        assert [e.event_type for e in events] == [SESSION_JOINED]
        assert events[0].recipient == "alice"
        assert events[0].payload["side"] == 0
        assert session.status == DuelPhase.WAITING
        assert len(session.duel.side(0).deck) == len(WARRIOR)
        assert session.duel.side(0).name == "Alice"

    def test_second_join_starts(self, manager):
        session = manager.create_session()
        manager.join_session(session.session_id, "alice", "Alice", WARRIOR)

        events = manager.join_session(session.session_id, "bob", "Bob", MAGE)

        assert [e.event_type for e in events] == [SESSION_JOINED, SESSION_STARTED, SESSION_STARTED]
        assert session.status == DuelPhase.ACTIVE
        started = {e.recipient: e.payload for e in events[1:]}
        assert set(started) == {"alice", "bob"}
        assert started["alice"]["first_side"] in (0, 1)

    def test_start_snapshots_are_redacted(self, manager):
        session = manager.create_session()
        manager.join_session(session.session_id, "alice", "Alice", WARRIOR)
        events = manager.join_session(session.session_id, "bob", "Bob", MAGE)

        for event in events[1:]:
            state = event.payload["state"]
            own_side = 0 if event.recipient == "alice" else 1
            assert "hand" in state["sides"][own_side]
            assert "hand" not in state["sides"][1 - own_side]

    def test_join_full_session(self, manager, started):
        with pytest.raises(SessionError) as exc_info:
            manager.join_session(started.session_id, "carol", "Carol", WARRIOR)

        assert exc_info.value.kind == ErrorKind.SESSION_FULL

    def test_join_missing_session(self, manager):
        with pytest.raises(SessionError) as exc_info:
            manager.join_session("missing", "alice", "Alice", WARRIOR)

        assert exc_info.value.kind == ErrorKind.SESSION_NOT_FOUND

    def test_join_unknown_card(self, manager):
        session = manager.create_session()

        with pytest.raises(SessionError) as exc_info:
            manager.join_session(session.session_id, "alice", "Alice", ["nope"])

        assert exc_info.value.kind == ErrorKind.UNKNOWN_CARD
        assert session.participants == []
        assert manager.find_session_for("alice") is None

    def test_join_twice(self, manager):
        first = manager.create_session()
        second = manager.create_session()
        manager.join_session(first.session_id, "alice", "Alice", WARRIOR)

        with pytest.raises(SessionError) as exc_info:
            manager.join_session(second.session_id, "alice", "Alice", WARRIOR)

        assert exc_info.value.kind == ErrorKind.ILLEGAL_ACTION

    def test_snapshot_for_spectator(self, manager, started):
        view = manager.snapshot_for(started.session_id)

        assert all("hand" not in side for side in view["sides"])


class TestActions:
    """Tests for routing participant actions."""

    def test_wrong_turn_rejected_to_actor_only(self, manager, started):
        active, waiting = acting_ids(manager, started)
        before = manager.snapshot_for(started.session_id, waiting)

        events = manager.end_turn(waiting)

        assert len(events) == 1
        assert events[0].event_type == ACTION_REJECTED
        assert events[0].recipient == waiting
        assert events[0].payload["error_code"] == ErrorKind.ILLEGAL_ACTION.value
        assert manager.snapshot_for(started.session_id, waiting) == before

    def test_end_turn_updates_both(self, manager, started):
        active, waiting = acting_ids(manager, started)

        events = manager.end_turn(active)

        assert [e.event_type for e in events] == [STATE_UPDATED, STATE_UPDATED]
        assert {e.recipient for e in events} == {"alice", "bob"}
        assert acting_ids(manager, started)[0] == waiting
        assert any(e["kind"] == "turn_started" for e in events[0].payload["events"])

    def test_invalid_index_rejected(self, manager, started):
        active, _ = acting_ids(manager, started)

        events = manager.play_card(active, 42)

        assert events[0].payload["error_code"] == ErrorKind.INVALID_INDEX.value

    def test_not_participant(self, manager, started):
        with pytest.raises(SessionError) as exc_info:
            manager.end_turn("mallory")

        assert exc_info.value.kind == ErrorKind.NOT_PARTICIPANT

    def test_lethal_action_ends_session(self, manager, started, clock):
        active, waiting = acting_ids(manager, started)
        duel = started.duel
        side = started.side_of(active)
        duel.side(1 - side).hero.health = 3
        duel.side(side).mana.current = 4
        duel.side(side).mana.max = 4
        duel.side(side).hand.append(CardInstance(instance_id="fb", card=FIREBALL))

        events = manager.play_card(active, len(duel.side(side).hand) - 1, HERO_TARGET)

        assert [e.event_type for e in events] == [SESSION_ENDED, SESSION_ENDED]
        assert events[0].payload["winner"] == side
        assert events[0].payload["reason"] == "hero_defeated"
        assert started.ended_at == clock.now
        assert manager.find_session_for(active) is None


class TestDisconnect:
    """Tests for disconnects and purging."""

    def test_disconnect_active_forfeits(self, manager, started):
        events = manager.disconnect("alice")

        assert len(events) == 1
        assert events[0].event_type == SESSION_ENDED
        assert events[0].recipient == "bob"
        assert events[0].payload["winner"] == 1
        assert events[0].payload["reason"] == "disconnect"
        assert started.status == DuelPhase.ENDED

    def test_disconnect_waiting_releases_seat(self, manager):
        session = manager.create_session()
        manager.join_session(session.session_id, "alice", "Alice", WARRIOR)

        assert manager.disconnect("alice") == []
        assert session.participants == []
        assert session.duel.side(0).deck == []

        manager.join_session(session.session_id, "bob", "Bob", MAGE)
        assert session.participant("bob").side == 0

    def test_disconnect_unknown(self, manager):
        assert manager.disconnect("nobody") == []

    def test_actions_after_end(self, manager, started):
        manager.disconnect("alice")

        with pytest.raises(SessionError) as exc_info:
            manager.end_turn("bob")

        assert exc_info.value.kind == ErrorKind.NOT_PARTICIPANT

    def test_purge_after_grace_period(self, manager, started, clock):
        waiting = manager.create_session()
        manager.join_session(waiting.session_id, "carol", "Carol", WARRIOR)
        manager.disconnect("alice")

        clock.advance(59)
        assert manager.purge_expired() == []

        clock.advance(1)
        assert manager.purge_expired() == [started.session_id]
        assert manager.get_session(started.session_id) is None
        assert manager.get_session(waiting.session_id) is waiting

    def test_purge_unjoined_waiting_session(self, manager, clock):
        session = manager.create_session()

        clock.advance(59)
        assert manager.purge_expired() == []

        clock.advance(1)
        assert manager.purge_expired() == [session.session_id]
        assert manager.get_session(session.session_id) is None

    def test_purge_vacated_waiting_session(self, manager, clock):
        """The grace period restarts when the lone participant leaves."""
        session = manager.create_session()
        manager.join_session(session.session_id, "alice", "Alice", WARRIOR)
        clock.advance(100)
        assert manager.purge_expired() == []

        manager.disconnect("alice")
        assert session.vacated_at == clock.now

        clock.advance(59)
        assert manager.purge_expired() == []

        clock.advance(1)
        assert manager.purge_expired() == [session.session_id]
