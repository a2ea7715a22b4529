"""
Tests for the HTTP API and the participant WebSocket.
"""

import random

import pytest
from fastapi.testclient import TestClient
from fastapi import WebSocketDisconnect

from .. import __version__
from ..api import APIService, create_app
from ..catalog import PRESET_DECKS


@pytest.fixture
def service():
    return APIService(rng=random.Random(5))


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


@pytest.fixture
def session_id(client):
    return client.post("/api/v1/sessions").json()["session_id"]


def ws_url(session_id):
    return f"/api/v1/sessions/{session_id}/ws"


class TestSystemEndpoints:
    """Tests for health and root."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == __version__

    def test_root(self, client):
        data = client.get("/").json()

        assert data["docs"] == "/api/docs"
        assert "environment" in data


class TestSessionEndpoints:
    """Tests for session REST endpoints."""

    def test_create_session(self, client):
        response = client.post("/api/v1/sessions")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "waiting"
        assert data["participants"] == []
        assert data["api_version"] == "v1"

    def test_get_session(self, client, session_id):
        response = client.get(f"/api/v1/sessions/{session_id}")

        assert response.status_code == 200
        assert response.json()["session_id"] == session_id

    def test_get_missing_session(self, client):
        response = client.get("/api/v1/sessions/missing")

        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"

    def test_list_sessions(self, client, session_id):
        data = client.get("/api/v1/sessions").json()

        assert data["count"] == 1
        assert data["sessions"][0]["session_id"] == session_id


class TestCatalogEndpoints:
    """Tests for catalog REST endpoints."""

    def test_cards(self, client):
        data = client.get("/api/v1/cards").json()

        assert data["count"] == 17
        fireball = next(c for c in data["cards"] if c["card_id"] == "basic_spell_1")
        assert fireball["kind"] == "spell"
        assert fireball["target_required"] is True

    def test_decks(self, client):
        data = client.get("/api/v1/decks").json()

        assert data["decks"] == PRESET_DECKS


class TestCombatEndpoints:
    """Tests for autobattler REST endpoints."""

    def test_resolve_combat(self, client):
        response = client.post("/api/v1/combat", json={
            "player": [{"name": "Big", "attack": 10, "health": 10, "tier": 3}],
            "opponent": [{"name": "Small", "attack": 1, "health": 1}],
            "round_number": 2,
        })

        assert response.status_code == 200
        data = response.json()
        assert data["result"] == "win"
        assert data["damage"] == 3
        assert data["round_number"] == 2
        assert data["opponent"][0]["dead"] is True
        assert data["events"][0]["kind"] == "combat_started"
        assert data["events"][-1]["kind"] == "combat_ended"

    def test_generated_opponent(self, client):
        response = client.post("/api/v1/combat", json={
            "player": [{"name": "Big", "attack": 10, "health": 50, "tier": 1}],
            "round_number": 4,
        })

        assert response.status_code == 200
        assert len(response.json()["opponent"]) == 3

    def test_invalid_unit(self, client):
        response = client.post("/api/v1/combat", json={
            "player": [{"name": "Ghost", "attack": 1, "health": 0}],
        })

        assert response.status_code == 422
        data = response.json()
        assert data["error_code"] == "VALIDATION_ERROR"
        assert data["details"]["errors"]

    def test_max_health_below_health(self, client):
        response = client.post("/api/v1/combat", json={
            "player": [{"name": "Hurt", "attack": 1, "health": 5, "max_health": 1}],
        })

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_opponent_roster(self, client):
        data = client.post("/api/v1/combat/opponent", json={"round_number": 4}).json()

        assert data["roster_size"] == 3
        assert data["max_tier"] == 2
        assert len(data["units"]) == 3
        assert all(u["tier"] <= 2 for u in data["units"])


class TestWebSocket:
    """Tests for the participant WebSocket."""

    def test_full_duel_flow(self, client, session_id):
        with client.websocket_connect(ws_url(session_id)) as ws1:
            connected = ws1.receive_json()
            assert connected["type"] == "connected"
            assert connected["payload"]["participant_id"]

            ws1.send_json({"type": "join", "name": "Alice"})
            joined = ws1.receive_json()
            assert joined["type"] == "session-joined"
            assert joined["payload"]["side"] == 0

            with client.websocket_connect(ws_url(session_id)) as ws2:
                assert ws2.receive_json()["type"] == "connected"
                ws2.send_json({"type": "join", "name": "Bob", "preset": "mage"})
                assert ws2.receive_json()["payload"]["side"] == 1

                started1 = ws1.receive_json()
                started2 = ws2.receive_json()
                assert started1["type"] == started2["type"] == "session-started"
                assert "hand" in started1["payload"]["state"]["sides"][0]
                assert "hand" not in started1["payload"]["state"]["sides"][1]

                first = started1["payload"]["first_side"]
                active, idle = (ws1, ws2) if first == 0 else (ws2, ws1)

                idle.send_json({"type": "end_turn"})
                rejection = idle.receive_json()
                assert rejection["type"] == "action-rejected"
                assert rejection["payload"]["error_code"] == "ILLEGAL_ACTION"

                active.send_json({"type": "end_turn"})
                assert active.receive_json()["type"] == "state-updated"
                assert idle.receive_json()["type"] == "state-updated"

                ws1.send_json({"type": "ping"})
                assert ws1.receive_json()["type"] == "pong"

            ended = ws1.receive_json()
            assert ended["type"] == "session-ended"
            assert ended["payload"]["winner"] == 0
            assert ended["payload"]["reason"] == "disconnect"

        status = client.get(f"/api/v1/sessions/{session_id}").json()
        assert status["status"] == "ended"

    def test_unknown_session(self, client):
        with client.websocket_connect(ws_url("missing")) as ws:
            message = ws.receive_json()
            assert message["type"] == "action-rejected"
            assert message["payload"]["error_code"] == "SESSION_NOT_FOUND"
            with pytest.raises(WebSocketDisconnect):
                ws.receive_json()

    def test_invalid_json(self, client, session_id):
        with client.websocket_connect(ws_url(session_id)) as ws:
            ws.receive_json()
            ws.send_text("not json")

            message = ws.receive_json()
            assert message["type"] == "action-rejected"
            assert message["payload"]["error_code"] == "VALIDATION_ERROR"

    def test_unknown_message_type(self, client, session_id):
        with client.websocket_connect(ws_url(session_id)) as ws:
            ws.receive_json()
            ws.send_json({"type": "dance"})

            assert ws.receive_json()["payload"]["error_code"] == "VALIDATION_ERROR"

    def test_action_before_join(self, client, session_id):
        with client.websocket_connect(ws_url(session_id)) as ws:
            ws.receive_json()
            ws.send_json({"type": "end_turn"})

            assert ws.receive_json()["payload"]["error_code"] == "NOT_PARTICIPANT"

    def test_unknown_card_in_deck(self, client, session_id):
        with client.websocket_connect(ws_url(session_id)) as ws:
            ws.receive_json()
            ws.send_json({"type": "join", "deck": ["basic_minion_1", "nope"]})

            message = ws.receive_json()
            assert message["payload"]["error_code"] == "UNKNOWN_CARD"
            assert "nope" in message["payload"]["message"]
