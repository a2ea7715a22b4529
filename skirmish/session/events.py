"""
Outbound events - What the session registry hands to the transport.

The registry never talks to sockets. Every operation returns a list of
OutboundEvent, each addressed to one participant (or to everyone when
recipient is None); the transport only delivers them.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

SESSION_JOINED = "session-joined"
SESSION_STARTED = "session-started"
STATE_UPDATED = "state-updated"
SESSION_ENDED = "session-ended"
ACTION_REJECTED = "action-rejected"
PONG = "pong"
CONNECTED = "connected"


@dataclass
class OutboundEvent:
    """A message for one participant (recipient) or all of them (None)."""
    event_type: str
    payload: dict[str, Any] = field(default_factory=dict)
    recipient: str | None = None

    def to_message(self) -> dict[str, Any]:
        return {"type": self.event_type, "payload": self.payload}


def rejected(participant_id: str, error_code: str, message: str) -> OutboundEvent:
    """An action-rejected event for the acting participant only."""
    return OutboundEvent(
        ACTION_REJECTED,
        {"error_code": error_code, "message": message},
        recipient=participant_id,
    )
