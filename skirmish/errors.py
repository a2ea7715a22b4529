"""
Error taxonomy shared by the engine, the session registry and the API.

Every rejection is recoverable: the action is refused, state is left
unchanged, and only the acting participant is told.
"""

from __future__ import annotations
from enum import Enum


class ErrorKind(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    SESSION_FULL = "SESSION_FULL"
    ILLEGAL_ACTION = "ILLEGAL_ACTION"
    INVALID_INDEX = "INVALID_INDEX"
    INVALID_TARGET = "INVALID_TARGET"
    INVALID_ATTACKER = "INVALID_ATTACKER"
    INSUFFICIENT_MANA = "INSUFFICIENT_MANA"
    ALREADY_ACTED = "ALREADY_ACTED"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    UNKNOWN_CARD = "UNKNOWN_CARD"
    NOT_PARTICIPANT = "NOT_PARTICIPANT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class SkirmishError(Exception):
    """Base error carrying an ErrorKind."""

    def __init__(self, kind: ErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)


class UnknownCardError(SkirmishError):
    """Raised when a card id is not in the catalog."""

    def __init__(self, card_ids: list[str]):
        self.card_ids = card_ids
        super().__init__(
            ErrorKind.UNKNOWN_CARD,
            f"Unknown card id(s): {', '.join(card_ids)}",
        )


class SessionError(SkirmishError):
    """Raised by the session registry (missing session, full session, ...)."""
