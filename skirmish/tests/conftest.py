"""
Pytest fixtures for Skirmish tests.
"""

import random

import pytest

from ..catalog import CardCatalog, default_catalog
from ..engine_core.reducer import Reducer
from ..engine_core.effect_resolver import EffectResolver
from ..engine_core.state import DuelState
from ..session import SessionManager
from .factories import active_duel


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def catalog() -> CardCatalog:
    """The built-in card catalog."""
    return default_catalog()


@pytest.fixture
def reducer() -> Reducer:
    """Reducer with a seeded random source."""
    return Reducer(rng=random.Random(42))


@pytest.fixture
def resolver() -> EffectResolver:
    return EffectResolver()


@pytest.fixture
def duel() -> DuelState:
    """Active duel, side 0 to act, 10 mana each, nothing in play."""
    return active_duel()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def manager(catalog, clock) -> SessionManager:
    """Session manager with a seeded reducer and a fake clock."""
    return SessionManager(
        catalog,
        reducer=Reducer(rng=random.Random(7)),
        grace_period_seconds=60.0,
        clock=clock,
    )
