from __future__ import annotations

import random

import pytest

from magma_mayhem.models import Grid
from magma_mayhem.patterns import HazardPattern
from magma_mayhem.session import Session


class FloodPattern(HazardPattern):
    """Lava on every cell of the grid, start zone included."""

    def evaluate(self, now_ms, base_speed_ms, grid):
        return set(grid.cells())


@pytest.fixture
def grid():
    return Grid()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def flood():
    return FloodPattern()


@pytest.fixture
def session(rng):
    return Session(rng=rng, show_tutorial=False)


@pytest.fixture
def playing(session):
    """A session that has counted down and is in live play at t=2800."""
    session.start_game(0)
    session.tick(2800)
    session.drain_events()
    return session
