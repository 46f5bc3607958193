"""Shared fixtures for the spawn bridge tests."""
from __future__ import annotations

import random

import pytest

from spawnbridge.simulation import BridgeContext, GridWorld
from tests.spawnbridge.helpers import ManualClock


@pytest.fixture
def world():
    return GridWorld(64, 64, actor_tile=(32, 32))


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def context(world, clock):
    return BridgeContext(world, rng=random.Random(7), clock=clock)
