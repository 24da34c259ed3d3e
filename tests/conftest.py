from __future__ import annotations

import numpy as np
import pytest

from depthsim.book import Ladder
from depthsim.config import SimulationConfig


class ScriptedRng:
    """Random source that replays a fixed list of unit draws, then a default."""

    def __init__(self, values, default: float = 0.5):
        self.values = list(values)
        self.default = default
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        if self.values:
            return self.values.pop(0)
        return self.default

    def uniform(self, low: float = 0.0, high: float = 1.0) -> float:
        return low + self.random() * (high - low)


@pytest.fixture
def rng():
    return np.random.default_rng(7)


@pytest.fixture
def quiet_config():
    """No drift, no spoofing, no spawning: only what a test drives explicitly."""
    return SimulationConfig(liquidity_drift=0.0, spoof_intensity=0.0, spawn_rate=0.0)


@pytest.fixture
def ask_ladder():
    # mid 1000 with an empty bid at mid; asks 1001..1003 hold 10, 5, 0
    return Ladder.from_depths(1000.0, 1.0, bids=[0.0], asks=[10.0, 5.0, 0.0])
