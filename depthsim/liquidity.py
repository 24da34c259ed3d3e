"""
Liquidity evolution: random-walk drift of displayed depth and the
spoof-wall lifecycle (flash in, blink, evaporate).
"""

from __future__ import annotations
import logging
from typing import List

import numpy as np

from depthsim.book import Ladder
from depthsim.config import SimulationConfig

logger = logging.getLogger(__name__)

DRIFT_FALLOFF = 120.0       # levels; far levels drift less
HEAT_DECAY_RATE = 0.9       # per second, multiplicative
SPOOF_DECAY_RATE = 3.5      # alpha per second, linear
SPOOF_ALPHA_FLOOR = 0.01
DEPTH_HEADROOM = 1.25       # visible depth cap relative to max_volume_clamp


def _walk(value: float, u: float, scale: float, cap: float) -> float:
    return min(max(value + (u - 0.5) * scale, 0.0), cap)


def evolve(ladder: Ladder, dt: float, config: SimulationConfig, rng) -> None:
    mid = ladder.mid_index
    cap = config.max_volume_clamp * DEPTH_HEADROOM
    heat_keep = float(np.exp(-HEAT_DECAY_RATE * dt))
    spawn_p = config.spoof_intensity * dt
    for i in range(len(ladder)):
        dist = ladder.distance_from_mid(i)
        scale = config.liquidity_drift * float(np.exp(-dist / DRIFT_FALLOFF)) * dt
        if i <= mid:
            ladder.bid_visible[i] = _walk(ladder.bid_visible[i], rng.random(), scale, cap)
        if i >= mid:
            ladder.ask_visible[i] = _walk(ladder.ask_visible[i], rng.random(), scale, cap)

        ladder.activity[i] *= heat_keep

        if ladder.spoof_active[i]:
            alpha = max(0.0, ladder.spoof_alpha[i] - SPOOF_DECAY_RATE * dt)
            if alpha <= SPOOF_ALPHA_FLOOR:
                # the bumped depth is left to drift/consumption
                ladder.spoof_active[i] = False
                alpha = 0.0
            ladder.spoof_alpha[i] = alpha
        elif dist <= config.spoof_max_distance and rng.random() < spawn_p:
            bump = rng.uniform(*config.spoof_bump_range)
            ladder.spoof_active[i] = True
            ladder.spoof_alpha[i] = 1.0
            if i <= mid:
                ladder.bid_visible[i] += bump
            else:
                ladder.ask_visible[i] += bump
            logger.debug("spoof wall at %.2f (+%.1f)", ladder.prices[i], bump)


def spoof_walls(ladder: Ladder) -> List[int]:
    return [int(i) for i in np.flatnonzero(ladder.spoof_active)]
