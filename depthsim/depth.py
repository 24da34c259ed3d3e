"""
Cumulative depth from the spread outward, as raw size and as display width.
Pure reads; the ladder is never modified here.
"""

from __future__ import annotations
from typing import List

import numpy as np

from depthsim.book import BID, Ladder
from depthsim.config import MIN_VOLUME_CLAMP

DEPTH_SHARE = 0.42       # chart width per side at max_volume_clamp
DEPTH_WIDTH_CAP = 0.44


def side_indices(ladder: Ladder, side: str, depth_levels: int) -> List[int]:
    mid = ladder.mid_index
    n = max(0, int(depth_levels))
    if side == BID:
        return [mid - k for k in range(n)]
    return [mid + 1 + k for k in range(n)]


def cumulative_depth(ladder: Ladder, side: str, depth_levels: int) -> np.ndarray:
    steps = [max(0.0, ladder.visible(side, i)) for i in side_indices(ladder, side, depth_levels)]
    return np.cumsum(np.asarray(steps, dtype=float))


def cumulative_widths(ladder: Ladder, side: str, depth_levels: int,
                      max_volume_clamp: float) -> np.ndarray:
    scale = DEPTH_SHARE / max(MIN_VOLUME_CLAMP, float(max_volume_clamp))
    return np.clip(cumulative_depth(ladder, side, depth_levels) * scale, 0.0, DEPTH_WIDTH_CAP)
