"""
Simulation knobs shared by the core and the Dash host.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Tuple

logger = logging.getLogger(__name__)


class SweepPolicy(str, Enum):
    TOWARD_MID = "toward_mid"        # walk from target to the touch and stop
    THROUGH_BOOK = "through_book"    # then keep sweeping outward past the target


MIN_REPLAY_SPEED = 0.01
MIN_VOLUME_CLAMP = 1.0


def _ordered(bounds: Tuple[float, float], floor: float) -> Tuple[float, float]:
    lo, hi = (float(b) for b in bounds)
    lo = max(floor, lo)
    return (lo, max(lo, hi))


@dataclass
class SimulationConfig:
    replay_speed: float = 1.0            # dt multiplier
    visible_depth_levels: int = 36       # per side
    max_volume_clamp: float = 120.0      # display scale cap
    iceberg_sensitivity: float = 0.5     # renderer only
    spawn_rate: float = 1.1              # aggressors / second / side
    spoof_intensity: float = 0.15        # activations / second / level
    spoof_max_distance: int = 24         # levels from mid eligible for spoofing
    spoof_bump_range: Tuple[float, float] = (28.0, 58.0)
    liquidity_drift: float = 132.0       # random-walk step scale / second
    aggressor_size_range: Tuple[float, float] = (6.0, 46.0)
    travel_time_range: Tuple[float, float] = (0.6, 1.2)
    sweep_policy: SweepPolicy = SweepPolicy.TOWARD_MID
    tape_length: int = 120

    def clamped(self) -> "SimulationConfig":
        """Copy with every field pulled back into its valid range."""
        fixed = replace(
            self,
            replay_speed=max(MIN_REPLAY_SPEED, float(self.replay_speed)),
            visible_depth_levels=max(1, int(self.visible_depth_levels)),
            max_volume_clamp=max(MIN_VOLUME_CLAMP, float(self.max_volume_clamp)),
            iceberg_sensitivity=min(1.0, max(0.0, float(self.iceberg_sensitivity))),
            spawn_rate=max(0.0, float(self.spawn_rate)),
            spoof_intensity=max(0.0, float(self.spoof_intensity)),
            spoof_max_distance=max(0, int(self.spoof_max_distance)),
            spoof_bump_range=_ordered(self.spoof_bump_range, 0.0),
            liquidity_drift=max(0.0, float(self.liquidity_drift)),
            aggressor_size_range=_ordered(self.aggressor_size_range, 0.0),
            travel_time_range=_ordered(self.travel_time_range, 0.0),
            sweep_policy=SweepPolicy(self.sweep_policy),
            tape_length=max(1, int(self.tape_length)),
        )
        if fixed != self:
            changed = [f.name for f in fields(self) if getattr(fixed, f.name) != getattr(self, f.name)]
            logger.debug("clamped config fields: %s", ", ".join(changed))
        return fixed

    def updated(self, **changes) -> "SimulationConfig":
        return replace(self, **changes).clamped()
