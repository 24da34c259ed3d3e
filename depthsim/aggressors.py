"""
Synthetic aggressive orders travelling toward the spread.
"""

from __future__ import annotations
import uuid
from dataclasses import dataclass, field, replace
from typing import List, Optional

from depthsim.book import ASK, BID, round_price
from depthsim.config import SimulationConfig

BUY = "BUY"      # lifts asks
SELL = "SELL"    # hits bids


def new_id(prefix: str = "") -> str:
    return f"{prefix}{uuid.uuid4().hex[:10]}"


@dataclass
class Aggressor:
    side: str
    size: float
    size_remaining: float
    target_price: float
    eta: float               # seconds until it reaches the spread
    aggressor_id: str = field(default_factory=lambda: new_id("a"))

    @property
    def book_side(self) -> str:
        return ASK if self.side == BUY else BID

    @property
    def sign(self) -> int:
        return 1 if self.side == BUY else -1

    def advance(self, dt: float) -> bool:
        """Move toward the spread; True once it has arrived."""
        self.eta = max(0.0, self.eta - dt)
        return self.eta <= 0.0

    def copy(self) -> "Aggressor":
        return replace(self)


def target_spread(config: SimulationConfig) -> float:
    # aggressors cluster around the touch, in ticks
    return max(2.0, config.visible_depth_levels * 0.25)


def maybe_spawn(side: str, dt: float, config: SimulationConfig,
                mid_price: float, tick_size: float, rng) -> Optional[Aggressor]:
    if rng.random() >= config.spawn_rate * dt:
        return None
    offset = rng.uniform(-1.0, 1.0) * target_spread(config)
    size = float(rng.uniform(*config.aggressor_size_range))
    eta = float(rng.uniform(*config.travel_time_range))
    return Aggressor(
        side=side,
        size=size,
        size_remaining=size,
        target_price=round_price(mid_price + offset * tick_size, tick_size),
        eta=eta,
    )


def spawn_aggressors(dt: float, config: SimulationConfig,
                     mid_price: float, tick_size: float, rng) -> List[Aggressor]:
    spawned = []
    for side in (BUY, SELL):
        agg = maybe_spawn(side, dt, config, mid_price, tick_size, rng)
        if agg is not None:
            spawned.append(agg)
    return spawned
