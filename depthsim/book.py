"""
Price ladder: fixed band of tick-spaced levels around a mid price.
Each level carries visible and hidden (iceberg) depth on both sides.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np


BID = "bid"
ASK = "ask"


def round_price(p: float, tick: float) -> float:
    return float(round(round(p / tick) * tick, 8))


# -----------------------
# Read-only level view
# -----------------------

@dataclass(frozen=True)
class PriceLevel:
    price: float
    bid_visible: float
    ask_visible: float
    bid_hidden: float
    ask_hidden: float
    activity_heat: float     # 0..1, renderer glow
    spoof_active: bool
    spoof_alpha: float       # 0..1 remaining life of a spoof wall

    def visible(self, side: str) -> float:
        return self.bid_visible if side == BID else self.ask_visible

    def hidden(self, side: str) -> float:
        return self.bid_hidden if side == BID else self.ask_hidden

    @property
    def dominant_side(self) -> str:
        bid_total = self.bid_visible + self.bid_hidden
        ask_total = self.ask_visible + self.ask_hidden
        return BID if bid_total >= ask_total else ASK


# -----------------------
# Ladder (struct of arrays)
# -----------------------

class Ladder:
    def __init__(self, prices: Sequence[float], mid_index: int, tick_size: float,
                 bid_visible: Sequence[float], ask_visible: Sequence[float],
                 bid_hidden: Optional[Sequence[float]] = None,
                 ask_hidden: Optional[Sequence[float]] = None):
        n = len(prices)
        if not 0 <= mid_index < n:
            raise ValueError(f"mid_index {mid_index} outside ladder of {n} levels")
        self.prices = np.asarray(prices, dtype=float).copy()
        self.mid_index = int(mid_index)
        self.tick = float(tick_size)
        self.bid_visible = np.asarray(bid_visible, dtype=float).copy()
        self.ask_visible = np.asarray(ask_visible, dtype=float).copy()
        self.bid_hidden = np.zeros(n) if bid_hidden is None else np.asarray(bid_hidden, dtype=float).copy()
        self.ask_hidden = np.zeros(n) if ask_hidden is None else np.asarray(ask_hidden, dtype=float).copy()
        self.activity = np.zeros(n)
        self.spoof_active = np.zeros(n, dtype=bool)
        self.spoof_alpha = np.zeros(n)
        for name in ("bid_visible", "ask_visible", "bid_hidden", "ask_hidden"):
            if len(getattr(self, name)) != n:
                raise ValueError(f"{name} has {len(getattr(self, name))} entries, expected {n}")

    @classmethod
    def from_depths(cls, mid_price: float, tick_size: float,
                    bids: Sequence[float], asks: Sequence[float],
                    bid_hidden: Optional[Sequence[float]] = None,
                    ask_hidden: Optional[Sequence[float]] = None) -> "Ladder":
        """
        Build a ladder from per-side depths listed nearest-to-farthest from mid.
        bids[0] sits on the mid level itself; asks[0] one tick above it.
        """
        nb, na = len(bids), len(asks)
        if nb == 0:
            raise ValueError("need at least the mid level on the bid side")
        n = nb + na
        mid = nb - 1
        prices = [round_price(mid_price + (i - mid) * tick_size, tick_size) for i in range(n)]
        bv = np.zeros(n)
        av = np.zeros(n)
        bh = np.zeros(n)
        ah = np.zeros(n)
        for k, q in enumerate(bids):
            bv[mid - k] = q
        for k, q in enumerate(asks):
            av[mid + 1 + k] = q
        for k, q in enumerate([] if bid_hidden is None else bid_hidden):
            bh[mid - k] = q
        for k, q in enumerate([] if ask_hidden is None else ask_hidden):
            ah[mid + 1 + k] = q
        return cls(prices, mid, tick_size, bv, av, bh, ah)

    def copy(self) -> "Ladder":
        other = Ladder(self.prices, self.mid_index, self.tick,
                       self.bid_visible, self.ask_visible, self.bid_hidden, self.ask_hidden)
        other.activity = self.activity.copy()
        other.spoof_active = self.spoof_active.copy()
        other.spoof_alpha = self.spoof_alpha.copy()
        return other

    def __len__(self) -> int:
        return len(self.prices)

    @property
    def tick_size(self) -> float:
        return self.tick

    @property
    def mid_price(self) -> float:
        return float(self.prices[self.mid_index])

    def in_range(self, i: int) -> bool:
        return 0 <= i < len(self.prices)

    def distance_from_mid(self, i: int) -> int:
        return abs(i - self.mid_index)

    def nearest_index(self, price: float) -> int:
        # fixed spacing: O(1) on the grid, x.5 ties go to the lower index
        x = (price - self.prices[0]) / self.tick
        i = int(math.ceil(x - 0.5))
        return min(max(i, 0), len(self.prices) - 1)

    def visible_array(self, side: str) -> np.ndarray:
        return self.bid_visible if side == BID else self.ask_visible

    def hidden_array(self, side: str) -> np.ndarray:
        return self.bid_hidden if side == BID else self.ask_hidden

    def visible(self, side: str, i: int) -> float:
        if not self.in_range(i):
            return 0.0
        return float(self.visible_array(side)[i])

    def hidden(self, side: str, i: int) -> float:
        if not self.in_range(i):
            return 0.0
        return float(self.hidden_array(side)[i])

    def level(self, i: int) -> Optional[PriceLevel]:
        if not self.in_range(i):
            return None
        return PriceLevel(
            price=float(self.prices[i]),
            bid_visible=float(self.bid_visible[i]),
            ask_visible=float(self.ask_visible[i]),
            bid_hidden=float(self.bid_hidden[i]),
            ask_hidden=float(self.ask_hidden[i]),
            activity_heat=float(self.activity[i]),
            spoof_active=bool(self.spoof_active[i]),
            spoof_alpha=float(self.spoof_alpha[i]),
        )

    def levels(self) -> List[PriceLevel]:
        return [self.level(i) for i in range(len(self.prices))]

    def total_depth(self) -> float:
        return float(self.bid_visible.sum() + self.ask_visible.sum()
                     + self.bid_hidden.sum() + self.ask_hidden.sum())

    def check_invariants(self) -> List[str]:
        """Names of violated invariants; empty when the ladder is sound."""
        problems = []
        for name in ("bid_visible", "ask_visible", "bid_hidden", "ask_hidden"):
            if (getattr(self, name) < 0).any():
                problems.append(f"negative {name}")
        if (self.spoof_alpha[~self.spoof_active] != 0).any():
            problems.append("spoof_alpha set on inactive level")
        if ((self.activity < 0) | (self.activity > 1)).any():
            problems.append("activity outside [0, 1]")
        return problems


# -----------------------
# Initial liquidity profile
# -----------------------

@dataclass
class SeedProfile:
    peak_depth: float = 80.0
    width_fraction: float = 0.35     # bell width relative to full band
    jitter: float = 6.0              # shared +/- noise per level
    side_jitter: float = 8.0         # extra +/- noise on the quoted side
    iceberg_probability: float = 0.15
    iceberg_peak: float = 40.0
    iceberg_falloff: float = 2.0     # hidden size lost per tick from mid


def seed_ladder(half_width: int, tick_size: float, mid_price: float,
                profile: Optional[SeedProfile] = None, rng=None) -> Ladder:
    """Bell-shaped liquidity: heavy near mid, thinning out with distance."""
    profile = profile or SeedProfile()
    rng = rng if rng is not None else np.random.default_rng()
    half_width = max(1, int(half_width))
    n = 2 * half_width + 1
    mid = half_width
    band = 2 * half_width * max(profile.width_fraction, 1e-6)
    prices = [round_price(mid_price + (i - mid) * tick_size, tick_size) for i in range(n)]
    bv = np.zeros(n)
    av = np.zeros(n)
    bh = np.zeros(n)
    ah = np.zeros(n)
    for i in range(n):
        dist = abs(i - mid)
        base = profile.peak_depth * np.exp(-(dist / band) ** 2) + rng.uniform(-profile.jitter, profile.jitter)
        depth = max(0.0, base + rng.uniform(-profile.side_jitter, profile.side_jitter))
        ice = max(0.0, profile.iceberg_peak - dist * profile.iceberg_falloff)
        ice = ice if rng.random() < profile.iceberg_probability else 0.0
        if i <= mid:
            bv[i], bh[i] = depth, ice
        else:
            av[i], ah[i] = depth, ice
    return Ladder(prices, mid, tick_size, bv, av, bh, ah)
