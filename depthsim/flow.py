"""
Flow statistics (signed aggressive volume) and the bounded print tape.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterator

import pandas as pd


class FlowStatistics:
    """Running sum of buy volume minus sell volume actually consumed."""

    def __init__(self, cumulative_signed_volume: float = 0.0):
        self.cumulative_signed_volume = float(cumulative_signed_volume)

    def accumulate(self, delta: float) -> float:
        self.cumulative_signed_volume += float(delta)
        return self.cumulative_signed_volume

    def reset(self):
        self.cumulative_signed_volume = 0.0

    def copy(self) -> "FlowStatistics":
        return FlowStatistics(self.cumulative_signed_volume)


@dataclass(frozen=True)
class TapePrint:
    time: float         # simulation clock, seconds
    price: float
    side: str           # aggressor side
    filled: float
    remaining: float


class Tape:
    def __init__(self, maxlen: int = 120):
        self.prints: Deque[TapePrint] = deque(maxlen=maxlen)

    def record(self, result, now: float) -> TapePrint:
        p = TapePrint(time=float(now), price=result.target_price, side=result.side,
                      filled=result.filled, remaining=result.remaining)
        self.prints.append(p)
        return p

    def __len__(self) -> int:
        return len(self.prints)

    def __iter__(self) -> Iterator[TapePrint]:
        return iter(self.prints)

    def copy(self) -> "Tape":
        other = Tape(self.prints.maxlen)
        other.prints.extend(self.prints)
        return other

    def to_df(self) -> pd.DataFrame:
        rows = [{
            "time": p.time,
            "price": p.price,
            "side": p.side,
            "filled": p.filled,
            "remaining": p.remaining,
        } for p in self.prints]
        if not rows:
            return pd.DataFrame(columns=["time", "price", "side", "filled", "remaining"])
        return pd.DataFrame(rows).sort_values("time")
