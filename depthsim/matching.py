"""
Matching engine: an arriving aggressor eats resting depth level by level,
visible before hidden, walking from its target price toward mid.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from depthsim.aggressors import BUY, Aggressor
from depthsim.book import Ladder
from depthsim.config import SweepPolicy
from depthsim.flow import FlowStatistics

__all__ = [
    "SweepPolicy", "LevelFill", "ConsumptionResult",
    "consume_level", "sweep_path", "resolve", "advance_aggressors",
]

BREAK_THROUGH = 2.0     # leftover size that counts as blowing through the book


@dataclass(frozen=True)
class LevelFill:
    index: int
    price: float
    visible: float
    hidden: float

    @property
    def qty(self) -> float:
        return self.visible + self.hidden


@dataclass
class ConsumptionResult:
    aggressor_id: str
    side: str
    target_price: float
    requested: float
    filled: float = 0.0
    remaining: float = 0.0
    fills: List[LevelFill] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return self.remaining > 0

    @property
    def visible_taken(self) -> float:
        return sum(f.visible for f in self.fills)

    @property
    def hidden_taken(self) -> float:
        return sum(f.hidden for f in self.fills)

    def broke_through(self, threshold: float = BREAK_THROUGH) -> bool:
        return self.remaining > threshold


def consume_level(ladder: Ladder, index: int, book_side: str, qty: float) -> Tuple[float, float]:
    """Take up to qty at one level: visible first, hidden after. Returns (visible, hidden)."""
    if not ladder.in_range(index) or qty <= 0:
        return 0.0, 0.0
    visible = ladder.visible_array(book_side)
    hidden = ladder.hidden_array(book_side)
    take_vis = min(qty, max(0.0, float(visible[index])))
    visible[index] -= take_vis
    left = qty - take_vis
    take_hid = 0.0
    if left > 0 and hidden[index] > 0:
        take_hid = min(left, float(hidden[index]))
        hidden[index] -= take_hid
    ladder.activity[index] = 1.0
    return take_vis, take_hid


def sweep_path(ladder: Ladder, start: int, side: str,
               policy: SweepPolicy = SweepPolicy.TOWARD_MID) -> List[int]:
    """Level indices an aggressor visits, in order."""
    mid = ladder.mid_index
    n = len(ladder)
    if side == BUY:
        path = list(range(start, mid - 1, -1))
        if policy == SweepPolicy.THROUGH_BOOK:
            path += list(range(max(start, mid - 1) + 1, n))
    else:
        path = list(range(start, mid + 1))
        if policy == SweepPolicy.THROUGH_BOOK:
            path += list(range(min(start, mid + 1) - 1, -1, -1))
    return path


def resolve(aggressor: Aggressor, ladder: Ladder, flow: Optional[FlowStatistics] = None,
            policy: SweepPolicy = SweepPolicy.TOWARD_MID) -> ConsumptionResult:
    requested = aggressor.size_remaining
    result = ConsumptionResult(aggressor_id=aggressor.aggressor_id, side=aggressor.side,
                               target_price=aggressor.target_price, requested=requested)
    start = ladder.nearest_index(aggressor.target_price)
    for k in sweep_path(ladder, start, aggressor.side, policy):
        if aggressor.size_remaining <= 0:
            break
        vis, hid = consume_level(ladder, k, aggressor.book_side, aggressor.size_remaining)
        aggressor.size_remaining -= vis + hid
        if vis or hid:
            result.fills.append(LevelFill(k, float(ladder.prices[k]), vis, hid))

    # clamp float dust so a full fill reports exactly zero
    aggressor.size_remaining = max(0.0, aggressor.size_remaining)
    result.remaining = aggressor.size_remaining
    result.filled = requested - result.remaining
    if flow is not None:
        flow.accumulate(result.filled * aggressor.sign)
    return result


def advance_aggressors(aggressors: Iterable[Aggressor], ladder: Ladder, dt: float,
                       flow: Optional[FlowStatistics] = None,
                       policy: SweepPolicy = SweepPolicy.TOWARD_MID
                       ) -> Tuple[List[Aggressor], List[ConsumptionResult]]:
    in_flight: List[Aggressor] = []
    results: List[ConsumptionResult] = []
    for agg in aggressors:
        if agg.advance(dt):
            results.append(resolve(agg, ladder, flow, policy))
        else:
            in_flight.append(agg)
    return in_flight, results
