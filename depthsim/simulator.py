"""
Tick-driven driver for the depth-chart microstructure simulation.

The host owns a SimulationState and drives it with tick(); every tick runs
the same phase order:

    1. liquidity evolution (drift + spoof walls)
    2. aggressor spawning
    3. matching of every in-flight aggressor that arrives this tick
    4. (read side) snapshot() recomputes cumulative depth for the renderer

tick() copies the mutable parts of the state before touching them, so the
state passed in is left as it was. The random source is shared between
states and its stream advances.
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from depthsim.aggressors import Aggressor, spawn_aggressors
from depthsim.book import ASK, BID, Ladder, PriceLevel, SeedProfile, seed_ladder
from depthsim.config import SimulationConfig
from depthsim.depth import cumulative_depth, cumulative_widths
from depthsim.flow import FlowStatistics, Tape
from depthsim.liquidity import evolve, spoof_walls
from depthsim.matching import ConsumptionResult, advance_aggressors

logger = logging.getLogger(__name__)


@dataclass
class SimulationState:
    ladder: Ladder
    rng: object
    config: SimulationConfig = field(default_factory=SimulationConfig)
    aggressors: List[Aggressor] = field(default_factory=list)
    flow: FlowStatistics = field(default_factory=FlowStatistics)
    tape: Tape = field(default_factory=Tape)
    clock: float = 0.0
    tick_count: int = 0
    last_results: List[ConsumptionResult] = field(default_factory=list)

    def copy(self) -> "SimulationState":
        return replace(
            self,
            ladder=self.ladder.copy(),
            aggressors=[a.copy() for a in self.aggressors],
            flow=self.flow.copy(),
            tape=self.tape.copy(),
            last_results=[],
        )


@dataclass(frozen=True)
class Snapshot:
    levels: Tuple[PriceLevel, ...]
    mid_index: int
    mid_price: float
    cumulative_bid: Tuple[float, ...]          # display widths, fraction of chart
    cumulative_ask: Tuple[float, ...]
    cumulative_bid_depth: Tuple[float, ...]    # raw running size
    cumulative_ask_depth: Tuple[float, ...]
    cumulative_signed_volume: float
    in_flight: int
    spoof_levels: Tuple[int, ...]
    clock: float

    def levels_to_df(self) -> pd.DataFrame:
        return pd.DataFrame([vars(lvl) for lvl in self.levels])


def initialize(level_count: int = 60, tick_size: float = 1.0, mid_price: float = 1000.0,
               seed_profile: Optional[SeedProfile] = None, rng=None,
               seed: Optional[int] = None,
               config: Optional[SimulationConfig] = None) -> SimulationState:
    """level_count is the number of levels on each side of mid."""
    rng = rng if rng is not None else np.random.default_rng(seed)
    config = (config or SimulationConfig()).clamped()
    ladder = seed_ladder(level_count, tick_size, mid_price, seed_profile, rng)
    logger.debug("seeded ladder: %d levels around %.2f", len(ladder), ladder.mid_price)
    return SimulationState(ladder=ladder, rng=rng, config=config, tape=Tape(config.tape_length))


def tick(state: SimulationState, dt: float, config: Optional[SimulationConfig] = None) -> SimulationState:
    config = (config or state.config).clamped()
    try:
        dt = float(dt)
    except (TypeError, ValueError):
        dt = 0.0
    if not math.isfinite(dt) or dt <= 0:
        return state

    step = dt * config.replay_speed
    new = state.copy()
    new.config = config
    if new.tape.prints.maxlen != config.tape_length:
        new.tape = Tape(config.tape_length)
        new.tape.prints.extend(state.tape.prints)

    evolve(new.ladder, step, config, new.rng)
    new.aggressors.extend(
        spawn_aggressors(step, config, new.ladder.mid_price, new.ladder.tick_size, new.rng))
    new.aggressors, results = advance_aggressors(
        new.aggressors, new.ladder, step, new.flow, config.sweep_policy)

    new.clock = state.clock + step
    new.tick_count = state.tick_count + 1
    for r in results:
        new.tape.record(r, new.clock)
        if r.broke_through():
            logger.debug("%s aggressor broke through the book, %.2f unfilled", r.side, r.remaining)
    new.last_results = results
    return new


def snapshot(state: SimulationState, config: Optional[SimulationConfig] = None) -> Snapshot:
    config = (config or state.config).clamped()
    ladder = state.ladder
    levels = config.visible_depth_levels
    return Snapshot(
        levels=tuple(ladder.levels()),
        mid_index=ladder.mid_index,
        mid_price=ladder.mid_price,
        cumulative_bid=tuple(cumulative_widths(ladder, BID, levels, config.max_volume_clamp).tolist()),
        cumulative_ask=tuple(cumulative_widths(ladder, ASK, levels, config.max_volume_clamp).tolist()),
        cumulative_bid_depth=tuple(cumulative_depth(ladder, BID, levels).tolist()),
        cumulative_ask_depth=tuple(cumulative_depth(ladder, ASK, levels).tolist()),
        cumulative_signed_volume=state.flow.cumulative_signed_volume,
        in_flight=len(state.aggressors),
        spoof_levels=tuple(spoof_walls(ladder)),
        clock=state.clock,
    )


def reset_flow(state: SimulationState) -> SimulationState:
    return replace(state, flow=FlowStatistics())


# -----------------------
# Host-side wrapper
# -----------------------

class DepthSimulator:
    """Owns the state between frames, so a UI callback can just call step()."""

    def __init__(self, level_count: int = 60, tick: float = 1.0, mid_price: float = 1000.0,
                 seed: Optional[int] = 42, config: Optional[SimulationConfig] = None,
                 seed_profile: Optional[SeedProfile] = None):
        self.state = initialize(level_count, tick, mid_price, seed_profile=seed_profile,
                                seed=seed, config=config)

    @property
    def config(self) -> SimulationConfig:
        return self.state.config

    def configure(self, **changes) -> SimulationConfig:
        self.state = replace(self.state, config=self.state.config.updated(**changes))
        return self.state.config

    def step(self, seconds: float) -> List[ConsumptionResult]:
        new = tick(self.state, seconds)
        if new is self.state:
            return []
        self.state = new
        return new.last_results

    def snapshot(self) -> Snapshot:
        return snapshot(self.state)

    def reset_flow(self):
        self.state = reset_flow(self.state)
