"""
Synthetic limit-order-book simulator behind the depth-chart visualization.
"""

from depthsim.aggressors import BUY, SELL, Aggressor, maybe_spawn, spawn_aggressors
from depthsim.book import ASK, BID, Ladder, PriceLevel, SeedProfile, round_price, seed_ladder
from depthsim.config import SimulationConfig, SweepPolicy
from depthsim.depth import cumulative_depth, cumulative_widths
from depthsim.flow import FlowStatistics, Tape, TapePrint
from depthsim.liquidity import evolve
from depthsim.matching import ConsumptionResult, LevelFill, resolve
from depthsim.simulator import DepthSimulator, SimulationState, Snapshot, initialize, snapshot, tick

__version__ = "0.1.0"
