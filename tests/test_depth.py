"""
Tests for cumulative depth aggregation and statistics accumulators.
"""

import numpy as np
import pandas as pd
import pytest

from depthsim.book import ASK, BID, Ladder, seed_ladder
from depthsim.depth import (
    DEPTH_SHARE,
    DEPTH_WIDTH_CAP,
    cumulative_depth,
    cumulative_widths,
    side_indices,
)
from depthsim.flow import FlowStatistics, Tape
from depthsim.matching import ConsumptionResult


@pytest.fixture
def bid_ladder():
    return Ladder.from_depths(100.0, 1.0, bids=[4, 6, 0, 3], asks=[2, 2])


class TestCumulativeDepth:
    def test_running_total_from_mid(self, bid_ladder):
        assert list(cumulative_depth(bid_ladder, BID, 4)) == [4, 10, 10, 13]
        assert list(cumulative_depth(bid_ladder, ASK, 2)) == [2, 4]

    def test_beyond_ladder_repeats_last(self, bid_ladder):
        assert list(cumulative_depth(bid_ladder, BID, 6)) == [4, 10, 10, 13, 13, 13]
        assert side_indices(bid_ladder, BID, 6)[-1] == -2

    def test_negative_depth_counts_as_zero(self, bid_ladder):
        bid_ladder.bid_visible[2] = -5.0
        assert list(cumulative_depth(bid_ladder, BID, 4)) == [4, 4, 4, 7]

    def test_pure_read(self, bid_ladder):
        before = bid_ladder.copy()
        cumulative_widths(bid_ladder, BID, 10, 50.0)
        assert np.array_equal(before.bid_visible, bid_ladder.bid_visible)
        assert np.array_equal(before.activity, bid_ladder.activity)

    def test_non_decreasing_on_random_books(self, rng):
        for _ in range(25):
            ladder = seed_ladder(20, 1.0, 100.0, rng=rng)
            ladder.bid_visible -= rng.uniform(0, 60, len(ladder))
            for side in (BID, ASK):
                values = cumulative_depth(ladder, side, int(rng.integers(1, 40)))
                assert np.all(np.diff(values) >= 0)


class TestCumulativeWidths:
    def test_linear_scale(self, bid_ladder):
        widths = cumulative_widths(bid_ladder, BID, 4, 100.0)
        assert widths == pytest.approx([x * DEPTH_SHARE / 100.0 for x in (4, 10, 10, 13)])

    def test_capped(self, bid_ladder):
        widths = cumulative_widths(bid_ladder, BID, 4, 5.0)
        assert widths.max() == pytest.approx(DEPTH_WIDTH_CAP)
        assert np.all(np.diff(widths) >= 0)

    def test_non_positive_clamp_treated_as_one(self, bid_ladder):
        assert cumulative_widths(bid_ladder, BID, 1, 0.0)[0] == pytest.approx(DEPTH_WIDTH_CAP)
        assert list(cumulative_widths(bid_ladder, BID, 2, -3.0)) == list(cumulative_widths(bid_ladder, BID, 2, 1.0))


class TestFlowStatistics:
    def test_accumulate_and_reset(self):
        flow = FlowStatistics()
        flow.accumulate(12.0)
        flow.accumulate(-15.0)
        assert flow.cumulative_signed_volume == pytest.approx(-3.0)
        copy = flow.copy()
        flow.reset()
        assert flow.cumulative_signed_volume == 0.0
        assert copy.cumulative_signed_volume == pytest.approx(-3.0)


class TestTape:
    def _result(self, filled, remaining=0.0):
        return ConsumptionResult(aggressor_id="a1", side="BUY", target_price=101.0,
                                 requested=filled + remaining, filled=filled, remaining=remaining)

    def test_bounded_window(self):
        tape = Tape(maxlen=3)
        for i in range(5):
            tape.record(self._result(float(i)), now=i * 0.1)
        assert len(tape) == 3
        assert [p.filled for p in tape] == [2.0, 3.0, 4.0]

    def test_to_df(self):
        tape = Tape()
        assert tape.to_df().empty
        tape.record(self._result(5.0, 1.0), now=0.5)
        df = tape.to_df()
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == ["time", "price", "side", "filled", "remaining"]
        assert df.iloc[0]["remaining"] == 1.0

    def test_copy_is_independent(self):
        tape = Tape(maxlen=4)
        tape.record(self._result(1.0), now=0.0)
        other = tape.copy()
        other.record(self._result(2.0), now=0.1)
        assert len(tape) == 1
        assert other.prints.maxlen == 4
