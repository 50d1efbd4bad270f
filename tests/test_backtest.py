"""Tests for the month-by-month backtest against uniform DCA."""

import numpy as np
import pandas as pd
import pytest

from backtest import backtest_cycles, daily_closes, summarize
from dca_weights import DCAWeightConfig
from price_data import synthetic_prices


@pytest.fixture(scope="module")
def long_prices():
    return synthetic_prices(end="2021-01-31", days=900, seed=5)


class TestDailyCloses:

    def test_gaps_forward_filled(self, make_prices):
        prices = make_prices([1.0, 2.0, 3.0], "2024-01-03").drop(index=1)
        s = daily_closes(prices)

        assert len(s) == 3
        assert s.tolist() == [1.0, 1.0, 3.0]


class TestBacktestCycles:

    def test_one_row_per_full_month(self, long_prices):
        cycles = backtest_cycles(long_prices, "2020-01-01", "2020-12-31")

        assert len(cycles) == 12
        assert cycles["month"].iloc[0] == pd.Timestamp("2020-01-01")
        assert cycles["pct_model"].between(0, 100).all()
        assert cycles["pct_dca"].between(0, 100).all()

    def test_uniform_leg_matches_plain_dca(self, long_prices):
        cycles = backtest_cycles(long_prices, "2020-03-01", "2020-03-31", monthly_budget=310)
        march = long_prices.set_index("date")["close"]["2020-03-01":"2020-03-31"].to_numpy()

        assert cycles["btc_dca"].iloc[0] == pytest.approx(np.sum(10.0 / march))

    def test_uncovered_months_skipped(self, long_prices):
        cycles = backtest_cycles(long_prices, "2018-01-01", "2020-06-30")

        first = long_prices["date"].iloc[0]
        assert (cycles["month"] >= first).all()
        assert cycles["month"].iloc[-1] == pd.Timestamp("2020-06-01")

    def test_trailing_partial_month_excluded(self, long_prices):
        cycles = backtest_cycles(long_prices, "2020-11-01", "2020-12-15")
        assert cycles["month"].tolist() == [pd.Timestamp("2020-11-01")]

    def test_zero_alpha_equals_dca(self, long_prices):
        cycles = backtest_cycles(long_prices, "2020-01-01", "2020-06-30",
                                 config=DCAWeightConfig(alpha=0.0))

        np.testing.assert_allclose(cycles["spd_model"], cycles["spd_dca"])


class TestSummarize:

    def test_summary(self, long_prices):
        cycles = backtest_cycles(long_prices, "2020-01-01", "2020-12-31", monthly_budget=100)
        s = summarize(cycles, monthly_budget=100)

        assert s["months"] == 12
        assert s["total_invested"] == 1200
        assert s["excess_btc_pct"] == pytest.approx((s["btc_model"] / s["btc_dca"] - 1) * 100)
        assert 0 <= s["win_rate"] <= 100
        assert s["score"] == pytest.approx(0.5 * s["rw_spd_pct"] + 0.5 * s["win_rate"])

    def test_empty(self):
        with pytest.raises(ValueError, match="no complete months"):
            summarize(pd.DataFrame())
