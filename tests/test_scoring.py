"""Tests for sats-per-dollar percentiles and the model score."""

import numpy as np
import pytest

from scoring import (
    SATS_PER_BTC,
    model_score,
    recency_weights,
    sats_per_dollar,
    spd_bounds,
    spd_percentile,
    win_rate,
)

PRICES = np.array([40_000.0, 20_000.0, 50_000.0, 25_000.0])


class TestSpd:

    def test_uniform(self):
        w = np.full(4, 0.25)
        expected = 0.25 * SATS_PER_BTC * (1 / 40_000 + 1 / 20_000 + 1 / 50_000 + 1 / 25_000)
        assert sats_per_dollar(w, PRICES) == pytest.approx(expected)

    def test_bounds(self):
        worst, best = spd_bounds(PRICES)
        assert worst == pytest.approx(SATS_PER_BTC / 50_000)
        assert best == pytest.approx(SATS_PER_BTC / 20_000)

    def test_percentile_extremes(self):
        assert spd_percentile([0, 1, 0, 0], PRICES) == pytest.approx(100.0)
        assert spd_percentile([0, 0, 1, 0], PRICES) == pytest.approx(0.0)

    def test_percentile_flat_window(self):
        assert spd_percentile([0.5, 0.5], [100.0, 100.0]) == 50.0

    def test_shape_mismatch(self):
        with pytest.raises(ValueError, match="shape"):
            sats_per_dollar([0.5, 0.5], PRICES)


class TestScore:

    def test_recency_weights(self):
        w = recency_weights(5, rho=0.5)
        assert w.sum() == pytest.approx(1.0)
        assert np.all(np.diff(w) > 0)
        assert w[-1] / w[-2] == pytest.approx(2.0)

    @pytest.mark.parametrize("rho", [0, 1, 1.5, -0.2])
    def test_recency_rho_bounds(self, rho):
        with pytest.raises(ValueError, match="rho"):
            recency_weights(3, rho=rho)

    def test_win_rate_is_strict(self):
        assert win_rate([60, 40, 50, 70], [50, 50, 50, 50]) == pytest.approx(50.0)

    def test_model_score(self):
        model = [40.0, 60.0, 80.0]
        dca = [50.0, 50.0, 50.0]
        out = model_score(model, dca, rho=0.9)

        rw = np.dot(recency_weights(3, 0.9), model)
        assert out["rw_spd_pct"] == pytest.approx(rw)
        assert out["win_rate"] == pytest.approx(200 / 3)
        assert out["score"] == pytest.approx(0.5 * rw + 0.5 * 200 / 3)

    def test_mismatched_windows(self):
        with pytest.raises(ValueError, match="differ"):
            model_score([1.0, 2.0], [1.0])

    def test_no_windows(self):
        with pytest.raises(ValueError, match="no windows"):
            win_rate([], [])
