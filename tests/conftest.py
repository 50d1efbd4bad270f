"""Shared fixtures: small daily price frames."""

import numpy as np
import pandas as pd
import pytest


def price_frame(closes, end):
    """Daily closes ending on `end`."""
    dates = pd.date_range(end=pd.Timestamp(end), periods=len(closes), freq="D")
    return pd.DataFrame({"date": dates, "close": np.asarray(closes, dtype=float)})


@pytest.fixture
def make_prices():
    return price_frame


@pytest.fixture
def crash_prices():
    """200 closes of 100 through 2023-01-31, then 50 on 2023-02-01."""
    return price_frame([100.0] * 200 + [50.0], "2023-02-01")


@pytest.fixture
def walk_prices():
    rng = np.random.default_rng(7)
    closes = 20_000 * np.exp(np.cumsum(rng.normal(0.0005, 0.04, 1200)))
    return price_frame(closes, "2023-12-31")
