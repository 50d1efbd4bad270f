#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Dynamic DCA weights — 200-day moving-average features and the sequential
within-month re-allocation that boosts days trading below trend.

Every weight vector starts uniform (1/N). Walking the days in calendar order,
a day whose close sits below its moving average is boosted by
(1 + alpha·z) and the excess is deducted evenly from all later days, so the
vector stays on the clipped simplex after every single update.
"""

import logging
from dataclasses import dataclass
from datetime import date

import numpy as np
import pandas as pd

from price_data import clean_prices

logger = logging.getLogger(__name__)

FEATURE_COLUMNS = ["date", "close", "moving_average", "moving_std"]
WEIGHT_COLUMNS = ["date", "weight", "close", "moving_average", "moving_std", "boosted"]


class WeightConstraintError(RuntimeError):
    """A computed weight vector left the clipped simplex."""


# ───────────────────────────── Config ─────────────────────────────
@dataclass(frozen=True)
class DCAWeightConfig:
    roll_n: int = 200          # trailing window (days)
    alpha: float = 1.25        # boost factor
    min_weight: float = 1e-5   # per-day floor
    tolerance: float = 1e-8    # |sum - 1| allowed by the post-check

    def __post_init__(self):
        if int(self.roll_n) != self.roll_n or self.roll_n < 1:
            raise ValueError(f"roll_n must be a positive integer, got {self.roll_n}")
        if not np.isfinite(self.alpha) or self.alpha < 0:
            raise ValueError(f"alpha must be non-negative, got {self.alpha}")
        if not self.min_weight > 0:
            raise ValueError(f"min_weight must be positive, got {self.min_weight}")
        if not self.tolerance > 0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")


DEFAULT_CONFIG = DCAWeightConfig()


# ───────────────────────── Feature builder ─────────────────────────
def _clean(prices: pd.DataFrame) -> pd.DataFrame:
    if prices is None or len(prices) == 0:
        return pd.DataFrame({"date": pd.Series(dtype="datetime64[ns]"),
                             "close": pd.Series(dtype=float)})
    df = clean_prices(prices)
    dropped = len(prices) - len(df)
    if dropped:
        logger.debug(f"[Features] dropped {dropped} malformed or duplicate price rows")
    return df


def build_features(prices: pd.DataFrame, config: DCAWeightConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """
    Trailing simple moving average and population std of `close`.

    The first roll_n-1 rows carry NaN statistics. Rows are positional, so
    calendar gaps in the input are not filled.
    """
    df = _clean(prices)
    roll = df["close"].rolling(config.roll_n, min_periods=config.roll_n)
    df["moving_average"] = roll.mean()
    df["moving_std"] = roll.std(ddof=0)
    return df[FEATURE_COLUMNS]


# ───────────────────────── Weight allocator ─────────────────────────
def window_days(start, end) -> pd.DatetimeIndex:
    return pd.date_range(pd.Timestamp(start).normalize(), pd.Timestamp(end).normalize(), freq="D")


def month_days(year: int, month: int) -> pd.DatetimeIndex:
    first = pd.Timestamp(year=year, month=month, day=1)
    return window_days(first, first + pd.offsets.MonthEnd(0))


def _feature_lookup(features: pd.DataFrame) -> dict:
    if features is None or len(features) == 0:
        return {}
    dates = pd.to_datetime(features["date"])
    if dates.dt.tz is not None:
        dates = dates.dt.tz_localize(None)
    dates = dates.dt.normalize()
    return {d: (c, ma, sd) for d, c, ma, sd in zip(
        dates, features["close"], features["moving_average"], features["moving_std"])}


def validate_weights(weights, config: DCAWeightConfig = DEFAULT_CONFIG):
    w = np.asarray(weights, dtype=float)
    total = float(w.sum())
    if not abs(total - 1.0) <= config.tolerance:
        logger.error(f"[Allocator] weights sum to {total!r}")
        raise WeightConstraintError(f"weights sum to {total:.12f}, expected 1 ± {config.tolerance}")
    low = float(w.min()) if len(w) else 0.0
    if not low >= config.min_weight:
        logger.error(f"[Allocator] minimum weight {low!r} below floor")
        raise WeightConstraintError(f"minimum weight {low:.3e} below floor {config.min_weight:.1e}")


def compute_weights(features: pd.DataFrame, start, end, today=None,
                    config: DCAWeightConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """
    Weight vector for every calendar day in [start, end].

    Only days up to `today` (default: the local date) are considered for a
    boost; later days keep the uniform prior minus whatever earlier boosts
    drew from them.
    """
    days = window_days(start, end)
    n = len(days)
    if n == 0:
        raise ValueError(f"empty window: start={start} end={end}")
    today = pd.Timestamp(today if today is not None else date.today()).normalize()
    lookup = _feature_lookup(features)

    weights = np.full(n, 1.0 / n)
    boosted = np.zeros(n, dtype=bool)
    resolved = np.zeros(n, dtype=bool)

    for i, day in enumerate(days):
        if day > today:
            break
        rec = lookup.get(day)
        if rec is None:
            continue
        resolved[i] = True
        close, ma, sd = rec
        if not (np.isfinite(close) and np.isfinite(ma) and np.isfinite(sd)):
            continue
        if close <= 0 or sd <= 0 or close >= ma:
            continue

        z = (ma - close) / sd
        boost = weights[i] * (1 + config.alpha * z)
        excess = boost - weights[i]
        if excess <= 0:
            continue
        future = n - i - 1
        if future == 0:
            continue
        reduction = excess / future

        if np.any(weights[i + 1:] - reduction < config.min_weight):
            logger.info(
                f"[Allocator] {day.date()} boost skipped: z={z:.2f} would push "
                f"later days below {config.min_weight:g}"
            )
            continue

        weights[i] = boost
        weights[i + 1:] -= reduction
        boosted[i] = True

    validate_weights(weights, config)

    out = pd.DataFrame({"date": days, "weight": weights})
    echo = [lookup[d] if r else (np.nan, np.nan, np.nan) for d, r in zip(days, resolved)]
    out["close"] = [e[0] for e in echo]
    out["moving_average"] = [e[1] for e in echo]
    out["moving_std"] = [e[2] for e in echo]
    out["boosted"] = boosted
    return out[WEIGHT_COLUMNS]


def compute_month_weights(features: pd.DataFrame, year: int, month: int, today=None,
                          config: DCAWeightConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    days = month_days(year, month)
    return compute_weights(features, days[0], days[-1], today=today, config=config)
