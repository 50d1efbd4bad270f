#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
"Calculate" action of the site: a USD budget spread over the current month's
dynamic weights.
"""

import logging
from datetime import date

import numpy as np
import pandas as pd

from dca_weights import DEFAULT_CONFIG, DCAWeightConfig, build_features, compute_month_weights

logger = logging.getLogger(__name__)


def parse_budget(value) -> float:
    if isinstance(value, str):
        value = value.strip().lstrip("$").replace(",", "")
    try:
        budget = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Budget must be a number, got {value!r}") from None
    if not np.isfinite(budget) or budget <= 0:
        raise ValueError(f"Budget must be a positive number, got {value!r}")
    return budget


def calculate_rows(weights: pd.DataFrame, budget: float) -> pd.DataFrame:
    """Dollar (and, where the day has a close, BTC) amount per day."""
    out = weights.copy()
    out["usd_amount"] = out["weight"] * budget
    out["is_past"] = out["close"].notna()
    out["btc_amount"] = np.where(out["is_past"], out["usd_amount"] / out["close"], np.nan)
    return out


def run_calculator(prices: pd.DataFrame, budget, today=None,
                   config: DCAWeightConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    budget = parse_budget(budget)
    today = pd.Timestamp(today if today is not None else date.today()).normalize()
    features = build_features(prices, config)
    weights = compute_month_weights(features, today.year, today.month, today=today, config=config)
    rows = calculate_rows(weights, budget)
    logger.info(
        f"[Calculator] {today:%Y-%m}: ${budget:,.2f} over {len(rows)} days, "
        f"{int(rows['boosted'].sum())} boosted"
    )
    return rows
