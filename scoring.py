#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Model score for accumulation weights.

For each accumulation window the sats bought per dollar (SPD) is placed
between the worst case (everything spent at the window's highest price)
and the best case (everything at the lowest). The score blends the
recency-weighted average of that percentile with the win rate against
uniform DCA:

    Score = 0.5 * RW_spd_pct + 0.5 * WinRate
"""

import numpy as np

SATS_PER_BTC = 100_000_000


def sats_per_dollar(weights, prices) -> float:
    w = np.asarray(weights, dtype=float)
    p = np.asarray(prices, dtype=float)
    if w.shape != p.shape:
        raise ValueError(f"weights {w.shape} and prices {p.shape} differ in shape")
    return float(np.sum(w * SATS_PER_BTC / p))


def spd_bounds(prices):
    p = np.asarray(prices, dtype=float)
    return SATS_PER_BTC / p.max(), SATS_PER_BTC / p.min()


def spd_percentile(weights, prices) -> float:
    worst, best = spd_bounds(prices)
    if best == worst:
        return 50.0
    return (sats_per_dollar(weights, prices) - worst) / (best - worst) * 100


def recency_weights(m: int, rho: float = 0.9) -> np.ndarray:
    if not 0 < rho < 1:
        raise ValueError(f"rho must be in (0, 1), got {rho}")
    raw = rho ** np.arange(m - 1, -1, -1, dtype=float)
    return raw / raw.sum()


def _paired(model_pcts, dca_pcts):
    m = np.asarray(model_pcts, dtype=float)
    d = np.asarray(dca_pcts, dtype=float)
    if m.shape != d.shape:
        raise ValueError(f"model ({len(m)}) and DCA ({len(d)}) windows differ")
    if len(m) == 0:
        raise ValueError("no windows to score")
    return m, d


def win_rate(model_pcts, dca_pcts) -> float:
    m, d = _paired(model_pcts, dca_pcts)
    return float(np.mean(m > d) * 100)


def model_score(model_pcts, dca_pcts, rho: float = 0.9) -> dict:
    m, d = _paired(model_pcts, dca_pcts)
    rw = float(np.dot(recency_weights(len(m), rho), m))
    wr = win_rate(m, d)
    return {"rw_spd_pct": rw, "win_rate": wr, "score": 0.5 * rw + 0.5 * wr}
