#!/usr/bin/env python3
"""
Backtest dynamic DCA weights against uniform DCA
Spends a fixed monthly budget over every calendar month (2020-2024) and compares BTC accumulated
"""
import logging

import numpy as np
import pandas as pd

from dca_weights import DEFAULT_CONFIG, build_features, compute_month_weights
from price_data import load_prices
from scoring import model_score, sats_per_dollar, spd_percentile

# ─────────────────────── Configuration ───────────────────────
MONTHLY_BUDGET = 1000
BACKTEST_START = pd.Timestamp("2020-01-01")
BACKTEST_END   = pd.Timestamp("2024-12-31")
RHO            = 0.9


def daily_closes(prices: pd.DataFrame) -> pd.Series:
    """One close per calendar day; gaps carry the previous close forward."""
    s = prices.set_index(pd.to_datetime(prices["date"]).dt.normalize())["close"]
    return s.asfreq("D").ffill()


def backtest_cycles(prices, start=BACKTEST_START, end=BACKTEST_END,
                    config=DEFAULT_CONFIG, monthly_budget=MONTHLY_BUDGET) -> pd.DataFrame:
    features = build_features(prices, config)
    closes = daily_closes(features)
    rows = []
    for month_start in pd.date_range(pd.Timestamp(start), pd.Timestamp(end), freq="MS"):
        month_end = month_start + pd.offsets.MonthEnd(0)
        if month_end > pd.Timestamp(end):
            break
        month_prices = closes.reindex(pd.date_range(month_start, month_end, freq="D"))
        if month_prices.isna().any():
            continue

        w = compute_month_weights(features, month_start.year, month_start.month,
                                  today=month_end, config=config)["weight"].to_numpy()
        uniform = np.full(len(w), 1.0 / len(w))
        p = month_prices.to_numpy()
        rows.append({
            "month":       month_start,
            "spd_model":   sats_per_dollar(w, p),
            "spd_dca":     sats_per_dollar(uniform, p),
            "pct_model":   spd_percentile(w, p),
            "pct_dca":     spd_percentile(uniform, p),
            "btc_model":   float(np.sum(w * monthly_budget / p)),
            "btc_dca":     float(np.sum(uniform * monthly_budget / p)),
            "boosted_max": float(w.max()),
        })
    return pd.DataFrame(rows)


def summarize(cycles: pd.DataFrame, rho=RHO, monthly_budget=MONTHLY_BUDGET) -> dict:
    if cycles.empty:
        raise ValueError("no complete months in the backtest range")
    score = model_score(cycles["pct_model"], cycles["pct_dca"], rho=rho)
    btc_model, btc_dca = cycles["btc_model"].sum(), cycles["btc_dca"].sum()
    return {
        "months":         len(cycles),
        "total_invested": monthly_budget * len(cycles),
        "btc_model":      float(btc_model),
        "btc_dca":        float(btc_dca),
        "excess_btc_pct": float((btc_model / btc_dca - 1) * 100),
        **score,
    }


def main():
    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    prices = load_prices()
    cycles = backtest_cycles(prices)
    summary = summarize(cycles)

    print("=" * 80)
    print(f"BACKTEST RESULTS: ${MONTHLY_BUDGET:,}/month, "
          f"{BACKTEST_START:%Y-%m} to {BACKTEST_END:%Y-%m} ({prices.attrs.get('source', 'unknown')} prices)")
    print("=" * 80)
    print(f"{'Month':<10} {'SPD Model':>12} {'SPD DCA':>12} {'Pct Model':>10} {'Pct DCA':>10} {'Max W':>8}")
    print("-" * 80)
    for _, row in cycles.iterrows():
        print(f"{row['month']:%Y-%m}    {row['spd_model']:>12,.0f} {row['spd_dca']:>12,.0f} "
              f"{row['pct_model']:>9.1f}% {row['pct_dca']:>9.1f}% {row['boosted_max']:>8.4f}")

    print("\n" + "-" * 80)
    print(f"  Months:           {summary['months']:>12}")
    print(f"  Total Invested:   ${summary['total_invested']:>11,.2f}")
    print(f"  BTC (dynamic):    {summary['btc_model']:>12.6f} BTC")
    print(f"  BTC (uniform):    {summary['btc_dca']:>12.6f} BTC")
    print(f"  More BTC vs DCA:  {summary['excess_btc_pct']:>11.2f}%")
    print(f"  RW SPD pct:       {summary['rw_spd_pct']:>11.2f}%")
    print(f"  Win rate:         {summary['win_rate']:>11.2f}%")
    print(f"  Score:            {summary['score']:>12.2f}")


if __name__ == "__main__":
    main()
