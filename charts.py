#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Plotly figures for model weights against BTC price.
"""

import math

import numpy as np
import pandas as pd
import plotly.graph_objects as go

COL_HIGH   = "rgb(0, 128, 0)"     # weight above the 75th percentile
COL_LOW    = "rgb(255, 0, 0)"
COL_PAST   = "#F7931A"
COL_FUTURE = "#D1D5DB"


def high_allocation_threshold(weights, q: float = 0.75) -> float:
    w = np.sort(np.asarray(weights, dtype=float))
    if len(w) == 0:
        raise ValueError("no weights")
    return float(w[min(math.floor(len(w) * q), len(w) - 1)])


def segment_runs(flags):
    """[(start, stop, flag)] for maximal runs; stop is exclusive."""
    runs, start = [], 0
    for i in range(1, len(flags) + 1):
        if i == len(flags) or flags[i] != flags[start]:
            runs.append((start, i, bool(flags[start])))
            start = i
    return runs


def price_weight_figure(df: pd.DataFrame, title: str = "BTC-USD") -> go.Figure:
    """
    BTC price line coloured per segment: green when the segment's starting
    day carries a weight above the 75th percentile, red otherwise.

    Expects `date`, `model_weight` and `btc_price` columns.
    """
    thr = high_allocation_threshold(df["model_weight"])
    dates = list(pd.to_datetime(df["date"]))
    price = df["btc_price"].tolist()
    high = (df["model_weight"] > thr).tolist()

    xs = {True: [], False: []}
    ys = {True: [], False: []}
    for start, stop, flag in segment_runs(high):
        end = min(stop + 1, len(price))   # join onto the next run
        xs[flag] += dates[start:end] + [None]
        ys[flag] += price[start:end] + [None]

    fig = go.Figure()
    for flag, name, color in ((False, "Standard allocation", COL_LOW),
                              (True, "Higher allocation", COL_HIGH)):
        fig.add_trace(go.Scatter(x=xs[flag], y=ys[flag], mode="lines", name=name,
                                 line=dict(color=color, width=3), connectgaps=False,
                                 hovertemplate="%{x|%Y-%m-%d}<br>$%{y:,.0f}<extra></extra>"))
    fig.update_layout(
        template="plotly_white",
        title=title,
        hovermode="x",
        xaxis=dict(type="date", title="Date", nticks=20),
        yaxis=dict(title="BTC-USD", tickformat="$,d"),
        legend=dict(orientation="h", x=0, y=1.08),
        margin=dict(l=70, r=30, t=70, b=60),
    )
    return fig


def month_weight_figure(weights: pd.DataFrame, title: str = "This month's weights") -> go.Figure:
    past = weights["close"].notna()
    fig = go.Figure(go.Bar(
        x=weights["date"], y=weights["weight"] * 100,
        marker_color=np.where(past, COL_PAST, COL_FUTURE).tolist(),
        customdata=np.where(past, "past", "future"),
        hovertemplate="%{x|%b %d}<br>%{y:.3f}%<br>%{customdata}<extra></extra>",
        name="Weight",
    ))
    fig.add_hline(y=100 / len(weights), line=dict(color="#6B7280", dash="dash"),
                  annotation_text="uniform DCA", annotation_position="top left")
    fig.update_layout(
        template="plotly_white",
        title=title,
        xaxis=dict(type="date", title=None),
        yaxis=dict(title="Weight (%)"),
        showlegend=False,
        margin=dict(l=70, r=30, t=70, b=50),
    )
    return fig
