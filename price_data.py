#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
BTC/USD daily closes: remote CSV feed with a local cache, and a synthetic
random-walk series used whenever the feed cannot be read.
"""

import io
import logging
import os

import numpy as np
import pandas as pd
import requests

logger = logging.getLogger(__name__)

# ───────────────────────────── Config ─────────────────────────────
DATA_DIR   = "data"
PRICE_FILE = os.path.join(DATA_DIR, "btc_usd.csv")
PRICE_URL  = "https://stooq.com/q/d/l/?s=btcusd&i=d"
UA         = {"User-Agent": "stacking-sats/1.0"}

DATE_KEYS  = ("date", "timestamp")
PRICE_KEYS = ("close", "price", "value")

FETCH_ERRORS = (requests.RequestException, ValueError,
                pd.errors.ParserError, pd.errors.EmptyDataError)


# ───────────────────────────── Parsing ─────────────────────────────
def clean_prices(df: pd.DataFrame) -> pd.DataFrame:
    out = df[["date", "close"]].copy()
    out["date"] = pd.to_datetime(out["date"], errors="coerce")
    if getattr(out["date"].dt, "tz", None) is not None:
        out["date"] = out["date"].dt.tz_localize(None)
    out["date"] = out["date"].dt.normalize()
    out["close"] = pd.to_numeric(out["close"].astype(str).str.replace(",", ""), errors="coerce")
    ok = out["date"].notna() & np.isfinite(out["close"]) & (out["close"] > 0)
    out = out[ok].sort_values("date", kind="mergesort")
    return out.drop_duplicates("date", keep="last").reset_index(drop=True)


def parse_price_csv(text: str) -> pd.DataFrame:
    df = pd.read_csv(io.StringIO(text.strip()))
    df.columns = [str(c).strip().lower() for c in df.columns]
    date_col  = next((c for c in df.columns if any(k in c for k in DATE_KEYS)), None)
    price_col = next((c for c in df.columns if any(k in c for k in PRICE_KEYS)), None)
    if date_col is None or price_col is None:
        raise ValueError(f"no usable date/price columns in {list(df.columns)}")
    return clean_prices(df.rename(columns={date_col: "date", price_col: "close"}))


# ───────────────────────────── Sources ─────────────────────────────
def fetch_price_csv(url: str = PRICE_URL, timeout: int = 30) -> pd.DataFrame:
    r = requests.get(url, timeout=timeout, headers=UA); r.raise_for_status()
    df = parse_price_csv(r.text)
    if df.empty:
        raise ValueError(f"{url} returned no usable rows")
    return df


def synthetic_prices(end=None, days: int = 1500, start_price: float = 10_000.0,
                     drift: float = 0.0008, vol: float = 0.035, seed=None) -> pd.DataFrame:
    """Geometric random walk with a slight upward drift, ending on `end` (default today)."""
    if days < 1:
        raise ValueError(f"days must be >= 1, got {days}")
    end = pd.Timestamp(end if end is not None else pd.Timestamp.today()).normalize()
    dates = pd.date_range(end=end, periods=days, freq="D")
    rng = np.random.default_rng(seed)
    steps = np.concatenate([[0.0], rng.normal(drift, vol, days - 1)])
    close = start_price * np.exp(np.cumsum(steps))
    return pd.DataFrame({"date": dates, "close": close})


def load_prices(url: str = PRICE_URL, cache_path=PRICE_FILE, refresh: bool = False,
                allow_synthetic: bool = True) -> pd.DataFrame:
    """
    Cached CSV if present, otherwise the remote feed (written back to the
    cache). A failed fetch falls back to `synthetic_prices()` unless
    `allow_synthetic` is False.
    """
    if cache_path and os.path.exists(cache_path) and not refresh:
        df = clean_prices(pd.read_csv(cache_path))
        if not df.empty:
            df.attrs["source"] = "cache"
            return df
    try:
        df = fetch_price_csv(url)
    except FETCH_ERRORS as e:
        if not allow_synthetic:
            raise
        logger.warning(f"[Prices] could not fetch {url}: {e}; using synthetic series")
        df = synthetic_prices()
        df.attrs["source"] = "synthetic"
        return df
    if cache_path:
        os.makedirs(os.path.dirname(cache_path) or ".", exist_ok=True)
        df.to_csv(cache_path, index=False)
    df.attrs["source"] = "remote"
    return df
