#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Stacking Sats — static site: dynamic-DCA performance vs uniform DCA, price chart coloured by model
weight, this month's weights, and a budget calculator that spreads a USD amount over the month.

Writes: docs/index.html
"""

import json
import logging
import os

import numpy as np
import pandas as pd

from backtest import backtest_cycles, summarize
from calculator import calculate_rows
from charts import month_weight_figure, price_weight_figure
from dca_weights import DEFAULT_CONFIG, build_features, compute_month_weights
from price_data import load_prices

# ───────────────────────────── Config ─────────────────────────────
OUTPUT_HTML    = "docs/index.html"
DEFAULT_BUDGET = 1000
HISTORY_START  = pd.Timestamp("2020-01-01")
HISTORY_END    = pd.Timestamp("2024-12-31")
CONTRIBUTE_URL = "https://github.com/hypertrial/stacking_sats_pipeline"
CONTACT_MAIL   = "mohammad@trilemmacapital.com"
PLOT_CONFIG    = {"responsive": True, "displayModeBar": True,
                  "modeBarButtonsToRemove": ["toImage"], "doubleClick": "reset"}


# ───────────────────────────── Model ─────────────────────────────
def history_weights(features: pd.DataFrame, start=HISTORY_START, end=HISTORY_END,
                    config=DEFAULT_CONFIG) -> pd.DataFrame:
    """Month-by-month weights over [start, end] for days that have a close."""
    frames = []
    for m in pd.date_range(start, end, freq="MS"):
        w = compute_month_weights(features, m.year, m.month,
                                  today=m + pd.offsets.MonthEnd(0), config=config)
        frames.append(w[w["close"].notna()])
    if not frames:
        return pd.DataFrame(columns=["date", "model_weight", "weight_percent", "btc_price"])
    out = pd.concat(frames, ignore_index=True)
    return pd.DataFrame({"date": out["date"], "model_weight": out["weight"],
                         "weight_percent": out["weight"] * 100, "btc_price": out["close"]})


def rows_payload(rows: pd.DataFrame) -> list:
    def num(v):
        return float(v) if pd.notna(v) else None
    return [{"date": d.strftime("%Y-%m-%d"), "weight": float(w), "close": num(c)}
            for d, w, c in zip(pd.to_datetime(rows["date"]), rows["weight"], rows["close"])]


def performance_metric(prices, config=DEFAULT_CONFIG) -> str:
    try:
        summary = summarize(backtest_cycles(prices, HISTORY_START, HISTORY_END, config))
    except ValueError as e:
        print(f"[warn] no backtest metric: {e}")
        return "—"
    return f"{summary['excess_btc_pct']:.2f}%"


# ───────────────────────────── HTML ─────────────────────────────
HTML = """<!doctype html>
<html lang="en"><head>
<meta charset="utf-8"/>
<meta name="viewport" content="width=device-width,initial-scale=1"/>
<title>Stacking Sats</title>
<style>
html,body{height:100%} body{margin:0;font-family:Inter,system-ui,Segoe UI,Arial,sans-serif;color:#111827}
.wrap{max-width:1100px;margin:0 auto;padding:16px}
header{text-align:center;padding:24px 0 8px}
header h1{margin:0;font-size:40px}
header p{margin:6px 0 0;color:#4b5563}
.disclaimer{border:1px solid #f59e0b;background:#fffbeb;border-radius:12px;padding:10px 14px;margin:12px 0;cursor:pointer}
.disclaimer h3{margin:0 0 4px 0;font-size:15px}
.disclaimer p{margin:0;font-size:13px}
.metric{display:flex;justify-content:center;margin:16px 0}
.metric .box{border:1px solid #e5e7eb;border-radius:12px;padding:12px 20px;text-align:center;background:#fafafa}
.metric .pct{font-size:32px;font-weight:700;color:#15803d}
.metric .desc{font-size:13px;color:#6b7280;margin:4px 0 0}
.card{border:1px solid #e5e7eb;border-radius:12px;padding:8px;margin:16px 0}
#calc{display:flex;gap:8px;align-items:center;flex-wrap:wrap}
input[type=text]{font-size:14px;padding:8px 10px;border-radius:8px;border:1px solid #d1d5db;background:#fff;width:160px}
.btn{font-size:14px;padding:8px 10px;border-radius:8px;border:1px solid #d1d5db;background:#fff;cursor:pointer}
.btn:hover{background:#f3f4f6}
.error{color:#b91c1c;font-size:13px}
table{border-collapse:collapse;width:100%;font-size:14px;margin-top:8px}
th,td{padding:6px 8px;border-bottom:1px solid #f3f4f6;text-align:right}
th:first-child,td:first-child{text-align:left}
td.num{font-family:ui-monospace,Menlo,Consolas,monospace;font-variant-numeric:tabular-nums}
tr.future td{color:#9ca3af}
tr.boost td{background:#f0fdf4}
.smallnote{font-size:12px;color:#6b7280}
.actions{display:flex;justify-content:center;gap:12px;margin:24px 0}
.actions a{text-decoration:none}
</style>
</head><body>
<div class="wrap">
  <header>
    <h1>Stacking Sats</h1>
    <p>Optimizing Bitcoin Accumulation for Institutional Investors</p>
  </header>
  <div class="disclaimer" id="disclaimer" title="Click to dismiss">
    <h3>Disclaimer</h3>
    <p>Stacking Sats is provided for informational and educational purposes only. It does not constitute financial advice. Do your own research.</p>
  </div>
  <div class="metric"><div class="box">
    <div class="pct">__METRIC__</div>
    <p class="desc">More BTC accumulated vs standard DCA (__HISTORY_RANGE__)</p>
  </div></div>
  <div class="card">__PRICE_PLOT__</div>
  <div class="card">__MONTH_PLOT__</div>
  <div class="card">
    <div id="calc">
      <label for="budget"><b>Monthly budget (USD):</b></label>
      <input type="text" id="budget" value="__BUDGET__"/>
      <button id="calcBtn" class="btn">Calculate</button>
      <span id="calcErr" class="error"></span>
    </div>
    <table>
      <thead><tr><th>Date</th><th>Weight</th><th>USD</th><th>BTC</th><th>BTC Close</th><th>Status</th></tr></thead>
      <tbody id="rows"></tbody>
    </table>
    <p class="smallnote">__MONTH_LABEL__ · prices: __SOURCE__ · uniform weight 1/N, boosted when price is below its __ROLL_N__-day average.</p>
  </div>
  <div class="actions">
    <a class="btn" href="__CONTRIBUTE_URL__" target="_blank" rel="noopener noreferrer">For Talent: Contribute</a>
    <a class="btn" href="mailto:__CONTACT_MAIL__">For Investors: Contact</a>
  </div>
</div>
<script>
const ROWS = __ROWS_JSON__;
const UNIFORM = 1 / ROWS.length;
const fmtUsd = v => '$' + v.toLocaleString(undefined,{minimumFractionDigits:2, maximumFractionDigits:2});

function parseBudget(s){
  const v = Number(String(s).trim().replace(/^\\$/, '').replace(/,/g, ''));
  return (Number.isFinite(v) && v > 0) ? v : null;
}
function render(){
  const budget = parseBudget(document.getElementById('budget').value);
  const err = document.getElementById('calcErr');
  if (budget === null){ err.textContent = 'Please enter a positive number.'; return; }
  err.textContent = '';
  document.getElementById('rows').innerHTML = ROWS.map(r => {
    const usd = r.weight * budget;
    const past = r.close !== null;
    const cls = (past ? 'past' : 'future') + (r.weight > UNIFORM * 1.0000001 ? ' boost' : '');
    return `<tr class="${cls}"><td>${r.date}</td>`
      + `<td class="num">${(r.weight*100).toFixed(3)}%</td>`
      + `<td class="num">${fmtUsd(usd)}</td>`
      + `<td class="num">${past ? (usd / r.close).toFixed(8) : '—'}</td>`
      + `<td class="num">${past ? fmtUsd(r.close) : '—'}</td>`
      + `<td>${past ? 'past' : 'future'}</td></tr>`;
  }).join('');
}
document.getElementById('calcBtn').onclick = render;
document.getElementById('budget').addEventListener('keydown', e => { if (e.key === 'Enter') render(); });
document.getElementById('disclaimer').onclick = e => { e.currentTarget.style.display = 'none'; };
render();
</script>
</body></html>
"""


def build_site(prices: pd.DataFrame, today=None, budget=DEFAULT_BUDGET, config=DEFAULT_CONFIG) -> str:
    today = pd.Timestamp(today if today is not None else pd.Timestamp.today()).normalize()
    features = build_features(prices, config)

    month = compute_month_weights(features, today.year, today.month, today=today, config=config)
    rows = calculate_rows(month, budget)
    history = history_weights(features, config=config)

    if history.empty:
        price_html = "<p class='smallnote'>No price history in range.</p>"
    else:
        price_fig = price_weight_figure(history, title=f"BTC-USD ({HISTORY_START.year}-{HISTORY_END.year})")
        price_html = price_fig.to_html(full_html=False, include_plotlyjs="cdn", config=PLOT_CONFIG)
    month_fig = month_weight_figure(rows, title=f"Weights for {today:%B %Y}")
    month_html = month_fig.to_html(full_html=False,
                                   include_plotlyjs=False if not history.empty else "cdn",
                                   config=PLOT_CONFIG)

    return (HTML
        .replace("__PRICE_PLOT__", price_html)
        .replace("__MONTH_PLOT__", month_html)
        .replace("__ROWS_JSON__", json.dumps(rows_payload(rows)))
        .replace("__METRIC__", performance_metric(prices, config))
        .replace("__HISTORY_RANGE__", f"{HISTORY_START.year}–{HISTORY_END.year}")
        .replace("__BUDGET__", f"{budget:g}")
        .replace("__MONTH_LABEL__", f"{today:%B %Y}, {int(np.sum(rows['boosted']))} boosted days so far")
        .replace("__SOURCE__", prices.attrs.get("source", "unknown"))
        .replace("__ROLL_N__", str(config.roll_n))
        .replace("__CONTRIBUTE_URL__", CONTRIBUTE_URL)
        .replace("__CONTACT_MAIL__", CONTACT_MAIL)
    )


# ───────────────────────────── Write site ─────────────────────────────
def main():
    logging.basicConfig(level=logging.WARNING, format="[%(levelname)s] %(message)s")
    html = build_site(load_prices())
    os.makedirs(os.path.dirname(OUTPUT_HTML), exist_ok=True)
    with open(OUTPUT_HTML, "w", encoding="utf-8") as f:
        f.write(html)
    print("Wrote", OUTPUT_HTML)


if __name__ == "__main__":
    main()
