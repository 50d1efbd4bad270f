# ─────────────────────────────────────────────────────────────
# streamlit_dca_app.py  ·  Stacking Sats calculator
#  ▸ dynamic DCA weights for a month  ▸ price chart coloured by weight
# ─────────────────────────────────────────────────────────────
import pandas as pd, streamlit as st
from streamlit_plotly_events import plotly_events

from backtest import BACKTEST_END, BACKTEST_START
from build_static import history_weights
from calculator import calculate_rows, parse_budget
from charts import month_weight_figure, price_weight_figure
from dca_weights import DEFAULT_CONFIG, build_features, compute_month_weights
from price_data import load_prices

DISCLAIMER = ("Stacking Sats is provided for informational and educational purposes only. "
              "It does not constitute financial advice. Do your own research.")


# ─── data loaders ────────────────────────────────────────────
@st.cache_data(ttl=3600)
def _prices():
    df = load_prices()
    return df, df.attrs.get("source", "unknown")


@st.cache_data(ttl=3600)
def _features(prices):
    return build_features(prices, DEFAULT_CONFIG)


# ─── Streamlit layout ────────────────────────────────────────
st.set_page_config(page_title="Stacking Sats", layout="wide")
st.title("Stacking Sats")
st.caption("Optimizing Bitcoin Accumulation for Institutional Investors")
st.info(DISCLAIMER)

prices, source = _prices()
features = _features(prices)
today = pd.Timestamp.today().normalize()

raw_budget = st.sidebar.text_input("Budget (USD)", value="1,000")
month_pick = st.sidebar.date_input("Month", value=today.date())
st.sidebar.caption(f"Prices: {source} · window {DEFAULT_CONFIG.roll_n}d · α={DEFAULT_CONFIG.alpha}")

try:
    budget = parse_budget(raw_budget)
except ValueError as e:
    st.sidebar.error(str(e))
    st.stop()

weights = compute_month_weights(features, month_pick.year, month_pick.month, today=today)
rows = calculate_rows(weights, budget)

c1, c2, c3 = st.columns(3)
c1.metric("Days", len(rows))
c2.metric("Boosted days", int(rows["boosted"].sum()))
c3.metric("Largest day", f"${rows['usd_amount'].max():,.2f}")

# ─── Chart 1: this month's weights ───────────────────────────
st.plotly_chart(month_weight_figure(rows, title=f"Weights for {month_pick:%B %Y}"),
                use_container_width=True)

table = rows.assign(
    date=rows["date"].dt.strftime("%Y-%m-%d"),
    weight=(rows["weight"] * 100).round(4),
    status=rows["is_past"].map({True: "past", False: "future"}),
)[["date", "weight", "usd_amount", "btc_amount", "close", "moving_average", "status"]]
st.dataframe(table.rename(columns={"weight": "weight (%)"}), use_container_width=True, hide_index=True)

# ─── Chart 2: price coloured by weight ───────────────────────
history = history_weights(features, BACKTEST_START, BACKTEST_END)
if history.empty:
    st.warning("No price history in the backtest range.")
else:
    fig = price_weight_figure(history, title=f"BTC-USD ({BACKTEST_START.year}-{BACKTEST_END.year})")

    # keep zoom
    if "xrange" in st.session_state:
        fig.update_xaxes(range=st.session_state["xrange"])
    st.plotly_chart(fig, use_container_width=True)

    ev = plotly_events(fig, select_event=False, click_event=False, key="zoom")
    if ev and "xaxis.range[0]" in ev[0]:
        st.session_state["xrange"] = [ev[0]["xaxis.range[0]"], ev[0]["xaxis.range[1]"]]
