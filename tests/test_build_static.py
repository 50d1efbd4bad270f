"""Tests for the static site builder (no network: synthetic prices only)."""

import json
import re

import pandas as pd
import pytest

import build_static
from build_static import build_site, history_weights, rows_payload
from calculator import calculate_rows
from dca_weights import build_features, compute_month_weights
from price_data import synthetic_prices

PLACEHOLDERS = ["__PRICE_PLOT__", "__MONTH_PLOT__", "__ROWS_JSON__", "__METRIC__",
                "__HISTORY_RANGE__", "__BUDGET__", "__MONTH_LABEL__", "__SOURCE__",
                "__ROLL_N__", "__CONTRIBUTE_URL__", "__CONTACT_MAIL__"]


@pytest.fixture(scope="module")
def site_prices():
    df = synthetic_prices(end="2024-12-15", days=2500, seed=21)
    df.attrs["source"] = "synthetic"
    return df


def _rows_json(html):
    m = re.search(r"const ROWS = (\[.*?\]);\n", html, re.S)
    assert m, "ROWS payload missing"
    return json.loads(m.group(1))


class TestHistoryWeights:

    def test_only_days_with_close(self, site_prices):
        f = build_features(site_prices)
        h = history_weights(f, pd.Timestamp("2020-01-01"), pd.Timestamp("2020-03-31"))

        assert list(h.columns) == ["date", "model_weight", "weight_percent", "btc_price"]
        assert len(h) == 31 + 29 + 31
        assert h["btc_price"].notna().all()
        assert (h["weight_percent"] == h["model_weight"] * 100).all()


class TestRowsPayload:

    def test_nan_close_becomes_null(self, site_prices):
        w = compute_month_weights(build_features(site_prices), 2024, 12, today="2024-12-10")
        payload = rows_payload(calculate_rows(w, 100))

        assert payload[0]["date"] == "2024-12-01"
        assert payload[9]["close"] is not None
        assert payload[10]["close"] is None
        json.dumps(payload)


class TestBuildSite:

    def test_renders(self, site_prices):
        html = build_site(site_prices, today="2024-12-15", budget=2500)

        for ph in PLACEHOLDERS:
            assert ph not in html
        assert "<title>Stacking Sats</title>" in html
        assert 'value="2500"' in html
        assert "prices: synthetic" in html
        assert re.search(r'<div class="pct">-?\d+\.\d{2}%</div>', html)

        rows = _rows_json(html)
        assert len(rows) == 31
        assert sum(r["weight"] for r in rows) == pytest.approx(1.0, abs=1e-8)
        assert [r["close"] is not None for r in rows] == [True] * 15 + [False] * 16

    def test_no_history(self):
        prices = synthetic_prices(end="2019-06-30", days=100, seed=2)
        html = build_site(prices, today="2019-06-15")

        assert "No price history in range." in html
        assert '<div class="pct">—</div>' in html
        assert "cdn.plot.ly" in html

    def test_main_writes_file(self, site_prices, tmp_path, monkeypatch, capsys):
        out = tmp_path / "docs" / "index.html"
        monkeypatch.setattr(build_static, "OUTPUT_HTML", str(out))
        monkeypatch.setattr(build_static, "load_prices", lambda: site_prices)

        build_static.main()

        assert out.exists()
        assert "Stacking Sats" in out.read_text(encoding="utf-8")
        assert "Wrote" in capsys.readouterr().out
