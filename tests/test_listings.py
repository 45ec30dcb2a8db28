"""Market price and government scheme listings."""

import random

import pytest

from krishi.market import (
    MARKET_PRICES,
    filter_prices,
    format_change,
    refresh_prices,
    trend_label,
    unique_markets,
    unique_states,
)
from krishi.schemes import SCHEMES, category_icon, category_name, filter_schemes, get_scheme


def crops(prices):
    return [p["crop"] for p in prices]


# ── market prices ───────────────────────────────────────────────────────

def test_no_filter_lists_everything():
    result = filter_prices(MARKET_PRICES)
    assert crops(result) == crops(MARKET_PRICES)
    assert "Potato" in crops(result) and "Tomato" in crops(result)


def test_search_is_case_insensitive():
    assert crops(filter_prices(MARKET_PRICES, search="TOMATO")) == ["Tomato"]
    assert crops(filter_prices(MARKET_PRICES, search="to")) == ["Potato", "Tomato"]


def test_search_matches_hindi_name():
    assert crops(filter_prices(MARKET_PRICES, search="आलू")) == ["Potato"]


def test_market_and_state_are_anded():
    result = filter_prices(MARKET_PRICES, market="Ranchi", state="Jharkhand")
    assert crops(result) == ["Wheat", "Potato"]

    assert filter_prices(MARKET_PRICES, market="Ranchi", state="Bihar") == []


def test_market_match_is_exact():
    assert filter_prices(MARKET_PRICES, market="ranchi") == []


def test_no_match_is_empty_list():
    assert filter_prices(MARKET_PRICES, search="mango") == []


def test_search_term_is_matched_as_typed():
    assert filter_prices(MARKET_PRICES, search=" Potato") == []
    assert filter_schemes(SCHEMES, search=" PM-KISAN") == []
    assert [s["id"] for s in filter_schemes(SCHEMES, search="pm-kisan")] == ["1"]


def test_selector_options_keep_first_seen_order():
    assert unique_markets(MARKET_PRICES) == ["Ranchi", "Jamshedpur", "Dhanbad", "Bokaro"]
    assert unique_states(MARKET_PRICES) == ["Jharkhand"]


def test_refresh_returns_new_records_within_bounds():
    before = [dict(p) for p in MARKET_PRICES]
    refreshed = refresh_prices(MARKET_PRICES, rng=random.Random(7))

    assert [dict(p) for p in MARKET_PRICES] == before
    for old, new in zip(MARKET_PRICES, refreshed):
        assert new is not old
        assert new["crop"] == old["crop"]
        assert abs(new["modal_price"] - old["modal_price"]) <= 50
        assert -5 <= new["change_percent"] <= 5
        assert new["trend"] in ("up", "down", "stable")


@pytest.mark.parametrize("value,expected", [(12.5, "+12.5%"), (-8.3, "-8.3%"), (0, "0.0%")])
def test_format_change(value, expected):
    assert format_change(value) == expected


def test_unknown_trend_is_shown_as_stable():
    assert trend_label("sideways") == trend_label("stable")


# ── schemes ─────────────────────────────────────────────────────────────

def test_scheme_search_fields():
    assert [s["id"] for s in filter_schemes(SCHEMES, search="kisan")] == ["1", "3"]
    assert [s["id"] for s in filter_schemes(SCHEMES, search="फसल बीमा")] == ["2"]
    # description only
    assert [s["id"] for s in filter_schemes(SCHEMES, search="crop losses")] == ["2"]


def test_scheme_category_filter():
    assert [s["name"] for s in filter_schemes(SCHEMES, category="loan")] == ["Kisan Credit Card"]
    assert filter_schemes(SCHEMES, category="training") == []
    assert len(filter_schemes(SCHEMES, category="all")) == len(SCHEMES)


def test_get_scheme():
    assert get_scheme(SCHEMES, "1")["name"] == "PM-KISAN"
    with pytest.raises(KeyError):
        get_scheme(SCHEMES, "99")


def test_category_labels():
    assert category_icon("insurance") == "🛡️"
    assert category_icon("unknown") == "📄"
    assert category_name("unknown") == "अन्य / Other"
