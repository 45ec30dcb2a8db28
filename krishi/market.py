"""
Mandi (market) prices: sample rates, filtering and a simulated refresh.

The rates are placeholder records; there is no live market feed.
"""

import random
from typing import Dict, Iterable, List, Optional

ALL = "all"

# Placeholder mandi rates, ₹ per quintal
MARKET_PRICES = (
    {"crop": "Wheat",  "hindi_name": "गेहूं",  "market": "Ranchi",     "state": "Jharkhand",
     "min_price": 2050, "max_price": 2150, "modal_price": 2100, "arrival_date": "2024-01-15",
     "units": "per quintal", "trend": "up",     "change_percent": 3.2},
    {"crop": "Rice",   "hindi_name": "चावल",   "market": "Jamshedpur", "state": "Jharkhand",
     "min_price": 2800, "max_price": 3200, "modal_price": 3000, "arrival_date": "2024-01-15",
     "units": "per quintal", "trend": "up",     "change_percent": 5.1},
    {"crop": "Maize",  "hindi_name": "मक्का",  "market": "Dhanbad",    "state": "Jharkhand",
     "min_price": 1850, "max_price": 1950, "modal_price": 1900, "arrival_date": "2024-01-15",
     "units": "per quintal", "trend": "down",   "change_percent": -2.1},
    {"crop": "Onion",  "hindi_name": "प्याज",  "market": "Bokaro",     "state": "Jharkhand",
     "min_price": 1200, "max_price": 1500, "modal_price": 1350, "arrival_date": "2024-01-15",
     "units": "per quintal", "trend": "stable", "change_percent": 0.8},
    {"crop": "Potato", "hindi_name": "आलू",    "market": "Ranchi",     "state": "Jharkhand",
     "min_price": 800,  "max_price": 1200, "modal_price": 1000, "arrival_date": "2024-01-15",
     "units": "per quintal", "trend": "up",     "change_percent": 12.5},
    {"crop": "Tomato", "hindi_name": "टमाटर",  "market": "Jamshedpur", "state": "Jharkhand",
     "min_price": 2000, "max_price": 3000, "modal_price": 2500, "arrival_date": "2024-01-15",
     "units": "per quintal", "trend": "down",   "change_percent": -8.3},
)

TREND_LABELS = {
    "up":     ("📈", "बढ़ती कीमत / Rising"),
    "down":   ("📉", "गिरती कीमत / Falling"),
    "stable": ("➡️", "स्थिर / Stable"),
}


def filter_prices(
    prices: Iterable[Dict],
    search: str = "",
    market: str = ALL,
    state: str = ALL,
) -> List[Dict]:
    """
    Return the records matching every active criterion.

    search  case-insensitive substring of the English or Hindi crop name,
            matched as typed (surrounding spaces included)
    market  exact market name, "all"/"" to skip
    state   exact state name, "all"/"" to skip
    """
    needle = (search or "").lower()
    result = []
    for price in prices:
        if needle and needle not in price["crop"].lower() \
                and needle not in price["hindi_name"].lower():
            continue
        if market and market != ALL and price["market"] != market:
            continue
        if state and state != ALL and price["state"] != state:
            continue
        result.append(price)
    return result


def unique_markets(prices: Iterable[Dict]) -> List[str]:
    return list(dict.fromkeys(p["market"] for p in prices))


def unique_states(prices: Iterable[Dict]) -> List[str]:
    return list(dict.fromkeys(p["state"] for p in prices))


def refresh_prices(prices: Iterable[Dict], rng: Optional[random.Random] = None) -> List[Dict]:
    """Simulate a fresh pull: jitter modal price and change %, redraw the trend."""
    rng = rng or random.Random()
    refreshed = []
    for price in prices:
        if rng.random() > 0.5:
            trend = "up"
        elif rng.random() > 0.3:
            trend = "down"
        else:
            trend = "stable"
        refreshed.append({
            **price,
            "modal_price":    round(price["modal_price"] + (rng.random() - 0.5) * 100, 2),
            "change_percent": round((rng.random() - 0.5) * 10, 1),
            "trend":          trend,
        })
    return refreshed


def format_change(change_percent: float) -> str:
    sign = "+" if change_percent > 0 else ""
    return f"{sign}{change_percent:.1f}%"


def trend_label(trend: str) -> str:
    emoji, text = TREND_LABELS.get(trend, TREND_LABELS["stable"])
    return f"{emoji} {text}"
