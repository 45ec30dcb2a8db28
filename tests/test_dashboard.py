"""Dashboard content and weather fallback."""

import random
from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest
import requests

from krishi import routes
from krishi.auth import Session
from krishi.dashboard import (
    FARMING_QUOTES,
    achievement_progress,
    achievement_summary,
    build_dashboard,
    time_greeting,
)
from krishi.weather import SAMPLE_WEATHER, WeatherService


@pytest.mark.parametrize("hour,english", [
    (6, "Good morning! 🌅"),
    (13, "Good afternoon! ☀️"),
    (18, "Good evening! 🌇"),
    (23, "Good night! 🌙"),
    (3, "Good night! 🌙"),
])
def test_time_greeting(hour, english):
    assert time_greeting(datetime(2024, 1, 15, hour, 0))[1] == english


def test_dashboard_greets_by_name_or_kisan():
    weather = WeatherService(api_key="")
    named = build_dashboard(Session("t", "u1", "a@b.c", name="Sita"), weather)
    unnamed = build_dashboard(Session("t", "u1", "a@b.c"), weather)

    assert named["greeting"] == "नमस्ते, Sita"
    assert unnamed["greeting"] == "नमस्ते, किसान"


def test_dashboard_sample_content():
    data = build_dashboard(Session("t", "u1", "a@b.c"), WeatherService(api_key=""),
                           rng=random.Random(1))

    assert data["weather"]["temperature"] == 28
    assert data["soil"]["ph"] == 6.8
    assert "HD-2967" in data["recommendation"]["title"]
    assert data["mascot"]["quote"] in FARMING_QUOTES
    assert data["mascot"]["speech"] == {"lang": "hi-IN", "rate": 0.8, "pitch": 1.1}


def test_menu_tiles_point_at_real_screens():
    data = build_dashboard(Session("t", "u1", "a@b.c"), WeatherService(api_key=""))
    assert all(routes.is_known(item["path"]) for item in data["menu"])


def test_achievements():
    summary = achievement_summary()
    assert (summary["unlocked"], summary["total"]) == (2, 5)

    water = next(b for b in summary["badges"] if b["id"] == "water-saver")
    assert water["badge"] == "🔒"
    assert water["progress_percent"] == 70
    assert achievement_progress({"unlocked": True, "progress": 1, "max_progress": 2}) is None


# ── weather ─────────────────────────────────────────────────────────────

def test_weather_without_key_or_location_uses_sample():
    assert WeatherService(api_key="").get_current_weather(23.3, 85.3) == SAMPLE_WEATHER
    assert WeatherService(api_key="k").get_current_weather(0, 0) == SAMPLE_WEATHER


def test_weather_live_then_cached_on_failure():
    service = WeatherService(api_key="k")
    response = MagicMock()
    response.json.return_value = {
        "main": {"temp": 31.4, "humidity": 58},
        "wind": {"speed": 5},
        "weather": [{"description": "clear sky"}],
    }
    with patch("krishi.weather.requests.get", return_value=response):
        live = service.get_current_weather(23.3441, 85.3096)

    assert live["temperature"] == 31
    assert live["wind_speed"] == 18
    assert live["condition"] == "Clear Sky"
    assert live["source"] == "openweather"

    with patch("krishi.weather.requests.get", side_effect=requests.Timeout("slow")):
        assert service.get_current_weather(23.3441, 85.3096) == live


def test_weather_cache_keeps_only_recent_locations(monkeypatch):
    monkeypatch.setattr("krishi.weather.CACHE_SIZE", 2)
    service = WeatherService(api_key="k")
    response = MagicMock()
    response.json.return_value = {
        "main": {"temp": 30, "humidity": 50},
        "weather": [{"description": "haze"}],
    }
    with patch("krishi.weather.requests.get", return_value=response):
        for lat in (21.0, 22.0, 23.0):
            service.get_current_weather(lat, 85.0)

    assert list(service.last_weather_cache) == ["22.000,85.000", "23.000,85.000"]
