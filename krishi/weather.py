from collections import OrderedDict
from datetime import datetime
from typing import Dict, Optional

import requests

from . import config

# Shown whenever live weather is unavailable
SAMPLE_WEATHER = {
    "temperature": 28,
    "humidity": 65,
    "wind_speed": 12,
    "condition": "Partly Cloudy",
    "forecast": "Moderate rain expected tomorrow",
    "source": "sample",
}

# Locations remembered for the offline fallback, oldest dropped first
CACHE_SIZE = 256


class WeatherService:

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key if api_key is not None else config.OPENWEATHER_API_KEY
        self.base_url = "https://api.openweathermap.org/data/2.5"
        self.last_weather_cache = OrderedDict()

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def get_current_weather(self, lat: Optional[float] = None, lon: Optional[float] = None) -> Dict:
        # 0,0 is the unset geolocation default
        if not self.enabled or lat is None or lon is None or (lat == 0 and lon == 0):
            return dict(SAMPLE_WEATHER)

        key = f"{lat:.3f},{lon:.3f}"
        try:
            url = f"{self.base_url}/weather?lat={lat}&lon={lon}&appid={self.api_key}&units=metric"
            response = requests.get(url, timeout=5)
            response.raise_for_status()
            data = response.json()

            weather = {
                "temperature": round(data["main"]["temp"]),
                "humidity": data["main"]["humidity"],
                # m/s → km/h
                "wind_speed": round(data.get("wind", {}).get("speed", 0) * 3.6),
                "condition": data["weather"][0]["description"].title(),
                "forecast": self._rain_note(data.get("rain", {}).get("1h", 0)),
                "source": "openweather",
                "timestamp": datetime.now().isoformat(),
            }

            self.last_weather_cache[key] = weather
            self.last_weather_cache.move_to_end(key)
            while len(self.last_weather_cache) > CACHE_SIZE:
                self.last_weather_cache.popitem(last=False)
            return weather

        except Exception as e:
            print(f"⚠️ Weather API error: {e}")
            cached = self.last_weather_cache.get(key)
            if cached:
                return cached
            return dict(SAMPLE_WEATHER)

    @staticmethod
    def _rain_note(rain_mm: float) -> str:
        if rain_mm and rain_mm > 0:
            return f"Rain in the last hour: {rain_mm}mm"
        return "No rain in the last hour"
