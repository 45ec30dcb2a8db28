"""
Dashboard content: greeting, weather and soil cards, the featured
recommendation, navigation tiles, mascot quote and achievements.

Everything except live weather is fixed sample content.
"""

import random
from datetime import datetime
from typing import Dict, List, Optional, Tuple

import pytz

from . import config
from .auth import Session
from .weather import WeatherService

SAMPLE_SOIL = {
    "ph": 6.8,
    "nitrogen": "Medium",
    "phosphorus": "High",
    "potassium": "Medium",
    "moisture": 45,
}

FEATURED_RECOMMENDATION = {
    "title": "गेहूं (Wheat) - HD-2967",
    "expected_yield": "अनुमानित उत्पादन: 45 क्विंटल/एकड़",
    "profit_margin": "लाभ मार्जिन: 35%",
    "sustainability": "स्थिरता स्कोर: 4/5",
    "emoji": "🌾",
    "details_path": "/crop-recommendation",
}

MENU_ITEMS = (
    {"title": "फसल सुझाव / Crop Recommendation",   "icon": "🌱", "path": "/crop-recommendation"},
    {"title": "बाजार मूल्य / Market Prices",        "icon": "📈", "path": "/market-prices"},
    {"title": "रोग पहचान / Disease Detection",      "icon": "🔬", "path": "/disease-detection"},
    {"title": "सरकारी योजनाएं / Government Schemes", "icon": "🏛️", "path": "/government-schemes"},
    {"title": "प्रोफाइल / Profile",                 "icon": "👤", "path": "/profile"},
)

FARMING_QUOTES = (
    "🌱 हर छोटा बीज एक बड़े सपने की शुरुआत है! / Every small seed is the beginning of a big dream!",
    "🌾 धैर्य से बोए गए बीज सबसे मीठे फल देते हैं / Seeds sown with patience give the sweetest fruits",
    "☀️ सूरज हर दिन किसानों को नई उम्मीद देता है / The sun gives farmers new hope every day",
    "💧 पानी की हर बूंद मिट्टी में जीवन डालती है / Every drop of water brings life to the soil",
    "🌿 प्रकृति के साथ दोस्ती सबसे अच्छी खेती है / Friendship with nature is the best farming",
)

# Handed to the browser's speech synthesis; nothing is spoken server-side
MASCOT_SPEECH = {"lang": "hi-IN", "rate": 0.8, "pitch": 1.1}
QUOTE_ROTATE_SECONDS = 15

BADGE_EMOJI = {"bronze": "🥉", "silver": "🥈", "gold": "🥇"}

ACHIEVEMENTS = (
    {"id": "first-crop", "title": "First Harvest", "title_hindi": "पहली फसल",
     "description": "Successfully completed your first crop recommendation",
     "type": "bronze", "unlocked": True, "unlocked_at": "2024-01-15"},
    {"id": "water-saver", "title": "Water Conservation Expert",
     "title_hindi": "जल संरक्षण विशेषज्ञ",
     "description": "Saved 500+ liters of water using smart irrigation",
     "type": "silver", "unlocked": False, "progress": 350, "max_progress": 500},
    {"id": "profit-master", "title": "Profit Master", "title_hindi": "लाभ मास्टर",
     "description": "Achieved 50%+ profit margin for 3 consecutive seasons",
     "type": "gold", "unlocked": True, "unlocked_at": "2024-02-10"},
    {"id": "ai-friend", "title": "AI Assistant Champion", "title_hindi": "AI सहायक चैंपियन",
     "description": "Used AI recommendations 50+ times",
     "type": "silver", "unlocked": False, "progress": 32, "max_progress": 50},
    {"id": "community-helper", "title": "Community Helper",
     "title_hindi": "समुदायिक सहायक",
     "description": "Helped 10+ fellow farmers with advice",
     "type": "gold", "unlocked": False, "progress": 7, "max_progress": 10},
)


def time_greeting(now: Optional[datetime] = None) -> Tuple[str, str]:
    """Return (hindi_greeting, english_greeting) for the local hour."""
    now = now or datetime.now(pytz.timezone(config.TIMEZONE))
    hour = now.hour
    if 5 <= hour < 12:
        return "सुप्रभात! 🌅", "Good morning! 🌅"
    elif 12 <= hour < 17:
        return "नमस्ते! ☀️", "Good afternoon! ☀️"
    elif 17 <= hour < 21:
        return "शुभ संध्या! 🌇", "Good evening! 🌇"
    else:
        return "शुभ रात्रि! 🌙", "Good night! 🌙"


def next_quote(rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(FARMING_QUOTES)


def achievement_progress(achievement: Dict) -> Optional[int]:
    """Percent towards unlocking, or None when the badge has no counter."""
    if achievement.get("unlocked") or not achievement.get("max_progress"):
        return None
    return min(100, int(achievement.get("progress", 0) * 100 / achievement["max_progress"]))


def achievement_summary(achievements=ACHIEVEMENTS) -> Dict:
    unlocked = [a for a in achievements if a["unlocked"]]
    badges: List[Dict] = []
    for a in achievements:
        badges.append({
            **a,
            "badge": BADGE_EMOJI[a["type"]] if a["unlocked"] else "🔒",
            "progress_percent": achievement_progress(a),
        })
    return {"unlocked": len(unlocked), "total": len(achievements), "badges": badges}


def build_dashboard(
    session: Session,
    weather_service: Optional[WeatherService] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    rng: Optional[random.Random] = None,
) -> Dict:
    weather_service = weather_service or WeatherService()
    greeting_hi, greeting_en = time_greeting()
    return {
        "greeting": f"नमस्ते, {session.display_name}",
        "time_greeting": f"{greeting_hi} / {greeting_en}",
        "weather": weather_service.get_current_weather(latitude, longitude),
        "soil": dict(SAMPLE_SOIL),
        "recommendation": dict(FEATURED_RECOMMENDATION),
        "menu": [dict(item) for item in MENU_ITEMS],
        "mascot": {
            "quote": next_quote(rng),
            "speech": dict(MASCOT_SPEECH),
            "rotate_seconds": QUOTE_ROTATE_SECONDS,
        },
        "achievements": achievement_summary(),
    }
