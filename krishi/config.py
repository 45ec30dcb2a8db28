"""
Runtime configuration, read once from the environment / .env file.

Every setting has a working default so the app runs fully offline
(local sqlite backend, local auth, sample data).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

ROOT_DIR = Path(__file__).resolve().parent.parent

DB_PATH = os.getenv("KRISHI_DB_PATH", str(ROOT_DIR / "data" / "krishi.db"))

SUPABASE_URL      = os.getenv("SUPABASE_URL", "").strip()
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "").strip()

# Simulated analysis wait, seconds
ANALYSIS_DELAY_SECONDS = float(os.getenv("ANALYSIS_DELAY_SECONDS", "3"))
MAX_IMAGE_BYTES        = int(os.getenv("MAX_IMAGE_BYTES", str(10 * 1024 * 1024)))

# External classification / recommendation service (optional)
INFERENCE_API_URL = os.getenv("INFERENCE_API_URL", "").strip()
INFERENCE_TIMEOUT = float(os.getenv("INFERENCE_TIMEOUT", "20"))

OPENWEATHER_API_KEY = os.getenv("OPENWEATHER_API_KEY", "").strip()

PORT           = int(os.getenv("PORT", "8000"))
SESSION_COOKIE = os.getenv("SESSION_COOKIE", "krishi_session")
TIMEZONE       = os.getenv("KRISHI_TIMEZONE", "Asia/Kolkata")

# Cost factor for local password hashes
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))


def backend_mode() -> str:
    """'supabase' when both hosted-service settings are present, else 'local'."""
    if SUPABASE_URL and SUPABASE_ANON_KEY and "your_" not in SUPABASE_ANON_KEY:
        return "supabase"
    return "local"
