"""
Farmer profile and farm data: load on screen open, save on button press.

Both records are read by user id and written back whole (upsert). A
missing record means "show the defaults"; any other backend failure is
logged and reported with the generic failure notice.
"""

from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .backend import BackendClient
from .errors import BackendError
from .messages import Notice

PROFILES_TABLE  = "profiles"
FARM_DATA_TABLE = "farm_data"

IRRIGATION_TYPES = {
    "drip":      "ड्रिप / Drip",
    "sprinkler": "स्प्रिंकलर / Sprinkler",
    "flood":     "बाढ़ / Flood",
    "rain_fed":  "बारिश आधारित / Rain-fed",
}

LANGUAGES = {
    "hi": "हिंदी / Hindi",
    "en": "English",
    "gu": "ગુજરાતી / Gujarati",
    "mr": "मराठी / Marathi",
    "ta": "தமிழ் / Tamil",
    "te": "తెలుగు / Telugu",
}

SOIL_TYPES = {
    "clay":         "चिकनी मिट्टी / Clay",
    "sandy":        "रेतीली मिट्टी / Sandy",
    "loam":         "दोमट मिट्टी / Loam",
    "black_cotton": "काली कपास मिट्टी / Black Cotton",
    "red":          "लाल मिट्टी / Red",
    "alluvial":     "जलोढ़ मिट्टी / Alluvial",
}

NUTRIENT_LEVELS = {
    "low":    "कम / Low",
    "medium": "मध्यम / Medium",
    "high":   "उच्च / High",
}


class _Record(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # stored NULLs fall back to the field defaults
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class Profile(_Record):
    name: str = ""
    phone_number: str = ""
    land_size: float = 0
    location: str = ""
    irrigation_type: str = ""
    language_preference: str = "hi"


class FarmData(_Record):
    soil_type: str = ""
    ph_level: float = 7.0
    nitrogen_level: str = "medium"
    phosphorus_level: str = "medium"
    potassium_level: str = "medium"
    organic_matter: float = 2.5
    previous_crops: List[str] = Field(default_factory=list)
    latitude: float = 0
    longitude: float = 0


class LoadedRecords(NamedTuple):
    profile: Profile
    farm: FarmData
    notice: Optional[Notice]   # set only when a read failed


class ProfileManager:

    def __init__(self, backend: BackendClient) -> None:
        self.backend = backend

    def load(self, user_id: str, access_token: Optional[str] = None) -> LoadedRecords:
        notice = None
        try:
            profile = self.load_profile(user_id, access_token)
        except BackendError as exc:
            print(f"[Profile] Error fetching profile: {exc}")
            profile, notice = Profile(), Notice.failed("load_failed")
        try:
            farm = self.load_farm_data(user_id, access_token)
        except BackendError as exc:
            print(f"[Profile] Error fetching farm data: {exc}")
            farm, notice = FarmData(), Notice.failed("load_failed")
        return LoadedRecords(profile, farm, notice)

    def load_profile(self, user_id: str, access_token: Optional[str] = None) -> Profile:
        row = self.backend.read_one(PROFILES_TABLE, user_id, access_token)
        return Profile.model_validate(row) if row else Profile()

    def load_farm_data(self, user_id: str, access_token: Optional[str] = None) -> FarmData:
        row = self.backend.read_one(FARM_DATA_TABLE, user_id, access_token)
        return FarmData.model_validate(row) if row else FarmData()

    def save_profile(
        self, user_id: str, profile: Profile, access_token: Optional[str] = None
    ) -> Notice:
        return self._save(PROFILES_TABLE, user_id, profile, access_token,
                          "profile_saved", "profile_save_failed")

    def save_farm_data(
        self, user_id: str, farm: FarmData, access_token: Optional[str] = None
    ) -> Notice:
        return self._save(FARM_DATA_TABLE, user_id, farm, access_token,
                          "farm_saved", "farm_save_failed")

    def _save(
        self,
        table: str,
        user_id: str,
        record: BaseModel,
        access_token: Optional[str],
        ok_key: str,
        failed_key: str,
    ) -> Notice:
        if not user_id:
            return Notice.failed("login_required")
        row: Dict[str, Any] = {"user_id": user_id, **record.model_dump()}
        try:
            self.backend.upsert(table, row, access_token)
        except BackendError as exc:
            print(f"[Profile] Error saving {table}: {exc}")
            return Notice.failed(failed_key)
        return Notice.ok(ok_key)


# ── local edits, persisted only on save ─────────────────────────────────

def add_previous_crop(farm: FarmData, crop: str) -> FarmData:
    name = (crop or "").strip()
    if not name or name in farm.previous_crops:
        return farm
    return farm.model_copy(update={"previous_crops": [*farm.previous_crops, name]})


def remove_previous_crop(farm: FarmData, crop: str) -> FarmData:
    if crop not in farm.previous_crops:
        return farm
    crops = list(farm.previous_crops)
    crops.remove(crop)
    return farm.model_copy(update={"previous_crops": crops})


def apply_location(
    farm: FarmData, latitude: Optional[float], longitude: Optional[float]
) -> Tuple[FarmData, Notice]:
    """Fill coordinates from a one-shot geolocation reading."""
    if latitude is None or longitude is None:
        return farm, Notice.failed("location_failed")
    updated = farm.model_copy(update={"latitude": float(latitude), "longitude": float(longitude)})
    return updated, Notice.ok("location_ok")
