"""
Integration tests for the FastAPI server: guards, auth flow, profile
round trip, listings and analysis endpoints.
"""

import time
from concurrent.futures import ThreadPoolExecutor

from fastapi.testclient import TestClient

from krishi import config
from krishi.analysis import CropRecommender, DiseaseDetector
from krishi.messages import bilingual
from krishi.weather import SAMPLE_WEATHER, WeatherService
from server import create_app


def sign_in(client, email="ramesh@example.com", password="kisan123"):
    client.post("/auth/sign-up", json={"email": email, "password": password, "name": "Ramesh"})
    resp = client.post("/auth/sign-in", json={"email": email, "password": password})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


# ── guards ──────────────────────────────────────────────────────────────

def test_protected_screen_redirects_to_auth(client):
    for path in ("/dashboard", "/profile", "/market-prices", "/government-schemes/1"):
        resp = client.get(path, follow_redirects=False)
        assert resp.status_code == 303, path
        assert resp.headers["location"] == "/auth"


def test_landing_is_public(client):
    resp = client.get("/", follow_redirects=False)
    assert resp.status_code == 200
    assert "sign_in" in resp.json()


def test_signed_in_landing_redirects_to_dashboard(client):
    headers = sign_in(client)
    resp = client.get("/", headers=headers, follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/dashboard"


def test_unknown_path_is_not_found(client):
    resp = client.get("/no-such-page")
    assert resp.status_code == 404
    assert resp.json()["detail"] == bilingual("not_found")
    assert resp.json()["path"] == "/no-such-page"


# ── auth ────────────────────────────────────────────────────────────────

def test_sign_in_error_is_shown_verbatim(client):
    resp = client.post("/auth/sign-in", json={"email": "x@example.com", "password": "nope123"})
    assert resp.status_code == 400
    assert resp.json() == {"title": bilingual("signin_error"),
                           "detail": "Invalid login credentials"}


def test_sign_up_validation_error(client):
    resp = client.post("/auth/sign-up", json={"email": "x@example.com", "password": "123"})
    assert resp.status_code == 400
    assert "6 characters" in resp.json()["detail"]


def test_sign_in_sets_session_cookie(client):
    client.post("/auth/sign-up", json={"email": "c@example.com", "password": "kisan123"})
    resp = client.post("/auth/sign-in", json={"email": "c@example.com", "password": "kisan123"})

    assert resp.json()["redirect"] == "/dashboard"
    assert config.SESSION_COOKIE in resp.cookies


def test_sign_out_ends_session(client):
    headers = sign_in(client)
    assert client.post("/auth/sign-out", headers=headers).status_code == 200

    resp = client.get("/dashboard", headers=headers, follow_redirects=False)
    assert resp.status_code == 303


# ── dashboard & profile ─────────────────────────────────────────────────

def test_dashboard(client):
    data = client.get("/dashboard", headers=sign_in(client)).json()
    assert data["greeting"] == "नमस्ते, Ramesh"
    assert data["weather"]["source"] == "sample"
    assert data["achievements"]["total"] == 5


def test_profile_defaults_then_round_trip(client):
    headers = sign_in(client)

    first = client.get("/profile", headers=headers).json()
    assert first["profile"]["language_preference"] == "hi"
    assert first["farm_data"]["ph_level"] == 7.0
    assert first["notice"] is None

    profile = {"name": "Ramesh", "phone_number": "9876543210", "land_size": 2.5,
               "location": "Ranchi", "irrigation_type": "drip", "language_preference": "hi"}
    farm = {"soil_type": "red", "ph_level": 6.4, "nitrogen_level": "low",
            "phosphorus_level": "medium", "potassium_level": "high", "organic_matter": 1.8,
            "previous_crops": ["Rice", "Potato"], "latitude": 23.47, "longitude": 85.47}

    saved = client.put("/profile", json=profile, headers=headers)
    assert saved.status_code == 200
    assert saved.json() == {"success": True, "message": bilingual("profile_saved")}
    assert client.put("/profile/farm-data", json=farm, headers=headers).json()["success"]

    loaded = client.get("/profile", headers=headers).json()
    assert loaded["profile"] == profile
    assert loaded["farm_data"] == farm


def test_profile_save_requires_sign_in(client):
    resp = client.put("/profile", json={"name": "x"}, follow_redirects=False)
    assert resp.status_code == 303


# ── listings ────────────────────────────────────────────────────────────

def test_market_prices_filters(client):
    headers = sign_in(client)

    everything = client.get("/market-prices", headers=headers).json()
    assert everything["count"] == 6
    assert "Ranchi" in everything["markets"]

    empty = client.get("/market-prices", params={"search": "mango"}, headers=headers).json()
    assert empty["prices"] == []
    assert empty["message"] == bilingual("no_prices")


def test_market_prices_refresh(client):
    data = client.post("/market-prices/refresh", params={"market": "Ranchi"},
                       headers=sign_in(client)).json()
    assert [p["crop"] for p in data["prices"]] == ["Wheat", "Potato"]


def test_government_schemes(client):
    headers = sign_in(client)

    data = client.get("/government-schemes", params={"category": "insurance"},
                      headers=headers).json()
    assert [s["id"] for s in data["schemes"]] == ["2"]

    assert client.get("/government-schemes/3", headers=headers).json()["name"] == "Kisan Credit Card"
    assert client.get("/government-schemes/42", headers=headers).status_code == 404


# ── analysis ────────────────────────────────────────────────────────────

def test_disease_detection_requires_image(client):
    resp = client.post("/disease-detection", headers=sign_in(client))
    assert resp.status_code == 400
    assert resp.json()["detail"] == bilingual("upload_first")


def test_disease_detection_rejects_large_image(client):
    resp = client.post("/disease-detection", headers=sign_in(client),
                       files={"image": ("leaf.jpg", b"x" * 2048, "image/jpeg")})
    assert resp.status_code == 413


def test_disease_detection(client):
    resp = client.post("/disease-detection", headers=sign_in(client),
                       files={"image": ("leaf.jpg", b"\xff\xd8\xff fake jpeg", "image/jpeg")})
    assert resp.status_code == 200
    assert resp.json()["results"][0]["hindi_name"] == "पत्ती झुलसा रोग"


def test_crop_recommendation(client):
    resp = client.post("/crop-recommendation", headers=sign_in(client),
                       json={"location": "Ranchi", "soil_type": "red"})
    assert resp.status_code == 200
    assert resp.json()["recommendations"][0]["confidence"] == 92


# ── blocking work ───────────────────────────────────────────────────────

class SlowWeather(WeatherService):
    def get_current_weather(self, lat=None, lon=None):
        time.sleep(0.5)
        return dict(SAMPLE_WEATHER)


def test_blocking_handlers_do_not_stall_each_other(backend, auth):
    app = create_app(
        backend=backend,
        auth=auth,
        detector=DiseaseDetector(delay_seconds=0, service_url=""),
        recommender=CropRecommender(delay_seconds=0, service_url=""),
        weather=SlowWeather(api_key=""),
    )
    with TestClient(app) as slow_client:
        headers = sign_in(slow_client)
        started = time.monotonic()
        with ThreadPoolExecutor(max_workers=3) as pool:
            codes = list(pool.map(
                lambda _: slow_client.get("/dashboard", headers=headers).status_code, range(3)
            ))
        elapsed = time.monotonic() - started

    assert codes == [200, 200, 200]
    # three half-second weather calls overlap instead of queueing on the event loop
    assert elapsed < 1.2
