"""
Shared fixtures for the Krishi AI test suite.

Every test runs against a throwaway sqlite file in local mode with the
analysis delay switched off.
"""

import os
import sys
import tempfile

# Force local mode before krishi.config reads the environment
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_ANON_KEY"] = ""
os.environ["OPENWEATHER_API_KEY"] = ""
os.environ["INFERENCE_API_URL"] = ""
os.environ["ANALYSIS_DELAY_SECONDS"] = "0"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["KRISHI_DB_PATH"] = os.path.join(tempfile.mkdtemp(prefix="krishi-"), "krishi.db")

# Add parent directory to path to import krishi / server
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from fastapi.testclient import TestClient

from krishi.analysis import CropRecommender, DiseaseDetector
from krishi.auth import AuthService
from krishi.backend import BackendClient
from krishi.database import FarmDatabase
from krishi.profile import ProfileManager
from krishi.weather import WeatherService


@pytest.fixture
def db(tmp_path):
    database = FarmDatabase(str(tmp_path / "test.db"))
    database.init_database()
    return database


@pytest.fixture
def backend(db):
    return BackendClient(mode="local", db=db)


@pytest.fixture
def auth(db):
    return AuthService(mode="local", db=db)


@pytest.fixture
def profiles(backend):
    return ProfileManager(backend)


@pytest.fixture
def client(backend, auth):
    from server import create_app

    app = create_app(
        backend=backend,
        auth=auth,
        detector=DiseaseDetector(delay_seconds=0, max_image_bytes=1024, service_url=""),
        recommender=CropRecommender(delay_seconds=0, service_url=""),
        weather=WeatherService(api_key=""),
    )
    return TestClient(app)


@pytest.fixture
def farmer(auth):
    """A registered and signed-in farmer."""
    assert auth.sign_up("ramesh@example.com", "kisan123", name="Ramesh", phone="9876543210").ok
    result = auth.sign_in("ramesh@example.com", "kisan123")
    assert result.ok
    return result.session
