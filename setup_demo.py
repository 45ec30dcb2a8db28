"""Create a local demo farmer with a profile and farm data."""

from krishi.auth import AuthService
from krishi.backend import BackendClient
from krishi.profile import FarmData, Profile, ProfileManager

DEMO_EMAIL = "kisan@example.com"
DEMO_PASSWORD = "kisan123"


def setup_demo() -> None:
    """Register the demo account (local mode) and save its records."""
    backend = BackendClient(mode="local")
    auth = AuthService(mode="local", db=backend.db)

    result = auth.sign_up(DEMO_EMAIL, DEMO_PASSWORD, name="रामेश्वर महतो", phone="+91 98765 43210")
    if not result.ok:
        print(f"✗ Sign-up skipped: {result.error}")

    result = auth.sign_in(DEMO_EMAIL, DEMO_PASSWORD)
    if not result.ok:
        print(f"✗ Could not sign in as {DEMO_EMAIL}: {result.error}")
        return
    session = result.session

    profiles = ProfileManager(backend)
    profile = Profile(
        name="रामेश्वर महतो",
        phone_number="+91 98765 43210",
        land_size=2.5,
        location="ओरमांझी, रांची, झारखंड",
        irrigation_type="drip",
        language_preference="hi",
    )
    farm = FarmData(
        soil_type="red",
        ph_level=6.4,
        nitrogen_level="low",
        phosphorus_level="medium",
        potassium_level="medium",
        organic_matter=1.8,
        previous_crops=["धान", "आलू"],
        latitude=23.4710,
        longitude=85.4690,
    )

    for notice in (
        profiles.save_profile(session.user_id, profile),
        profiles.save_farm_data(session.user_id, farm),
    ):
        print(f"{'✓' if notice.success else '✗'} {notice.message}")

    auth.sign_out(session.access_token)
    print(f"\n✓ Demo ready | Login: {DEMO_EMAIL} / {DEMO_PASSWORD}")


if __name__ == "__main__":
    setup_demo()
