from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Dict, Optional

import uvicorn
from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from krishi import config, routes
from krishi.analysis import (
    FORM_PREVIOUS_CROPS,
    FORM_SOIL_TYPES,
    CropForm,
    CropRecommender,
    DiseaseDetector,
)
from krishi.auth import AuthService, Session
from krishi.backend import BackendClient
from krishi.dashboard import build_dashboard
from krishi.errors import AnalysisError
from krishi.market import MARKET_PRICES, filter_prices, refresh_prices, unique_markets, unique_states
from krishi.messages import bilingual
from krishi.profile import (
    IRRIGATION_TYPES,
    LANGUAGES,
    NUTRIENT_LEVELS,
    SOIL_TYPES,
    FarmData,
    Profile,
    ProfileManager,
)
from krishi.schemes import CATEGORIES, SCHEMES, filter_schemes, get_scheme
from krishi.weather import WeatherService


class SignInRequest(BaseModel):
    email: str
    password: str


class SignUpRequest(BaseModel):
    email: str
    password: str
    name: str = ""
    phone: str = ""


class _Redirect(Exception):
    def __init__(self, location: str) -> None:
        self.location = location


# ── request helpers ──────────────────────────────────────────────────────

def _token(request: Request) -> Optional[str]:
    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return request.cookies.get(config.SESSION_COOKIE)


def current_session(request: Request) -> Optional[Session]:
    return request.app.state.auth.get_session(_token(request))


def guard(request: Request, session: Optional[Session] = Depends(current_session)) -> Optional[Session]:
    target = routes.resolve_redirect(request.url.path, session is not None)
    if target:
        raise _Redirect(target)
    return session


def _notice_response(notice) -> JSONResponse:
    return JSONResponse(notice.to_dict(), status_code=200 if notice.success else 500)


# ── app factory ──────────────────────────────────────────────────────────

def create_app(
    backend: Optional[BackendClient] = None,
    auth: Optional[AuthService] = None,
    detector: Optional[DiseaseDetector] = None,
    recommender: Optional[CropRecommender] = None,
    weather: Optional[WeatherService] = None,
) -> FastAPI:
    backend = backend or BackendClient()
    auth = auth or AuthService(db=backend.db)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        # ── startup ──
        print("\n" + "=" * 60)
        print("KRISHI AI SERVER STARTED")
        print("=" * 60)
        print(f"  Backend     : {backend.mode}")
        print(f"  Auth        : {auth.mode}")
        print(f"  Inference   : {config.INFERENCE_API_URL or 'sample results'}")
        print(f"  Weather     : {'openweather' if app.state.weather.enabled else 'sample'}")
        print(f"  Routes      :")
        for path, title in routes.ROUTES.items():
            print(f"    {path:<22} {title}")
        print("=" * 60 + "\n")

        yield  # server is running

        # ── shutdown ──
        print("Krishi AI server stopped")

    app = FastAPI(
        title="Krishi AI",
        description="Crop advice, mandi prices, disease detection and schemes for farmers",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.backend     = backend
    app.state.auth        = auth
    app.state.profiles    = ProfileManager(backend)
    app.state.detector    = detector or DiseaseDetector()
    app.state.recommender = recommender or CropRecommender()
    app.state.weather     = weather or WeatherService()

    auth.subscribe(lambda event, session: print(
        f"[Auth] {event}: {session.email if session else '-'}"
    ))

    @app.exception_handler(_Redirect)
    async def redirect_handler(_request: Request, exc: _Redirect):
        return RedirectResponse(exc.location, status_code=303)

    @app.exception_handler(StarletteHTTPException)
    async def not_found_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(
                {"detail": bilingual("not_found"), "path": request.url.path},
                status_code=404,
            )
        return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)

    @app.exception_handler(AnalysisError)
    async def analysis_error_handler(_request: Request, exc: AnalysisError):
        return JSONResponse({"detail": str(exc)}, status_code=exc.status_code)

    # ── landing & auth ──────────────────────────────────────────────────

    @app.get("/")
    async def landing(_session: Optional[Session] = Depends(guard)) -> Dict:
        return {
            "title": routes.ROUTES[routes.HOME],
            "tagline": "AI-Powered Crop Recommendations",
            "sign_in": routes.AUTH,
            "crop_form": {"soil_types": FORM_SOIL_TYPES, "previous_crops": FORM_PREVIOUS_CROPS},
        }

    @app.get("/auth")
    async def auth_screen(session: Optional[Session] = Depends(guard)) -> Dict:
        return {
            "title": "किसान पोर्टल / Farmer Portal",
            "signed_in": session is not None,
            "provider": auth.mode,
        }

    # store, network and hashing calls block, so these handlers run in the threadpool
    @app.post("/auth/sign-in")
    def sign_in(body: SignInRequest):
        result = auth.sign_in(body.email, body.password)
        if not result.ok:
            return JSONResponse(
                {"title": bilingual("signin_error"), "detail": result.error}, status_code=400
            )
        session = result.session
        response = JSONResponse({
            "title": "स्वागत है! / Welcome!",
            "message": bilingual("welcome"),
            "access_token": session.access_token,
            "user": {"id": session.user_id, "email": session.email, "name": session.name},
            "redirect": routes.DASHBOARD,
        })
        response.set_cookie(config.SESSION_COOKIE, session.access_token, httponly=True,
                            samesite="lax")
        return response

    @app.post("/auth/sign-up")
    def sign_up(body: SignUpRequest):
        result = auth.sign_up(body.email, body.password, body.name, body.phone)
        if not result.ok:
            return JSONResponse(
                {"title": bilingual("signup_error"), "detail": result.error}, status_code=400
            )
        return {
            "title": bilingual("signup_done"),
            "message": bilingual("signup_pending") if result.confirmation_pending else "",
            "confirmation_pending": result.confirmation_pending,
        }

    @app.post("/auth/sign-out")
    def sign_out(request: Request):
        auth.sign_out(_token(request))
        response = JSONResponse({"message": bilingual("signed_out"), "redirect": routes.HOME})
        response.delete_cookie(config.SESSION_COOKIE)
        return response

    # ── dashboard ───────────────────────────────────────────────────────

    @app.get("/dashboard")
    def dashboard(session: Session = Depends(guard)) -> Dict:
        farm = app.state.profiles.load(session.user_id, session.access_token).farm
        return build_dashboard(
            session, app.state.weather, latitude=farm.latitude, longitude=farm.longitude
        )

    # ── profile ─────────────────────────────────────────────────────────

    @app.get("/profile")
    def get_profile(session: Session = Depends(guard)) -> Dict:
        records = app.state.profiles.load(session.user_id, session.access_token)
        return {
            "profile": records.profile.model_dump(),
            "farm_data": records.farm.model_dump(),
            "notice": records.notice.to_dict() if records.notice else None,
            "options": {
                "irrigation_types": IRRIGATION_TYPES,
                "languages": LANGUAGES,
                "soil_types": SOIL_TYPES,
                "nutrient_levels": NUTRIENT_LEVELS,
            },
        }

    @app.put("/profile")
    def save_profile(body: Profile, session: Session = Depends(guard)):
        return _notice_response(
            app.state.profiles.save_profile(session.user_id, body, session.access_token)
        )

    @app.put("/profile/farm-data")
    def save_farm_data(body: FarmData, session: Session = Depends(guard)):
        return _notice_response(
            app.state.profiles.save_farm_data(session.user_id, body, session.access_token)
        )

    # ── market prices ───────────────────────────────────────────────────

    def _price_view(prices, search: str, market: str, state: str) -> Dict:
        filtered = filter_prices(prices, search=search, market=market, state=state)
        return {
            "prices": filtered,
            "count": len(filtered),
            "markets": unique_markets(prices),
            "states": unique_states(prices),
            "message": None if filtered else bilingual("no_prices"),
        }

    @app.get("/market-prices")
    async def market_prices(
        search: str = "", market: str = "all", state: str = "all",
        _session: Session = Depends(guard),
    ) -> Dict:
        return _price_view(MARKET_PRICES, search, market, state)

    @app.post("/market-prices/refresh")
    async def market_prices_refresh(
        search: str = "", market: str = "all", state: str = "all",
        _session: Session = Depends(guard),
    ) -> Dict:
        return _price_view(refresh_prices(MARKET_PRICES), search, market, state)

    # ── schemes ─────────────────────────────────────────────────────────

    @app.get("/government-schemes")
    async def government_schemes(
        search: str = "", category: str = "all", _session: Session = Depends(guard),
    ) -> Dict:
        filtered = filter_schemes(SCHEMES, search=search, category=category)
        return {
            "schemes": filtered,
            "count": len(filtered),
            "categories": {k: v[1] for k, v in CATEGORIES.items()},
            "message": None if filtered else bilingual("change_filters"),
        }

    @app.get("/government-schemes/{scheme_id}")
    async def government_scheme(scheme_id: str, _session: Session = Depends(guard)) -> Dict:
        try:
            return get_scheme(SCHEMES, scheme_id)
        except KeyError:
            raise StarletteHTTPException(status_code=404)

    # ── analysis ────────────────────────────────────────────────────────

    @app.get("/disease-detection")
    async def disease_detection_info(_session: Session = Depends(guard)) -> Dict:
        return {
            "max_image_bytes": app.state.detector.max_image_bytes,
            "tip": "बेहतर परिणामों के लिए: स्पष्ट रोशनी में पत्तियों या पौधे की नजदीकी फोटो खींचें। "
                   "/ For better results: Take close-up photos of leaves or plants in clear lighting.",
        }

    @app.post("/disease-detection")
    async def disease_detection(
        image: Optional[UploadFile] = File(None), _session: Session = Depends(guard),
    ) -> Dict:
        data = await image.read() if image else None
        filename = image.filename if image and image.filename else "leaf.jpg"
        return await app.state.detector.analyze(data, filename=filename)

    @app.get("/crop-recommendation")
    async def crop_recommendation_form(_session: Session = Depends(guard)) -> Dict:
        return {"soil_types": FORM_SOIL_TYPES, "previous_crops": FORM_PREVIOUS_CROPS}

    @app.post("/crop-recommendation")
    async def crop_recommendation(form: CropForm, _session: Session = Depends(guard)) -> Dict:
        return await app.state.recommender.recommend(form)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("server:app", host="0.0.0.0", port=config.PORT, reload=False)
