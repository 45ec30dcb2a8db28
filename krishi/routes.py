"""Route table and the sign-in guard shared by the API server and the Streamlit UI."""

from typing import Optional

HOME      = "/"
AUTH      = "/auth"
DASHBOARD = "/dashboard"

ROUTES = {
    HOME:                  "कृषि AI / Krishi AI",
    AUTH:                  "लॉग इन / Sign In",
    DASHBOARD:             "डैशबोर्ड / Dashboard",
    "/profile":            "किसान प्रोफाइल / Farmer Profile",
    "/market-prices":      "बाजार मूल्य / Market Prices",
    "/disease-detection":  "रोग पहचान / Disease Detection",
    "/government-schemes": "सरकारी योजनाएं / Government Schemes",
    "/crop-recommendation": "फसल सुझाव / Crop Recommendation",
}

PUBLIC_ROUTES = frozenset({HOME, AUTH})
PROTECTED_ROUTES = frozenset(ROUTES) - PUBLIC_ROUTES


def normalize(path: str) -> str:
    path = "/" + (path or "").strip().strip("/")
    return path


def section(path: str) -> str:
    """The top-level screen a path belongs to: /profile/farm-data -> /profile."""
    return "/" + normalize(path).lstrip("/").split("/", 1)[0]


def is_known(path: str) -> bool:
    return normalize(path) in ROUTES


def resolve_redirect(path: str, authenticated: bool) -> Optional[str]:
    """
    Where the visitor must be sent instead of `path`, or None to render it.

    Signed-out visitors on a protected screen (or any path under one) go to
    the sign-in screen; signed-in visitors on the landing screen go to the
    dashboard. Unknown paths are left alone so the caller can render its 404.
    """
    path = normalize(path)
    if path == HOME and authenticated:
        return DASHBOARD
    if section(path) in PROTECTED_ROUTES and not authenticated:
        return AUTH
    return None
