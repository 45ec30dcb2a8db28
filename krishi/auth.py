"""
Identity provider client.

Sign-in / sign-up / sign-out are delegated to the hosted auth service
(supabase-py) when it is configured; otherwise a local sqlite user store
stands in so the app works offline. Provider errors are passed back
verbatim in AuthResult.error for the screen to show.
"""

from __future__ import annotations

import secrets
import sqlite3
import threading
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from passlib.context import CryptContext
from supabase import Client, create_client

from . import config
from .database import FarmDatabase

SIGNED_IN  = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

MIN_PASSWORD_LENGTH = 6

pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=config.BCRYPT_ROUNDS
)


@dataclass
class Session:
    access_token: str
    user_id: str
    email: str
    name: str = ""
    phone: str = ""

    @property
    def display_name(self) -> str:
        return self.name or "किसान"


@dataclass
class AuthResult:
    session: Optional[Session] = None
    error: Optional[str] = None
    # sign-up only: account exists but e-mail confirmation is outstanding
    confirmation_pending: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


SessionListener = Callable[[str, Optional[Session]], None]


@dataclass
class _Listeners:
    items: List[SessionListener] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock)


class AuthService:

    def __init__(
        self,
        mode: Optional[str] = None,
        db: Optional[FarmDatabase] = None,
        supabase_client: Optional[Client] = None,
    ) -> None:
        self.mode = mode or ("supabase" if supabase_client else config.backend_mode())
        self._listeners = _Listeners()
        self._db = None
        self._client = None

        if self.mode == "supabase":
            self._client = supabase_client or create_client(
                config.SUPABASE_URL, config.SUPABASE_ANON_KEY
            )
        else:
            self._db = db or FarmDatabase()
            self._db.init_database()

        print(f"[Auth] Mode: {self.mode}")

    # ──────────────────────────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────────────────────────

    def sign_in(self, email: str, password: str) -> AuthResult:
        email = _normalize_email(email)
        if not email or not password:
            return AuthResult(error="Email and password are required")

        if self.mode == "supabase":
            result = self._sign_in_supabase(email, password)
        else:
            result = self._sign_in_local(email, password)

        if result.session:
            self._emit(SIGNED_IN, result.session)
        return result

    def sign_up(self, email: str, password: str, name: str = "", phone: str = "") -> AuthResult:
        email = _normalize_email(email)
        if not email or "@" not in email:
            return AuthResult(error="Unable to validate email address: invalid format")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            return AuthResult(
                error=f"Password should be at least {MIN_PASSWORD_LENGTH} characters"
            )

        if self.mode == "supabase":
            return self._sign_up_supabase(email, password, name.strip(), phone.strip())
        return self._sign_up_local(email, password, name.strip(), phone.strip())

    def sign_out(self, access_token: Optional[str]) -> None:
        session = self.get_session(access_token) if access_token else None
        if self.mode == "supabase":
            if access_token:
                self._sign_out_supabase(access_token)
        elif access_token:
            self._db.delete_session(access_token)
        self._emit(SIGNED_OUT, session)

    def get_session(self, access_token: Optional[str]) -> Optional[Session]:
        if not access_token:
            return None
        if self.mode == "supabase":
            return self._get_session_supabase(access_token)
        user = self._db.get_session_user(access_token)
        return _session_from_row(access_token, user) if user else None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register for SIGNED_IN / SIGNED_OUT events. Returns an unsubscribe callable."""
        with self._listeners.lock:
            self._listeners.items.append(listener)

        def unsubscribe() -> None:
            with self._listeners.lock:
                if listener in self._listeners.items:
                    self._listeners.items.remove(listener)

        return unsubscribe

    # ──────────────────────────────────────────────────────────────────
    # local store
    # ──────────────────────────────────────────────────────────────────

    def _sign_in_local(self, email: str, password: str) -> AuthResult:
        user = self._db.get_user_by_email(email)
        if not user or not pwd_context.verify(password, user["password_hash"]):
            return AuthResult(error="Invalid login credentials")

        token = secrets.token_urlsafe(32)
        self._db.save_session(token, user["id"])
        return AuthResult(session=_session_from_row(token, user))

    def _sign_up_local(self, email: str, password: str, name: str, phone: str) -> AuthResult:
        try:
            self._db.add_user(
                user_id=str(uuid.uuid4()),
                email=email,
                password_hash=pwd_context.hash(password),
                name=name,
                phone=phone,
            )
        except sqlite3.IntegrityError:
            return AuthResult(error="User already registered")
        return AuthResult()

    # ──────────────────────────────────────────────────────────────────
    # supabase
    # ──────────────────────────────────────────────────────────────────

    def _sign_in_supabase(self, email: str, password: str) -> AuthResult:
        try:
            resp = self._client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as exc:
            return AuthResult(error=getattr(exc, "message", None) or str(exc))

        if not resp.session or not resp.user:
            return AuthResult(error="Invalid login credentials")
        meta = resp.user.user_metadata or {}
        return AuthResult(session=Session(
            access_token=resp.session.access_token,
            user_id=resp.user.id,
            email=resp.user.email or email,
            name=meta.get("name", ""),
            phone=meta.get("phone", ""),
        ))

    def _sign_up_supabase(self, email: str, password: str, name: str, phone: str) -> AuthResult:
        try:
            resp = self._client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {"data": {"name": name, "phone": phone}},
            })
        except Exception as exc:
            return AuthResult(error=getattr(exc, "message", None) or str(exc))

        # no session back means the confirmation e-mail is outstanding
        return AuthResult(confirmation_pending=resp.session is None)

    def _sign_out_supabase(self, access_token: str) -> None:
        # revoke the caller's token, not whatever session the shared client holds
        try:
            self._client.auth.admin.sign_out(access_token)
        except Exception as exc:
            print(f"[Auth] sign_out error: {exc}")

    def _get_session_supabase(self, access_token: str) -> Optional[Session]:
        try:
            resp = self._client.auth.get_user(access_token)
        except Exception as exc:
            print(f"[Auth] get_user error: {exc}")
            return None
        if not resp or not resp.user:
            return None
        meta = resp.user.user_metadata or {}
        return Session(
            access_token=access_token,
            user_id=resp.user.id,
            email=resp.user.email or "",
            name=meta.get("name", ""),
            phone=meta.get("phone", ""),
        )

    # ──────────────────────────────────────────────────────────────────

    def _emit(self, event: str, session: Optional[Session]) -> None:
        with self._listeners.lock:
            listeners = list(self._listeners.items)
        for listener in listeners:
            try:
                listener(event, session)
            except Exception as exc:
                print(f"[Auth] session listener error: {exc}")


def _normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def _session_from_row(token: str, user: Dict) -> Session:
    return Session(
        access_token=token,
        user_id=user["id"],
        email=user["email"],
        name=user.get("name") or "",
        phone=user.get("phone") or "",
    )
