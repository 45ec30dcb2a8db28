"""
Record store for the two per-user tables, "profiles" and "farm_data".

Auto-detects mode from .env: supabase (hosted Postgres via supabase-py)
→ local (sqlite file). Both expose the same two calls:

    read_one(table, user_id)  -> dict | None      None means "no record"
    upsert(table, record)     -> None             full-record replace

Anything other than "no record" is raised as BackendError.
"""

import sqlite3
from typing import Any, Dict, Optional

from postgrest.exceptions import APIError
from supabase import Client, create_client

from . import config
from .database import TABLE_COLUMNS, FarmDatabase
from .errors import BackendError

# PostgREST code for ".single()" matching zero rows
NO_ROWS_CODE = "PGRST116"


class BackendClient:

    def __init__(
        self,
        mode: Optional[str] = None,
        db: Optional[FarmDatabase] = None,
        supabase_client: Optional[Client] = None,
    ) -> None:
        self.mode = mode or ("supabase" if supabase_client else config.backend_mode())
        self._db = None
        self._client = None

        if self.mode == "supabase":
            self._client = supabase_client or create_client(
                config.SUPABASE_URL, config.SUPABASE_ANON_KEY
            )
        else:
            self._db = db or FarmDatabase()
            self._db.init_database()

        print(f"[Backend] Mode: {self.mode}")

    @property
    def db(self) -> Optional[FarmDatabase]:
        return self._db

    @property
    def client(self) -> Optional[Client]:
        return self._client

    # ──────────────────────────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────────────────────────

    def read_one(
        self, table: str, user_id: str, access_token: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        _check_table(table)
        if self.mode == "supabase":
            return self._read_supabase(table, user_id, access_token)
        return self._read_local(table, user_id)

    def upsert(
        self, table: str, record: Dict[str, Any], access_token: Optional[str] = None
    ) -> None:
        _check_table(table)
        if not record.get("user_id"):
            raise BackendError("Record has no user_id")
        if self.mode == "supabase":
            self._upsert_supabase(table, record, access_token)
        else:
            self._upsert_local(table, record)

    # ──────────────────────────────────────────────────────────────────
    # local sqlite
    # ──────────────────────────────────────────────────────────────────

    def _read_local(self, table: str, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            return self._db.read_one(table, user_id)
        except sqlite3.Error as exc:
            raise BackendError(str(exc)) from exc

    def _upsert_local(self, table: str, record: Dict[str, Any]) -> None:
        try:
            self._db.upsert(table, record)
        except sqlite3.Error as exc:
            raise BackendError(str(exc)) from exc

    # ──────────────────────────────────────────────────────────────────
    # supabase
    # ──────────────────────────────────────────────────────────────────

    def _table(self, table: str, access_token: Optional[str]):
        if access_token:
            # row-level security evaluates against the signed-in user
            self._client.postgrest.auth(access_token)
        return self._client.table(table)

    def _read_supabase(
        self, table: str, user_id: str, access_token: Optional[str]
    ) -> Optional[Dict[str, Any]]:
        try:
            resp = (
                self._table(table, access_token)
                .select("*")
                .eq("user_id", user_id)
                .single()
                .execute()
            )
        except APIError as exc:
            if exc.code == NO_ROWS_CODE:
                return None
            print(f"[Backend] read {table} failed: {exc.message}")
            raise BackendError(exc.message or str(exc), code=exc.code or "") from exc
        except Exception as exc:
            print(f"[Backend] read {table} error: {exc}")
            raise BackendError(str(exc)) from exc
        return resp.data or None

    def _upsert_supabase(
        self, table: str, record: Dict[str, Any], access_token: Optional[str]
    ) -> None:
        try:
            self._table(table, access_token).upsert(record, on_conflict="user_id").execute()
        except APIError as exc:
            print(f"[Backend] upsert {table} failed: {exc.message}")
            raise BackendError(exc.message or str(exc), code=exc.code or "") from exc
        except Exception as exc:
            print(f"[Backend] upsert {table} error: {exc}")
            raise BackendError(str(exc)) from exc


def _check_table(table: str) -> None:
    if table not in TABLE_COLUMNS:
        raise BackendError(f"Unknown table '{table}'")
