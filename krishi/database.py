import json
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import config

# Columns per record table, excluding the user_id key and bookkeeping
TABLE_COLUMNS: Dict[str, List[str]] = {
    "profiles": [
        "name", "phone_number", "land_size", "location",
        "irrigation_type", "language_preference",
    ],
    "farm_data": [
        "soil_type", "ph_level", "nitrogen_level", "phosphorus_level",
        "potassium_level", "organic_matter", "previous_crops",
        "latitude", "longitude",
    ],
}

# Stored as JSON text
_JSON_COLUMNS = {"previous_crops"}


class FarmDatabase:

    def __init__(self, db_path: Optional[str] = None) -> None:
        self.db_path = db_path or config.DB_PATH
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    def init_database(self) -> None:
        conn = None
        try:
            conn = sqlite3.connect(self.db_path)
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    email TEXT UNIQUE NOT NULL COLLATE NOCASE,
                    password_hash TEXT NOT NULL,
                    name TEXT,
                    phone TEXT,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS sessions (
                    token TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    FOREIGN KEY (user_id) REFERENCES users(id)
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS profiles (
                    user_id TEXT PRIMARY KEY,
                    name TEXT,
                    phone_number TEXT,
                    land_size REAL,
                    location TEXT,
                    irrigation_type TEXT,
                    language_preference TEXT,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS farm_data (
                    user_id TEXT PRIMARY KEY,
                    soil_type TEXT,
                    ph_level REAL,
                    nitrogen_level TEXT,
                    phosphorus_level TEXT,
                    potassium_level TEXT,
                    organic_matter REAL,
                    previous_crops TEXT,
                    latitude REAL,
                    longitude REAL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            conn.commit()
            print("[OK] Database tables initialized")
        except sqlite3.Error as e:
            print(f"[ERROR] Database error: {e}")
            raise
        finally:
            if conn:
                conn.close()

    # ── profile / farm records ───────────────────────────────────────────

    def read_one(self, table: str, user_id: str) -> Optional[Dict[str, Any]]:
        columns = self._columns(table)
        conn = None
        try:
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row
            row = conn.execute(
                f"SELECT user_id, {', '.join(columns)} FROM {table} WHERE user_id = ?",
                (user_id,),
            ).fetchone()
            if row is None:
                return None
            record = dict(row)
            for col in _JSON_COLUMNS.intersection(record):
                raw = record[col]
                record[col] = json.loads(raw) if raw else []
            return record
        except sqlite3.Error as e:
            print(f"[ERROR] Database error: {e}")
            raise
        finally:
            if conn:
                conn.close()

    def upsert(self, table: str, record: Dict[str, Any]) -> None:
        """Replace the whole row for record['user_id']; missing columns become NULL."""
        columns = self._columns(table)
        if not record.get("user_id"):
            raise ValueError("record has no user_id")

        values = [record["user_id"]]
        for col in columns:
            value = record.get(col)
            if col in _JSON_COLUMNS and value is not None:
                value = json.dumps(list(value), ensure_ascii=False)
            values.append(value)

        placeholders = ", ".join("?" for _ in values)
        conn = None
        try:
            conn = sqlite3.connect(self.db_path)
            conn.execute(
                f"INSERT OR REPLACE INTO {table} (user_id, {', '.join(columns)}) "
                f"VALUES ({placeholders})",
                values,
            )
            conn.commit()
        except sqlite3.Error as e:
            print(f"[ERROR] Database error: {e}")
            raise
        finally:
            if conn:
                conn.close()

    # ── local identity store ─────────────────────────────────────────────

    def add_user(
        self,
        user_id: str,
        email: str,
        password_hash: str,
        name: str = "",
        phone: str = "",
    ) -> None:
        conn = None
        try:
            conn = sqlite3.connect(self.db_path)
            conn.execute(
                "INSERT INTO users (id, email, password_hash, name, phone) "
                "VALUES (?, ?, ?, ?, ?)",
                (user_id, email, password_hash, name, phone),
            )
            conn.commit()
        except sqlite3.IntegrityError:
            print(f"[ERROR] User '{email}' already exists")
            raise
        except sqlite3.Error as e:
            print(f"[ERROR] Database error: {e}")
            raise
        finally:
            if conn:
                conn.close()

    def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return self._fetch_user("SELECT * FROM users WHERE LOWER(email) = LOWER(?)", email)

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self._fetch_user("SELECT * FROM users WHERE id = ?", user_id)

    def save_session(self, token: str, user_id: str) -> None:
        conn = None
        try:
            conn = sqlite3.connect(self.db_path)
            conn.execute(
                "INSERT INTO sessions (token, user_id) VALUES (?, ?)", (token, user_id)
            )
            conn.commit()
        except sqlite3.Error as e:
            print(f"[ERROR] Database error: {e}")
            raise
        finally:
            if conn:
                conn.close()

    def get_session_user(self, token: str) -> Optional[Dict[str, Any]]:
        return self._fetch_user(
            "SELECT users.* FROM sessions JOIN users ON users.id = sessions.user_id "
            "WHERE sessions.token = ?",
            token,
        )

    def delete_session(self, token: str) -> bool:
        conn = None
        try:
            conn = sqlite3.connect(self.db_path)
            cursor = conn.execute("DELETE FROM sessions WHERE token = ?", (token,))
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as e:
            print(f"[ERROR] Database error: {e}")
            raise
        finally:
            if conn:
                conn.close()

    # ── helpers ──────────────────────────────────────────────────────────

    def _fetch_user(self, query: str, param: str) -> Optional[Dict[str, Any]]:
        conn = None
        try:
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row
            row = conn.execute(query, (param,)).fetchone()
            return dict(row) if row else None
        except sqlite3.Error as e:
            print(f"[ERROR] Database error: {e}")
            raise
        finally:
            if conn:
                conn.close()

    @staticmethod
    def _columns(table: str) -> List[str]:
        try:
            return TABLE_COLUMNS[table]
        except KeyError:
            raise ValueError(f"Unknown table '{table}'") from None
