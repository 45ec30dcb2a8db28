"""BackendClient in both modes. Supabase is replaced by a stub query builder."""

import sqlite3
from unittest.mock import MagicMock

import pytest
from postgrest.exceptions import APIError

from krishi.backend import NO_ROWS_CODE, BackendClient
from krishi.database import FarmDatabase
from krishi.errors import BackendError


def supabase_stub(execute_result=None, execute_error=None):
    client = MagicMock()
    query = client.table.return_value
    for step in ("select", "eq", "single", "upsert"):
        getattr(query, step).return_value = query
    if execute_error is not None:
        query.execute.side_effect = execute_error
    else:
        query.execute.return_value = execute_result
    return client, query


def test_local_read_missing_record(backend):
    assert backend.read_one("farm_data", "nobody") is None


def test_local_upsert_then_read(backend):
    backend.upsert("farm_data", {"user_id": "u1", "soil_type": "loam",
                                 "previous_crops": ["Rice", "गेहूं"]})
    row = backend.read_one("farm_data", "u1")
    assert row["soil_type"] == "loam"
    assert row["previous_crops"] == ["Rice", "गेहूं"]
    # columns not written come back NULL
    assert row["ph_level"] is None


def test_unknown_table_is_rejected(backend):
    with pytest.raises(BackendError):
        backend.read_one("users", "u1")


def test_upsert_needs_user_id(backend):
    with pytest.raises(BackendError):
        backend.upsert("profiles", {"name": "No key"})


def test_local_database_error_is_wrapped(tmp_path):
    db = FarmDatabase(str(tmp_path / "x.db"))
    client = BackendClient(mode="local", db=db)
    # drop the table behind the client's back
    with sqlite3.connect(db.db_path) as conn:
        conn.execute("DROP TABLE profiles")
    with pytest.raises(BackendError):
        client.read_one("profiles", "u1")


def test_supabase_read_returns_row():
    client, query = supabase_stub(MagicMock(data={"user_id": "u1", "name": "Sita"}))
    backend = BackendClient(supabase_client=client)

    assert backend.mode == "supabase"
    assert backend.read_one("profiles", "u1", access_token="jwt")["name"] == "Sita"
    client.postgrest.auth.assert_called_once_with("jwt")
    client.table.assert_called_with("profiles")
    query.eq.assert_called_with("user_id", "u1")


def test_supabase_no_rows_is_not_an_error():
    error = APIError({"code": NO_ROWS_CODE, "message": "JSON object requested, multiple (or no) rows returned"})
    client, _ = supabase_stub(execute_error=error)

    assert BackendClient(supabase_client=client).read_one("farm_data", "u1") is None


def test_supabase_other_errors_raise():
    error = APIError({"code": "42501", "message": "permission denied for table profiles"})
    client, _ = supabase_stub(execute_error=error)

    with pytest.raises(BackendError) as exc:
        BackendClient(supabase_client=client).read_one("profiles", "u1")
    assert exc.value.code == "42501"


def test_supabase_upsert_conflicts_on_user_id():
    client, query = supabase_stub(MagicMock(data=[]))
    BackendClient(supabase_client=client).upsert("profiles", {"user_id": "u1", "name": "Sita"})

    query.upsert.assert_called_once_with({"user_id": "u1", "name": "Sita"}, on_conflict="user_id")
