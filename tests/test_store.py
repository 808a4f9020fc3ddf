# tests/test_store.py
import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from crypto_dashboard.errors import StoreError
from crypto_dashboard.models import User
from crypto_dashboard.store import get_session, store_errors


def test_db_roundtrip():
    with get_session() as s:
        u = User(email="u@x.com", name="U", password="not-a-hash")
        s.add(u); s.commit(); s.refresh(u)
        got = s.exec(select(User).where(User.id == u.id)).first()
        assert got and got.name == "U"
        assert got.created_at is not None


def test_store_errors_become_store_error():
    with pytest.raises(StoreError):
        with store_errors("do something"):
            raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))


def test_store_error_surfaces_as_500(client, auth_headers, mocker):
    mocker.patch(
        "crypto_dashboard.preference_store.get_current",
        side_effect=StoreError("Database error while trying to load preferences"),
    )
    r = client.get("/dashboard/preferences", headers=auth_headers)
    assert r.status_code == 500
    assert "Database error" in r.json()["detail"]
