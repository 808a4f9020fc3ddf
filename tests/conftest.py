# tests/conftest.py
import os, pathlib, tempfile
from typing import Callable, Dict

import httpx
import pytest
from dotenv import load_dotenv

# Must run before crypto_dashboard.config / crypto_dashboard.store are imported
load_dotenv(pathlib.Path(__file__).parent / ".env.test", override=True)
_TMP = tempfile.mkdtemp(prefix="crypto_dashboard_tests_")
os.environ["DB_FILE"] = os.path.join(_TMP, "test.db")
os.environ["LOG_DIR"] = os.path.join(_TMP, "logs")


class FakeUpstream:
    """
    Stands in for the internet. Register a handler per host; anything else
    fails like a dropped connection.
    """

    def __init__(self):
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.calls: list[httpx.Request] = []

    def on(self, host: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[host] = handler

    def hits(self, host: str) -> int:
        return sum(1 for r in self.calls if r.url.host == host)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        handler = self.routes.get(request.url.host)
        if handler is None:
            raise httpx.ConnectError("network disabled in tests", request=request)
        return handler(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handle))


@pytest.fixture(autouse=True)
def _fresh_db():
    from sqlmodel import SQLModel
    from crypto_dashboard.store import engine, init_db

    SQLModel.metadata.drop_all(engine)
    init_db()
    yield


@pytest.fixture()
def session():
    from crypto_dashboard.store import get_session

    with get_session() as s:
        yield s


@pytest.fixture()
def upstream():
    return FakeUpstream()


@pytest.fixture()
def client(upstream):
    from fastapi.testclient import TestClient
    from crypto_dashboard.main import app
    from crypto_dashboard.aggregate import build_adapters
    from crypto_dashboard.cache import ResponseCache
    from crypto_dashboard.dependencies import http_client

    async def _fake_http_client():
        async with upstream.client() as c:
            yield c

    app.state.cache = ResponseCache()
    app.state.adapters = build_adapters()
    app.dependency_overrides[http_client] = _fake_http_client
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def register(client):
    def _register(email="a@x.com", name="Alice", password="hunter22"):
        r = client.post("/auth/register", json={"email": email, "name": name, "password": password})
        assert r.status_code == 201, r.text
        return r.json()
    return _register


@pytest.fixture()
def auth_headers(register):
    token = register()["token"]
    return {"Authorization": f"Bearer {token}"}
