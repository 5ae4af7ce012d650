"""
Shared fixtures: a controllable clock, test settings and a fake
WooCommerce store served through ``httpx.MockTransport``.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from woodash.core.config import Settings
from woodash.main import create_app

STORE_URL = "https://shop.example.com"
API_ROOT = f"{STORE_URL}/wp-json/wc/v3"
CONSUMER_KEY = "ck_test123"
CONSUMER_SECRET = "cs_test456"


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeStore:
    """In-memory WooCommerce store answering REST calls.

    ``collections`` maps an endpoint name to its full record list; pages
    are sliced with the ``page``/``per_page`` query parameters.  Every
    request is recorded in ``requests``.  ``fail`` maps an endpoint to a
    callable returning an ``httpx.Response`` (or raising) to inject errors.
    """

    def __init__(self) -> None:
        self.collections: Dict[str, List[dict]] = {
            "orders": [{"id": i, "status": "completed", "total": "10.00"} for i in range(1, 141)],
            "customers": [{"id": i, "email": f"c{i}@example.com"} for i in range(1, 31)],
            "products": [{"id": i, "name": f"Product {i}", "status": "publish"} for i in range(1, 11)],
        }
        self.requests: List[httpx.Request] = []
        self.fail: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}

    def calls(self, endpoint: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(f"/wc/v3/{endpoint}")]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        endpoint = request.url.path.rsplit("/wc/v3/", 1)[-1]
        if endpoint in self.fail:
            return self.fail[endpoint](request)
        if endpoint == "system_status":
            return httpx.Response(200, json={"environment": {"version": "8.0.0"}})
        records = self.collections.get(endpoint)
        if records is None:
            return httpx.Response(404, json={"code": "rest_no_route", "message": "No route was found"})
        page = int(request.url.params.get("page", 1))
        per_page = int(request.url.params.get("per_page", 10))
        start = (page - 1) * per_page
        return httpx.Response(200, json=records[start:start + per_page])

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        http_max_retries=0,
        http_backoff_factor=0,
        cache_sweep_interval=0,
        page_size=100,
        max_pages=50,
    )


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def app(settings: Settings, store: FakeStore):
    return create_app(settings=settings, transport=store.transport())


@pytest.fixture
def client(app):
    with TestClient(app, base_url="https://testserver") as test_client:
        yield test_client


@pytest.fixture
def logged_in(client: TestClient) -> TestClient:
    response = client.post(
        "/api/auth/login",
        json={"url": STORE_URL + "/", "key": CONSUMER_KEY, "secret": CONSUMER_SECRET},
    )
    assert response.status_code == 200, response.text
    return client


def make_response(status: int, body: Optional[object] = None) -> Callable[[httpx.Request], httpx.Response]:
    def respond(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=body if body is not None else {"message": f"status {status}"})

    return respond
