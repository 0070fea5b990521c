"""Unit tests for the HTTP middleware."""

from unittest.mock import patch

import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from bidchemz_logistics.server.middleware import (
    LogfireMiddleware,
    RateLimitMiddleware,
    SecurityHeadersMiddleware,
)
from bidchemz_logistics.server.middleware.rate_limit_middleware import client_ip
from bidchemz_logistics.server.middleware.security_headers import SECURITY_HEADERS
from bidchemz_logistics.services.rate_limiter import FixedWindowRateLimiter


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _app() -> FastAPI:
    app = FastAPI()

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    @app.get("/pong")
    async def pong():
        return {"ok": True}

    return app


@pytest_asyncio.fixture
async def make_client():
    clients = []

    async def _make(app: FastAPI) -> AsyncClient:
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")
        clients.append(client)
        return client

    yield _make
    for client in clients:
        await client.aclose()


class TestRateLimitMiddleware:
    async def test_requests_over_the_limit_get_429(self, make_client):
        app = _app()
        app.add_middleware(
            RateLimitMiddleware,
            limiter=FixedWindowRateLimiter(max_requests=2, window_seconds=60),
            enabled=True,
        )
        client = await make_client(app)

        first = await client.get("/ping")
        second = await client.get("/ping")
        third = await client.get("/ping")

        assert [first.status_code, second.status_code, third.status_code] == [200, 200, 429]
        assert first.headers["X-RateLimit-Limit"] == "2"
        assert first.headers["X-RateLimit-Remaining"] == "1"
        assert third.headers["Retry-After"] == str(third.json()["retry_after"])
        assert third.json()["detail"] == "Too many requests, please try again later"

    async def test_paths_and_clients_are_counted_separately(self, make_client):
        app = _app()
        app.add_middleware(
            RateLimitMiddleware,
            limiter=FixedWindowRateLimiter(max_requests=1, window_seconds=60),
            enabled=True,
        )
        client = await make_client(app)

        assert (await client.get("/ping")).status_code == 200
        assert (await client.get("/pong")).status_code == 200
        assert (await client.get("/ping", headers={"X-Forwarded-For": "10.0.0.7"})).status_code == 200
        assert (await client.get("/ping")).status_code == 429

    async def test_disabled_middleware_passes_everything(self, make_client):
        app = _app()
        app.add_middleware(
            RateLimitMiddleware,
            limiter=FixedWindowRateLimiter(max_requests=1, window_seconds=60),
            enabled=False,
        )
        client = await make_client(app)

        for _ in range(3):
            response = await client.get("/ping")
            assert response.status_code == 200
            assert "X-RateLimit-Limit" not in response.headers

    async def test_injected_empty_limiter_is_the_one_used(self, make_client):
        limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60)
        app = _app()
        app.add_middleware(RateLimitMiddleware, limiter=limiter, enabled=True)
        client = await make_client(app)

        codes = [(await client.get("/ping")).status_code for _ in range(3)]

        assert codes == [200, 429, 429]
        assert len(limiter) == 1

    async def test_closed_windows_are_swept_between_requests(self, make_client):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(max_requests=5, window_seconds=60, clock=clock)
        app = _app()
        app.add_middleware(RateLimitMiddleware, limiter=limiter, enabled=True)
        client = await make_client(app)

        for i in range(200):
            await client.get(f"/missing/{i}")
        assert len(limiter) == 200

        clock.now += 61
        await client.get("/ping")

        assert len(limiter) == 1


def test_client_ip_prefers_first_forwarded_entry():
    class FakeRequest:
        headers = {"x-forwarded-for": "203.0.113.9, 10.0.0.1"}
        client = None

    assert client_ip(FakeRequest()) == "203.0.113.9"
    FakeRequest.headers = {}
    assert client_ip(FakeRequest()) == "unknown"


async def test_security_headers_are_added(make_client):
    app = _app()
    app.add_middleware(SecurityHeadersMiddleware)
    client = await make_client(app)

    response = await client.get("/ping")

    for name, value in SECURITY_HEADERS.items():
        assert response.headers[name] == value


async def test_request_timing_is_reported(make_client):
    app = _app()
    app.add_middleware(LogfireMiddleware)
    client = await make_client(app)

    with patch("bidchemz_logistics.server.middleware.logfire_middleware.log_api_request") as log_request:
        response = await client.get("/ping")

    assert float(response.headers["X-Process-Time"]) >= 0
    assert log_request.call_args.kwargs["path"] == "/ping"
    assert log_request.call_args.kwargs["status_code"] == 200


async def test_request_id_is_echoed_when_supplied(make_client):
    app = _app()
    app.add_middleware(LogfireMiddleware)
    client = await make_client(app)

    response = await client.get("/ping", headers={"X-Request-ID": "trace-42"})

    assert response.headers["X-Request-ID"] == "trace-42"


async def test_request_id_is_generated_per_request(make_client):
    app = _app()
    app.add_middleware(LogfireMiddleware)
    client = await make_client(app)

    first = await client.get("/ping")
    second = await client.get("/ping")

    assert len(first.headers["X-Request-ID"]) == 16
    assert first.headers["X-Request-ID"] != second.headers["X-Request-ID"]
