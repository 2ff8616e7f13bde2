"""Unit tests for the rate limiting middleware.

Tests cover:
- 429 envelope with Retry-After
- Forwarding headers do not change the client key
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from pantry_chef.core.middleware import RateLimitMiddleware
from pantry_chef.core.rate_limit import RateLimiter, RateLimitPolicy


pytestmark = pytest.mark.unit


@pytest.fixture
def limited_client() -> TestClient:
    limiter = RateLimiter(
        [
            RateLimitPolicy(
                name="auth",
                limit=1,
                window_seconds=900,
                message="Too many authentication attempts. Please try again later.",
                paths=frozenset({"/api/auth/login"}),
            )
        ]
    )
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, limiter=limiter)

    @app.post("/api/auth/login")
    async def login() -> dict[str, bool]:
        return {"ok": True}

    return TestClient(app)


class TestRateLimitMiddleware:
    """Tests for RateLimitMiddleware."""

    def test_rejects_after_limit(self, limited_client: TestClient) -> None:
        assert limited_client.post("/api/auth/login").status_code == 200

        response = limited_client.post("/api/auth/login")

        assert response.status_code == 429
        body = response.json()
        assert body["message"] == "Too many authentication attempts. Please try again later."
        assert body["error"]["type"] == "RateLimitError"
        assert int(response.headers["Retry-After"]) == body["error"]["retryAfter"]
        assert 1 <= body["error"]["retryAfter"] <= 900

    def test_ignores_forwarding_headers(self, limited_client: TestClient) -> None:
        """Should key on the connection address so rotating X-Forwarded-For still hits 429."""
        first = limited_client.post(
            "/api/auth/login", headers={"X-Forwarded-For": "10.0.0.1, 172.16.0.1"}
        )
        second = limited_client.post(
            "/api/auth/login", headers={"X-Forwarded-For": "10.0.0.2"}
        )
        third = limited_client.post("/api/auth/login", headers={"X-Real-IP": "10.0.0.3"})

        assert first.status_code == 200
        assert second.status_code == 429
        assert third.status_code == 429
