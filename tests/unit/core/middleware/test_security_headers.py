"""Unit tests for security headers middleware.

Tests cover:
- Helmet-style headers on every response
- HSTS toggle
- Cache-Control on API responses
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from pantry_chef.core.middleware import SecurityHeadersMiddleware


pytestmark = pytest.mark.unit


def _app(*, enable_hsts: bool) -> FastAPI:
    app = FastAPI()
    app.add_middleware(SecurityHeadersMiddleware, enable_hsts=enable_hsts)

    @app.get("/api/recipes")
    async def recipes() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    return app


class TestSecurityHeadersMiddleware:
    """Tests for SecurityHeadersMiddleware."""

    def test_adds_security_headers(self) -> None:
        response = TestClient(_app(enable_hsts=False)).get("/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Referrer-Policy"] == "no-referrer"
        assert "default-src 'self'" in response.headers["Content-Security-Policy"]

    def test_hsts_only_when_enabled(self) -> None:
        without = TestClient(_app(enable_hsts=False)).get("/health")
        with_hsts = TestClient(_app(enable_hsts=True)).get("/health")

        assert "Strict-Transport-Security" not in without.headers
        assert with_hsts.headers["Strict-Transport-Security"].startswith("max-age=")

    def test_api_responses_are_not_cached(self) -> None:
        client = TestClient(_app(enable_hsts=False))

        assert client.get("/api/recipes").headers["Cache-Control"] == "no-store"
        assert "Cache-Control" not in client.get("/health").headers
