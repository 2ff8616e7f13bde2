"""Unit tests for the sanitizing middleware.

Tests cover:
- Forbidden key detection
- Recursive stripping from JSON bodies, forms and query strings
- Body size limits
"""

from __future__ import annotations

from typing import Any
from urllib.parse import parse_qsl

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from pantry_chef.core.exceptions import setup_exception_handlers
from pantry_chef.core.middleware import SanitizeMiddleware
from pantry_chef.core.middleware.sanitize import (
    is_forbidden_key,
    sanitize_query_string,
    sanitize_value,
)


pytestmark = pytest.mark.unit


@pytest.fixture
def echo_app() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)
    app.add_middleware(SanitizeMiddleware, max_body_bytes=256)

    @app.post("/echo")
    async def echo(request: Request) -> dict[str, Any]:
        body: Any = None
        content_type = request.headers.get("content-type", "")
        if content_type.startswith("application/json"):
            body = await request.json()
        elif content_type.startswith("application/x-www-form-urlencoded"):
            body = dict(parse_qsl((await request.body()).decode()))
        return {"query": dict(request.query_params), "body": body}

    return app


class TestIsForbiddenKey:
    """Tests for is_forbidden_key."""

    @pytest.mark.parametrize("key", ["$where", "$gt", "a.b", "price[$gt]", "user.name"])
    def test_forbidden(self, key: str) -> None:
        assert is_forbidden_key(key) is True

    @pytest.mark.parametrize("key", ["name", "price[gt]", "a$b", "ingredients"])
    def test_allowed(self, key: str) -> None:
        assert is_forbidden_key(key) is False


class TestSanitizeValue:
    """Tests for sanitize_value."""

    def test_strips_keys_at_any_depth(self) -> None:
        """Should remove forbidden keys in nested mappings and lists."""
        value = {
            "name": "x",
            "$where": "1 == 1",
            "nested": {"a.b": 1, "items": [{"$gt": 1, "keep": 2}]},
        }

        assert sanitize_value(value) == {"name": "x", "nested": {"items": [{"keep": 2}]}}

    def test_keeps_scalars(self) -> None:
        assert sanitize_value(["$where", 1, None]) == ["$where", 1, None]

    def test_query_string(self) -> None:
        result = sanitize_query_string(b"page=2&%24ne=1&price%5B%24gt%5D=3&a.b=4")
        assert result == b"page=2"


class TestSanitizeMiddleware:
    """Tests for SanitizeMiddleware."""

    def test_strips_json_body(self, echo_app: FastAPI) -> None:
        response = TestClient(echo_app).post(
            "/echo", json={"title": "Soup", "$set": {"admin": True}, "meta": {"x.y": 1}}
        )

        assert response.status_code == 200
        assert response.json()["body"] == {"title": "Soup", "meta": {}}

    def test_strips_query_string(self, echo_app: FastAPI) -> None:
        response = TestClient(echo_app).post("/echo?page=1&$ne=2", json={})

        assert response.json()["query"] == {"page": "1"}

    def test_strips_form_body(self, echo_app: FastAPI) -> None:
        response = TestClient(echo_app).post(
            "/echo", data={"name": "x", "$where": "1"}
        )

        assert response.json()["body"] == {"name": "x"}

    def test_leaves_invalid_json_for_parsing(self, echo_app: FastAPI) -> None:
        """Should pass malformed JSON through untouched."""
        response = TestClient(echo_app, raise_server_exceptions=False).post(
            "/echo", content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 500

    def test_rejects_oversized_body(self, echo_app: FastAPI) -> None:
        response = TestClient(echo_app).post("/echo", json={"blob": "x" * 1024})

        assert response.status_code == 413
        assert response.json()["error"]["type"] == "PayloadTooLargeError"
