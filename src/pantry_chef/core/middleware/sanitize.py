"""Operator-key sanitization and request body buffering.

Keys that begin with ``$`` or contain ``.`` are removed, at any depth, from
the query string, JSON bodies and URL-encoded bodies before routing. The body
is buffered here (bounded by ``max_body_bytes``) and replayed downstream.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl, urlencode

import orjson
from starlette.datastructures import Headers

from pantry_chef.core.exceptions import BadRequestError, PayloadTooLargeError
from pantry_chef.core.middleware.utils import send_error
from pantry_chef.observability.logging import get_logger, redact_sensitive


if TYPE_CHECKING:
    from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = get_logger(__name__)

_BRACKET_SEGMENTS = re.compile(r"[\[\]]+")


class _BodyTooLarge(Exception):
    pass


def is_forbidden_key(key: str) -> bool:
    """Whether ``key`` could be read as a query operator or a nested path.

    Bracketed query keys (``price[$gt]``) are checked segment by segment.
    """
    if "." in key:
        return True
    return any(
        segment.startswith("$") for segment in _BRACKET_SEGMENTS.split(key) if segment
    )


def sanitize_value(value: Any) -> Any:
    """Recursively drop forbidden keys from mappings, including inside lists."""
    if isinstance(value, dict):
        return {
            key: sanitize_value(item)
            for key, item in value.items()
            if not is_forbidden_key(key)
        }
    if isinstance(value, list):
        return [sanitize_value(item) for item in value]
    return value


def sanitize_query_string(raw: bytes) -> bytes:
    pairs = parse_qsl(raw.decode("latin-1"), keep_blank_values=True)
    return urlencode(
        [(key, value) for key, value in pairs if not is_forbidden_key(key)]
    ).encode("latin-1")


def _sanitize_form(body: bytes) -> bytes:
    pairs = parse_qsl(body.decode("utf-8", errors="strict"), keep_blank_values=True)
    return urlencode(
        [(key, value) for key, value in pairs if not is_forbidden_key(key)]
    ).encode("utf-8")


class SanitizeMiddleware:
    """Pure ASGI middleware that strips operator keys from request input."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        max_body_bytes: int = 10 * 1024 * 1024,
        log_body: bool = False,
        debug: bool = False,
    ) -> None:
        self.app = app
        self.max_body_bytes = max_body_bytes
        self.log_body = log_body
        self.debug = debug

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        content_length = headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_body_bytes:
            await send_error(scope, receive, send, PayloadTooLargeError(), debug=self.debug)
            return

        try:
            body = await self._read_body(receive)
        except _BodyTooLarge:
            await send_error(scope, receive, send, PayloadTooLargeError(), debug=self.debug)
            return

        media_type = headers.get("content-type", "").split(";")[0].strip().lower()
        try:
            query_string = sanitize_query_string(scope.get("query_string", b""))
            body = self._sanitize_body(body, media_type)
        except (RecursionError, UnicodeDecodeError, ValueError) as exc:
            logger.warning("Input sanitization failed", error=str(exc))
            await send_error(
                scope,
                receive,
                send,
                BadRequestError("Invalid input format"),
                debug=self.debug,
            )
            return

        scope = dict(scope)
        scope["query_string"] = query_string
        scope["headers"] = [
            (name, value)
            for name, value in scope["headers"]
            if name.lower() != b"content-length"
        ]
        if body:
            scope["headers"].append((b"content-length", str(len(body)).encode()))

        await self.app(scope, _replay(body, receive), send)

    async def _read_body(self, receive: Receive) -> bytes:
        chunks: list[bytes] = []
        size = 0
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] != "http.request":
                break
            chunk = message.get("body", b"")
            size += len(chunk)
            if size > self.max_body_bytes:
                raise _BodyTooLarge
            chunks.append(chunk)
            more_body = message.get("more_body", False)
        return b"".join(chunks)

    def _sanitize_body(self, body: bytes, media_type: str) -> bytes:
        if not body:
            return body

        if media_type == "application/json":
            try:
                payload = orjson.loads(body)
            except orjson.JSONDecodeError:
                # Left for body parsing to report as invalid JSON
                return body
            cleaned = sanitize_value(payload)
            if self.log_body:
                logger.debug("Request body", body=redact_sensitive(cleaned))
            return body if cleaned == payload else orjson.dumps(cleaned)

        if media_type == "application/x-www-form-urlencoded":
            return _sanitize_form(body)

        return body


def _replay(body: bytes, receive: Receive) -> Receive:
    sent = False

    async def replay_receive() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay_receive
