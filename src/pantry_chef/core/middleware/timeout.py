"""Per-request time budget.

The downstream application runs in its own task. When the budget expires
before the response has started, the task is cancelled and a single 408
envelope is sent. Once the response has started the request is left to
finish; nothing further is sent on its behalf.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from pantry_chef.core.exceptions import RequestTimeoutError
from pantry_chef.core.middleware.utils import send_error
from pantry_chef.observability.logging import get_logger


if TYPE_CHECKING:
    from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = get_logger(__name__)


class TimeoutMiddleware:
    """Pure ASGI middleware enforcing a per-route request timeout."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        default_ms: int = 30_000,
        overrides: dict[str, int] | None = None,
        debug: bool = False,
    ) -> None:
        self.app = app
        self.default_ms = default_ms
        self.overrides = overrides or {}
        self.debug = debug

    def timeout_for(self, path: str) -> int:
        return self.overrides.get(path, self.default_ms)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        timeout_ms = self.timeout_for(scope["path"])
        response_started = False
        timed_out = False

        async def guarded_send(message: Message) -> None:
            nonlocal response_started
            if timed_out:
                return
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        task = asyncio.ensure_future(self.app(scope, receive, guarded_send))
        try:
            done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000)
        except asyncio.CancelledError:
            # Client went away or the server is shutting down
            task.cancel()
            raise

        if task in done:
            task.result()
            return

        if response_started:
            await task
            return

        timed_out = True
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

        logger.error(
            "Request timeout",
            method=scope["method"],
            path=scope["path"],
            timeout_ms=timeout_ms,
        )
        await send_error(
            scope, receive, send, RequestTimeoutError(timeout_ms), debug=self.debug
        )
