"""Rate limiting middleware backed by the application's ``RateLimiter``."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.requests import Request

from pantry_chef.core.exceptions import RateLimitError
from pantry_chef.core.middleware.utils import get_remote_address, send_error


if TYPE_CHECKING:
    from starlette.types import ASGIApp, Receive, Scope, Send

    from pantry_chef.core.rate_limit import RateLimiter


class RateLimitMiddleware:
    """Pure ASGI middleware answering 429 when a policy is exhausted."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        limiter: RateLimiter,
        debug: bool = False,
    ) -> None:
        self.app = app
        self.limiter = limiter
        self.debug = debug

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        client_key = get_remote_address(Request(scope))
        rejection = await self.limiter.check(scope["path"], client_key)
        if rejection is not None:
            error = RateLimitError(
                rejection.policy.message, retry_after=rejection.retry_after
            )
            await send_error(scope, receive, send, error, debug=self.debug)
            return

        await self.app(scope, receive, send)
