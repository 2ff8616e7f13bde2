"""Security headers middleware.

Adds the helmet-style response headers every API response carries.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint


if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.types import ASGIApp


DEFAULT_CSP = (
    "default-src 'self'; "
    "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "  # Swagger UI
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "img-src 'self' data: https:; "
    "frame-ancestors 'none'; "
    "base-uri 'self'; "
    "form-action 'self'"
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        enable_hsts: bool = True,
        content_security_policy: str = DEFAULT_CSP,
    ) -> None:
        super().__init__(app)
        self.enable_hsts = enable_hsts
        self.content_security_policy = content_security_policy

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Add security headers to response."""
        response = await call_next(request)

        headers = response.headers
        headers["X-Content-Type-Options"] = "nosniff"
        headers["X-Frame-Options"] = "DENY"
        headers["Referrer-Policy"] = "no-referrer"
        headers["Cross-Origin-Opener-Policy"] = "same-origin"
        headers["Cross-Origin-Resource-Policy"] = "same-origin"
        headers["X-DNS-Prefetch-Control"] = "off"
        headers["Content-Security-Policy"] = self.content_security_policy
        if self.enable_hsts:
            headers["Strict-Transport-Security"] = "max-age=15552000; includeSubDomains"

        # Authenticated payloads must not be cached by intermediaries
        if request.url.path.startswith("/api/"):
            headers["Cache-Control"] = "no-store"

        return response
