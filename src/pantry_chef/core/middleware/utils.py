"""Helpers shared by the request pipeline middleware."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.requests import Request

from pantry_chef.core.exceptions import error_response


if TYPE_CHECKING:
    from starlette.types import Receive, Scope, Send

    from pantry_chef.core.exceptions import AppError


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, considering proxies."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        # First address in the chain is the original client
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return "unknown"


def get_remote_address(request: Request) -> str:
    """Return the peer address of the connection, ignoring forwarding headers."""
    if request.client:
        return request.client.host
    return "unknown"


async def send_error(
    scope: Scope,
    receive: Receive,
    send: Send,
    error: AppError,
    *,
    debug: bool = False,
) -> None:
    """Short-circuit a pure ASGI middleware with an error envelope."""
    response = error_response(Request(scope), error, debug=debug)
    await response(scope, receive, send)
