"""Content-Type validation for POST, PUT and PATCH requests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.datastructures import Headers

from pantry_chef.core.exceptions import BadRequestError, UnsupportedMediaTypeError
from pantry_chef.core.middleware.utils import send_error


if TYPE_CHECKING:
    from starlette.types import ASGIApp, Receive, Scope, Send


BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
ALLOWED_MEDIA_TYPES = ("application/json", "multipart/form-data")


class ContentTypeMiddleware:
    """Reject POST/PUT/PATCH requests that are not JSON or multipart.

    A missing header is a 400; an unsupported media type is a 415. The check
    applies whether or not a body is sent, so bodyless calls such as
    ``POST /api/recipes/{id}/save`` must still declare a JSON content type.
    """

    def __init__(self, app: ASGIApp, *, debug: bool = False) -> None:
        self.app = app
        self.debug = debug

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] not in BODY_METHODS:
            await self.app(scope, receive, send)
            return

        content_type = Headers(scope=scope).get("content-type")
        if not content_type:
            await send_error(
                scope,
                receive,
                send,
                BadRequestError("Content-Type header is required"),
                debug=self.debug,
            )
            return
        if not any(allowed in content_type.lower() for allowed in ALLOWED_MEDIA_TYPES):
            await send_error(scope, receive, send, UnsupportedMediaTypeError(), debug=self.debug)
            return

        await self.app(scope, receive, send)
