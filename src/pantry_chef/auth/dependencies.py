"""FastAPI authentication dependencies.

Routes declare one of two gates:

- ``CurrentUserId``: a valid bearer token is required; missing, invalid or
  expired tokens end the request with 401 before the handler runs.
- ``OptionalUserId``: the token is used when valid; otherwise the request
  proceeds anonymously.

Only the user id is attached. Handlers re-fetch the user when they need it.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from pantry_chef.auth.jwt import TokenExpiredError, TokenInvalidError, decode_token
from pantry_chef.core.exceptions import AuthenticationError


bearer_scheme = HTTPBearer(
    scheme_name="JWT",
    description="JWT Bearer token authentication",
    auto_error=False,
)

NO_TOKEN_MESSAGE = "Access denied. No token provided."


async def get_current_user_id(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str:
    """Validate the bearer token and return its subject.

    Raises:
        AuthenticationError: 401 if the token is missing, invalid or expired.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(NO_TOKEN_MESSAGE)

    try:
        payload = decode_token(
            credentials.credentials, settings=request.app.state.settings
        )
    except TokenExpiredError:
        raise AuthenticationError.expired_token() from None
    except TokenInvalidError:
        raise AuthenticationError.invalid_token() from None

    request.state.user_id = payload.sub
    return payload.sub


async def get_optional_user_id(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str | None:
    """Return the token subject, or None for anonymous access."""
    if credentials is None or not credentials.credentials:
        return None

    try:
        payload = decode_token(
            credentials.credentials, settings=request.app.state.settings
        )
    except (TokenExpiredError, TokenInvalidError):
        return None

    request.state.user_id = payload.sub
    return payload.sub


CurrentUserId = Annotated[str, Depends(get_current_user_id)]
OptionalUserId = Annotated[str | None, Depends(get_optional_user_id)]
