"""JWT token handling.

Access tokens are HS256 JWTs signed with ``JWT_SECRET_KEY``; the ``sub``
claim carries the user id.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from pantry_chef.core.config import get_settings
from pantry_chef.observability.logging import get_logger


if TYPE_CHECKING:
    from pantry_chef.core.config import Settings


logger = get_logger(__name__)


class TokenPayload(BaseModel):
    """JWT token payload model."""

    sub: str  # Subject (user ID)
    exp: datetime  # Expiration time
    iat: datetime  # Issued at


class TokenError(Exception):
    """Base exception for token-related errors."""


class TokenExpiredError(TokenError):
    """Raised when a token has expired."""


class TokenInvalidError(TokenError):
    """Raised when a token is invalid."""


def create_access_token(
    subject: str,
    *,
    settings: Settings | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a new JWT access token.

    Args:
        subject: The user id.
        settings: Settings providing the secret and algorithm.
        expires_delta: Custom lifetime. Defaults to the configured expiry.

    Returns:
        Encoded JWT token string.
    """
    settings = settings or get_settings()
    jwt_settings = settings.auth.jwt

    if expires_delta is None:
        expires_delta = timedelta(minutes=jwt_settings.access_token_expire_minutes)

    now = datetime.now(UTC)
    payload = {
        "sub": subject,
        "exp": now + expires_delta,
        "iat": now,
    }

    return jwt.encode(
        payload,
        settings.JWT_SECRET_KEY,
        algorithm=jwt_settings.algorithm,
    )


def decode_token(token: str, *, settings: Settings | None = None) -> TokenPayload:
    """Decode and validate a JWT token.

    Raises:
        TokenExpiredError: If the token has expired.
        TokenInvalidError: If the token is malformed, badly signed or lacks ``sub``.
    """
    settings = settings or get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.auth.jwt.algorithm],
        )
        return TokenPayload(**payload)

    except ExpiredSignatureError as e:
        logger.debug("Token expired", error=str(e))
        msg = "Token has expired"
        raise TokenExpiredError(msg) from e

    except (JWTError, PydanticValidationError) as e:
        logger.warning("Invalid token", error=str(e))
        msg = "Invalid token"
        raise TokenInvalidError(msg) from e
