"""Resource identifiers.

Ids are UUIDs generated by the application. Path parameters arrive as plain
strings so that a malformed id is reported as a missing resource rather than
a validation failure.
"""

from __future__ import annotations

import uuid

from pantry_chef.core.exceptions import NotFoundError


def new_id() -> uuid.UUID:
    return uuid.uuid4()


def parse_id(value: str) -> uuid.UUID:
    """Parse a resource id.

    Raises:
        NotFoundError: ``Resource not found with id: <value>`` when malformed.
    """
    try:
        return uuid.UUID(value)
    except (ValueError, AttributeError, TypeError):
        raise NotFoundError.for_id(value) from None
