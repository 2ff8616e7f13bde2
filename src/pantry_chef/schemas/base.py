"""Base schema configuration for all Pydantic models.

All API and downstream schemas inherit from one of the public subclasses:

    - APIRequest: incoming API request bodies
    - APIResponse: outgoing API response bodies
    - DownstreamRequest: requests sent to external services
    - DownstreamResponse: responses received from external services
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _BaseSchema(BaseModel):
    """Private base schema with common configuration.

    Do not use directly - inherit from one of the public subclasses.
    """

    model_config = ConfigDict(
        # camelCase on the wire, snake_case in Python
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
        validate_assignment=True,
        serialize_by_alias=True,
    )


class APIRequest(_BaseSchema):
    """Base class for incoming API request schemas.

    Unknown properties are dropped rather than rejected.
    """

    model_config = ConfigDict(
        extra="ignore",
        str_strip_whitespace=True,
    )


class APIResponse(_BaseSchema):
    """Base class for outgoing API response schemas.

    Only explicitly declared properties are ever returned.
    """

    model_config = ConfigDict(
        extra="forbid",
    )


class DownstreamRequest(_BaseSchema):
    """Base class for requests sent to external services."""

    model_config = ConfigDict(
        extra="forbid",
    )


class DownstreamResponse(_BaseSchema):
    """Base class for responses received from external services.

    Upstream services may add new properties; they are ignored.
    """

    model_config = ConfigDict(
        extra="ignore",
    )
