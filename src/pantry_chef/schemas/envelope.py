"""Success envelopes wrapping every 2xx JSON body."""

from __future__ import annotations

from math import ceil
from typing import Generic, TypeVar

from pydantic import Field

from pantry_chef.schemas.base import APIResponse


DataT = TypeVar("DataT")


class Pagination(APIResponse):
    """Page position for list endpoints."""

    current_page: int = Field(..., description="1-based page number")
    total_pages: int
    total_recipes: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def build(cls, *, page: int, limit: int, total: int) -> Pagination:
        total_pages = ceil(total / limit) if limit else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_recipes=total,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )


class MessageResponse(APIResponse):
    """Envelope for operations that return no data."""

    success: bool = True
    message: str


class SuccessResponse(APIResponse, Generic[DataT]):
    """Envelope carrying a data payload."""

    success: bool = True
    message: str
    data: DataT


class PaginatedResponse(APIResponse, Generic[DataT]):
    """Envelope carrying one page of a list."""

    success: bool = True
    message: str
    data: DataT
    pagination: Pagination
