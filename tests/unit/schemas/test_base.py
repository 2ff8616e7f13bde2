"""Tests for base schema configuration and behavior."""

from enum import StrEnum

import pytest
from pydantic import ValidationError

from pantry_chef.schemas.base import APIRequest, APIResponse, DownstreamResponse


pytestmark = pytest.mark.unit


class _Course(StrEnum):
    MAIN = "main"


class TestCamelCaseSerialization:
    """Tests for snake_case to camelCase serialization."""

    def test_response_serializes_to_camel_case(self):
        """APIResponse should serialize snake_case fields to camelCase."""

        class TestResponse(APIResponse):
            total_ratings: int
            is_public: bool

        data = TestResponse(total_ratings=3, is_public=True).model_dump()

        assert data == {"totalRatings": 3, "isPublic": True}

    def test_accepts_both_spellings(self):
        """Models should accept camelCase and snake_case input."""

        class TestRequest(APIRequest):
            min_match: int

        assert TestRequest(minMatch=2).min_match == 2
        assert TestRequest(min_match=2).min_match == 2

    def test_enum_values_serialized(self):
        class TestResponse(APIResponse):
            course: _Course

        assert TestResponse(course="main").model_dump() == {"course": "main"}


class TestExtraFields:
    """Tests for unknown property handling."""

    def test_request_drops_unknown_fields(self):
        """APIRequest should silently drop properties it does not declare."""

        class TestRequest(APIRequest):
            name: str

        request = TestRequest.model_validate({"name": "x", "isAdmin": True})

        assert request.model_dump() == {"name": "x"}

    def test_request_strips_whitespace(self):
        class TestRequest(APIRequest):
            name: str

        assert TestRequest(name="  Jane  ").name == "Jane"

    def test_response_forbids_unknown_fields(self):
        class TestResponse(APIResponse):
            name: str

        with pytest.raises(ValidationError):
            TestResponse.model_validate({"name": "x", "passwordHash": "h"})

    def test_downstream_response_ignores_unknown_fields(self):
        class TestResponse(DownstreamResponse):
            name: str

        assert TestResponse.model_validate({"name": "x", "extra": 1}).name == "x"
