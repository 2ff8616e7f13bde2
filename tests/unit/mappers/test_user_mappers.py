"""Unit tests for user mappers."""

from __future__ import annotations

import uuid

import pytest

from pantry_chef.database.repositories.saved import SavedRecipeSummaryRecord
from pantry_chef.mappers import build_public_profile, build_user_profile
from tests.factories.records import make_user


pytestmark = pytest.mark.unit


class TestBuildUserProfile:
    """Tests for build_user_profile."""

    def test_omits_password_hash(self) -> None:
        """Should never expose the password hash."""
        data = build_user_profile(make_user(), []).model_dump()

        assert "passwordHash" not in data
        assert "password_hash" not in data

    def test_saved_recipe_ids_as_strings(self) -> None:
        saved = [uuid.uuid4(), uuid.uuid4()]

        profile = build_user_profile(make_user(), saved)

        assert profile.saved_recipes == [str(value) for value in saved]
        assert profile.preferences.dietary_restrictions == ["vegetarian"]
        assert profile.preferences.default_portions == 2


class TestBuildPublicProfile:
    """Tests for build_public_profile."""

    def test_hides_saved_recipes_from_others(self) -> None:
        profile = build_public_profile(make_user(), total_saved_recipes=3)

        assert profile.total_saved_recipes == 3
        assert profile.saved_recipes is None
        assert "email" not in profile.model_dump()

    def test_includes_summaries_for_owner(self) -> None:
        summary = SavedRecipeSummaryRecord(
            id=uuid.uuid4(),
            title="Soup",
            description="Warm",
            average_rating=4.0,
            total_time=25,
        )

        profile = build_public_profile(
            make_user(), total_saved_recipes=1, saved_recipes=[summary]
        )

        assert profile.saved_recipes is not None
        assert profile.saved_recipes[0].id == str(summary.id)
        assert profile.saved_recipes[0].total_time == 25
