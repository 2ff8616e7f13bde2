"""Data mappers for transforming store records into API response schemas."""

from pantry_chef.mappers.recipe import (
    build_draft_response,
    build_match_response,
    build_rating_response,
    build_recipe_response,
)
from pantry_chef.mappers.user import build_public_profile, build_user_profile


__all__ = [
    "build_draft_response",
    "build_match_response",
    "build_public_profile",
    "build_rating_response",
    "build_recipe_response",
    "build_user_profile",
]
