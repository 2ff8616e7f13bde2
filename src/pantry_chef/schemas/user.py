"""User and authentication schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, AnyHttpUrl, EmailStr, Field

from pantry_chef.schemas.base import APIRequest, APIResponse
from pantry_chef.schemas.enums import DietaryRestriction
from pantry_chef.schemas.recipe import IngredientName


NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6


class UserPreferences(APIResponse):
    """Cooking preferences stored with the user."""

    dietary_restrictions: list[DietaryRestriction] = Field(default_factory=list)
    favorite_ingredients: list[str] = Field(default_factory=list)
    disliked_ingredients: list[str] = Field(default_factory=list)
    default_portions: int = Field(default=4, ge=1, le=12)


class UserPreferencesUpdate(APIRequest):
    """Preferences as submitted by the client."""

    dietary_restrictions: list[DietaryRestriction] = Field(default_factory=list)
    favorite_ingredients: list[IngredientName] = Field(default_factory=list)
    disliked_ingredients: list[IngredientName] = Field(default_factory=list)
    default_portions: int = Field(default=4, ge=1, le=12)


# =============================================================================
# Responses
# =============================================================================


class UserProfile(APIResponse):
    """The authenticated user's own profile. Never includes the password hash."""

    id: str
    name: str
    email: str
    avatar: str | None = None
    preferences: UserPreferences
    saved_recipes: list[str] = Field(
        default_factory=list, description="Ids of saved recipes, newest first"
    )
    is_active: bool = True
    created_at: datetime
    updated_at: datetime
    last_login_at: datetime | None = None


class SavedRecipeSummary(APIResponse):
    id: str
    title: str
    description: str
    average_rating: float
    total_time: int


class PublicUserProfile(APIResponse):
    """Profile visible to anyone; saved recipes only for the owner."""

    id: str
    name: str
    avatar: str | None = None
    created_at: datetime
    total_saved_recipes: int
    saved_recipes: list[SavedRecipeSummary] | None = None


class AuthData(APIResponse):
    user: UserProfile
    token: str


class UserData(APIResponse):
    user: UserProfile


class PublicUserData(APIResponse):
    user: PublicUserProfile


# =============================================================================
# Requests
# =============================================================================


def _normalize_email(value: str) -> str:
    return value.strip().lower()


NormalizedEmail = Annotated[EmailStr, AfterValidator(_normalize_email)]


class RegisterRequest(APIRequest):
    name: str = Field(..., min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    email: NormalizedEmail
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)
    preferences: UserPreferencesUpdate | None = None


class LoginRequest(APIRequest):
    email: NormalizedEmail
    password: str = Field(..., min_length=1)


class UpdateProfileRequest(APIRequest):
    """Only these three fields can be changed through the profile endpoint."""

    name: str | None = Field(
        default=None, min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH
    )
    preferences: UserPreferencesUpdate | None = None
    avatar: AnyHttpUrl | None = None


class ChangePasswordRequest(APIRequest):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)
