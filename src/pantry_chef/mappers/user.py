"""User-related data mappers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pantry_chef.schemas.user import PublicUserProfile, SavedRecipeSummary, UserProfile


if TYPE_CHECKING:
    from uuid import UUID

    from pantry_chef.database.repositories.saved import SavedRecipeSummaryRecord
    from pantry_chef.database.repositories.user import UserRecord


def build_user_profile(record: UserRecord, saved_recipe_ids: list[UUID]) -> UserProfile:
    """Build the owner's view of a user. The password hash is never copied."""
    return UserProfile.model_validate(
        {
            "id": str(record.id),
            "name": record.name,
            "email": record.email,
            "avatar": record.avatar,
            "preferences": record.preferences,
            "savedRecipes": [str(recipe_id) for recipe_id in saved_recipe_ids],
            "isActive": record.is_active,
            "createdAt": record.created_at,
            "updatedAt": record.updated_at,
            "lastLoginAt": record.last_login_at,
        }
    )


def build_public_profile(
    record: UserRecord,
    *,
    total_saved_recipes: int,
    saved_recipes: list[SavedRecipeSummaryRecord] | None = None,
) -> PublicUserProfile:
    """Build the public view of a user.

    ``saved_recipes`` is only passed when the viewer is the profile owner.
    """
    summaries = None
    if saved_recipes is not None:
        summaries = [
            SavedRecipeSummary(
                id=str(saved.id),
                title=saved.title,
                description=saved.description,
                average_rating=saved.average_rating,
                total_time=saved.total_time,
            )
            for saved in saved_recipes
        ]
    return PublicUserProfile(
        id=str(record.id),
        name=record.name,
        avatar=record.avatar,
        created_at=record.created_at,
        total_saved_recipes=total_saved_recipes,
        saved_recipes=summaries,
    )
