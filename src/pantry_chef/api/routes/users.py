"""User profile endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from pantry_chef.api.dependencies import get_saved_recipe_repository, get_user_repository
from pantry_chef.auth.dependencies import OptionalUserId
from pantry_chef.core.exceptions import NotFoundError
from pantry_chef.database.ids import parse_id
from pantry_chef.database.repositories import SavedRecipeRepository, UserRepository
from pantry_chef.mappers import build_public_profile
from pantry_chef.schemas.envelope import SuccessResponse
from pantry_chef.schemas.user import PublicUserData


router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "/{user_id}",
    response_model=SuccessResponse[PublicUserData],
    response_model_exclude_none=True,
    summary="Get a public user profile",
    description="Saved recipes are only listed when the viewer is the profile owner.",
    responses={404: {"description": "User not found"}},
)
async def get_user_profile(
    user_id: str,
    viewer_id: OptionalUserId,
    users: Annotated[UserRepository, Depends(get_user_repository)],
    saved: Annotated[SavedRecipeRepository, Depends(get_saved_recipe_repository)],
) -> SuccessResponse[PublicUserData]:
    user = await users.get_by_id(parse_id(user_id))
    if user is None:
        raise NotFoundError("User not found")

    is_owner = viewer_id is not None and viewer_id == str(user.id)
    if is_owner:
        summaries = await saved.list_summaries(user.id)
        profile = build_public_profile(
            user, total_saved_recipes=len(summaries), saved_recipes=summaries
        )
    else:
        profile = build_public_profile(user, total_saved_recipes=await saved.count(user.id))

    return SuccessResponse[PublicUserData](
        message="User profile retrieved successfully",
        data=PublicUserData(user=profile),
    )
