"""Account endpoints.

Provides:
- POST /auth/register and POST /auth/login issuing bearer tokens
- GET /auth/me for the authenticated user's profile
- PUT /auth/profile and PUT /auth/change-password for account updates
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from pantry_chef.api.dependencies import (
    get_app_settings,
    get_saved_recipe_repository,
    get_user_repository,
)
from pantry_chef.auth.dependencies import CurrentUserId
from pantry_chef.auth.jwt import create_access_token
from pantry_chef.auth.passwords import hash_password_async, verify_password_async
from pantry_chef.core.config import Settings
from pantry_chef.core.exceptions import (
    AuthenticationError,
    BadRequestError,
    DuplicateKeyError,
    NotFoundError,
)
from pantry_chef.database.ids import parse_id
from pantry_chef.database.repositories import SavedRecipeRepository, UserRepository
from pantry_chef.database.repositories.user import UserRecord
from pantry_chef.mappers import build_user_profile
from pantry_chef.observability.logging import get_logger
from pantry_chef.schemas.envelope import MessageResponse, SuccessResponse
from pantry_chef.schemas.user import (
    AuthData,
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
    UpdateProfileRequest,
    UserData,
    UserPreferences,
)


logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

INVALID_CREDENTIALS = "Invalid credentials"


async def _load_user(users: UserRepository, user_id: str) -> UserRecord:
    user = await users.get_by_id(parse_id(user_id))
    if user is None:
        raise NotFoundError("User not found")
    return user


@router.post(
    "/register",
    response_model=SuccessResponse[AuthData],
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    responses={400: {"description": "Validation failed or email already registered"}},
)
async def register(
    body: RegisterRequest,
    users: Annotated[UserRepository, Depends(get_user_repository)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> SuccessResponse[AuthData]:
    """Create an account and return it with a bearer token."""
    if await users.get_by_email(body.email) is not None:
        raise DuplicateKeyError("email", body.email)

    preferences = UserPreferences.model_validate(
        body.preferences.model_dump() if body.preferences else {}
    )
    user = await users.create(
        name=body.name,
        email=body.email,
        password_hash=await hash_password_async(
            body.password, rounds=settings.auth.bcrypt_rounds
        ),
        preferences=preferences.model_dump(),
    )
    token = create_access_token(str(user.id), settings=settings)

    return SuccessResponse[AuthData](
        message="User registered successfully",
        data=AuthData(user=build_user_profile(user, []), token=token),
    )


@router.post(
    "/login",
    response_model=SuccessResponse[AuthData],
    summary="Log in with email and password",
    responses={401: {"description": "Invalid credentials or deactivated account"}},
)
async def login(
    body: LoginRequest,
    users: Annotated[UserRepository, Depends(get_user_repository)],
    saved: Annotated[SavedRecipeRepository, Depends(get_saved_recipe_repository)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> SuccessResponse[AuthData]:
    """Verify credentials, refresh the last login time and issue a token."""
    user = await users.get_by_email(body.email)
    if user is None:
        raise AuthenticationError(INVALID_CREDENTIALS)
    if not user.is_active:
        raise AuthenticationError("Account is deactivated")
    if not await verify_password_async(body.password, user.password_hash):
        logger.warning("Failed login attempt", user_id=str(user.id))
        raise AuthenticationError(INVALID_CREDENTIALS)

    user = await users.touch_last_login(user.id) or user
    token = create_access_token(str(user.id), settings=settings)

    return SuccessResponse[AuthData](
        message="Login successful",
        data=AuthData(
            user=build_user_profile(user, await saved.list_ids(user.id)),
            token=token,
        ),
    )


@router.get(
    "/me",
    response_model=SuccessResponse[UserData],
    summary="Get the authenticated user",
)
async def get_me(
    user_id: CurrentUserId,
    users: Annotated[UserRepository, Depends(get_user_repository)],
    saved: Annotated[SavedRecipeRepository, Depends(get_saved_recipe_repository)],
) -> SuccessResponse[UserData]:
    user = await _load_user(users, user_id)
    return SuccessResponse[UserData](
        message="User profile retrieved successfully",
        data=UserData(user=build_user_profile(user, await saved.list_ids(user.id))),
    )


@router.put(
    "/profile",
    response_model=SuccessResponse[UserData],
    summary="Update name, preferences or avatar",
)
async def update_profile(
    body: UpdateProfileRequest,
    user_id: CurrentUserId,
    users: Annotated[UserRepository, Depends(get_user_repository)],
    saved: Annotated[SavedRecipeRepository, Depends(get_saved_recipe_repository)],
) -> SuccessResponse[UserData]:
    """Apply a partial profile update. Other account fields cannot be changed here."""
    user = await _load_user(users, user_id)

    preferences = None
    if body.preferences is not None:
        preferences = UserPreferences.model_validate(body.preferences.model_dump()).model_dump()

    updated = await users.update_profile(
        user.id,
        name=body.name,
        preferences=preferences,
        avatar=str(body.avatar) if body.avatar is not None else None,
    )
    if updated is None:
        raise NotFoundError("User not found")

    return SuccessResponse[UserData](
        message="Profile updated successfully",
        data=UserData(user=build_user_profile(updated, await saved.list_ids(updated.id))),
    )


@router.put(
    "/change-password",
    response_model=MessageResponse,
    summary="Change the account password",
    responses={400: {"description": "Current password is incorrect"}},
)
async def change_password(
    body: ChangePasswordRequest,
    user_id: CurrentUserId,
    users: Annotated[UserRepository, Depends(get_user_repository)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> MessageResponse:
    user = await _load_user(users, user_id)
    if not await verify_password_async(body.current_password, user.password_hash):
        raise BadRequestError("Current password is incorrect")

    await users.update_password_hash(
        user.id,
        await hash_password_async(body.new_password, rounds=settings.auth.bcrypt_rounds),
    )
    logger.info("Password changed", user_id=str(user.id))
    return MessageResponse(message="Password changed successfully")
