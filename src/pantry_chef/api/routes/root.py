"""Root endpoint providing service information."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from pantry_chef.api.dependencies import get_app_settings
from pantry_chef.core.config import Settings
from pantry_chef.schemas.health import RootResponse


router = APIRouter(tags=["Root"])


@router.get(
    "/",
    response_model=RootResponse,
    summary="Root endpoint",
    description="Service name, version and the entry points of the API.",
)
async def root(
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> RootResponse:
    prefix = settings.api.prefix
    return RootResponse(
        message=f"Welcome to {settings.app.name} API",
        version=settings.app.version,
        endpoints={
            "auth": f"{prefix}/auth",
            "recipes": f"{prefix}/recipes",
            "users": f"{prefix}/users",
            "health": "/health",
        },
    )
