"""API router aggregating all endpoint routers.

Domain routes are mounted under the configured API prefix (``/api``); the
root and health endpoints stay at the top level.
"""

from __future__ import annotations

from fastapi import APIRouter

from pantry_chef.api.routes import auth, recipes, users


router = APIRouter()

router.include_router(auth.router)
router.include_router(recipes.router)
router.include_router(users.router)
