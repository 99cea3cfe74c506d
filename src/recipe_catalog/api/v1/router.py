"""API v1 router aggregating all endpoint routers.

Mounted under ``api.v1_prefix`` (``/api/v1`` by default).
"""

from __future__ import annotations

from fastapi import APIRouter

from recipe_catalog.api.v1.endpoints import auth, categories, health, recipes


router = APIRouter()

router.include_router(health.router)
router.include_router(auth.router)
router.include_router(categories.router)
router.include_router(recipes.router)
