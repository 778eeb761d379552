"""
Routers API pour AdaptIQ.

Ce module regroupe tous les sous-routers et expose un router principal
a inclure dans l'application FastAPI.
"""
from fastapi import APIRouter

from app.api.routers.readiness_router import router as readiness_router
from app.api.routers.adjustment_router import router as adjustment_router
from app.api.routers.set_log_router import router as set_log_router
from app.api.routers._shared import limiter

router = APIRouter()

router.include_router(readiness_router)
router.include_router(adjustment_router)
router.include_router(set_log_router)

__all__ = ["router", "limiter"]
