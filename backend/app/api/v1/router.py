from fastapi import APIRouter

from backend.app.api.v1.endpoints.health import router as health_router
from backend.app.api.v1.endpoints.receiving import router as receiving_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(receiving_router, tags=["receiving"])
