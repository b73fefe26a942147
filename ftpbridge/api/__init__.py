"""API router initialization.

Each sub-router carries its own prefix so route templates hold the full path.
"""

from fastapi import APIRouter

from .delete import router as delete_router
from .health import router as health_router
from .listing import router as listing_router
from .metrics import router as metrics_router
from .upload import router as upload_router

router = APIRouter()

# Include all sub-routers
router.include_router(listing_router)
router.include_router(upload_router)
router.include_router(delete_router)
router.include_router(health_router)
router.include_router(metrics_router)
