"""API routers."""

from hirescore.routers.analysis import router as analysis_router
from hirescore.routers.applications import router as applications_router
from hirescore.routers.batch import router as batch_router
from hirescore.routers.matching import router as matching_router
from hirescore.routers.notifications import router as notifications_router

__all__ = [
    "analysis_router",
    "applications_router",
    "batch_router",
    "matching_router",
    "notifications_router",
]
