"""HireScore - AI resume analysis and candidate matching pipeline."""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hirescore.core.config import settings
from hirescore.core.storage import init_models
from hirescore.routers import (
    analysis_router,
    applications_router,
    batch_router,
    matching_router,
    notifications_router,
)
from hirescore.services.reminder_scheduler import reminder_scheduler

log_level = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Initializing application...")
    await init_models()

    if settings.reminders_enabled:
        logger.info("Starting reminder scheduler...")
        await reminder_scheduler.start()

    logger.info("Application initialized")

    yield

    logger.info("Shutting down...")
    await reminder_scheduler.stop()
    logger.info("Shutdown complete")


app = FastAPI(
    title="HireScore",
    description="AI resume analysis, job matching and candidate notifications",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analysis_router)
app.include_router(batch_router)
app.include_router(matching_router)
app.include_router(notifications_router)
app.include_router(applications_router)


@app.get("/api")
async def api_info():
    """API information endpoint."""
    return {
        "message": "HireScore API",
        "version": "1.0.0",
        "docs": "/docs",
        "status": "active",
        "reminders_enabled": settings.reminders_enabled,
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "hirescore",
        "reminders": reminder_scheduler.get_status(),
    }
