"""FastAPI application entry point"""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from moodsnap.api.routes import health, insights, moods
from moodsnap.config import settings

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="moodsnap API",
    description="Insight snapshot engine for mood journals",
    version="0.1.0"
)

# CORS middleware - configure via environment for production
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:8000").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(insights.router, prefix="/api", tags=["insights"])
app.include_router(moods.router, prefix="/api", tags=["moods"])


@app.on_event("startup")
async def startup_event():
    """Log provider selection on startup"""
    logger.info("Starting moodsnap API...")
    logger.info(f"Generation provider: {settings.generation_provider}")
    logger.info(f"Snapshot store: {settings.snapshot_store_provider}")
    logger.info(f"Mood source: {settings.mood_source_provider}")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down moodsnap API...")
