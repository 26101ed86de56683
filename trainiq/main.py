"""
FastAPI application for the training analytics API.
"""

from fastapi import FastAPI

from trainiq.api.v1.router import api_router
from trainiq.core.config import settings
from trainiq.core.logger import setup_logger

setup_logger(level=settings.LOG_LEVEL, log_file=settings.LOG_FILE)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Training load, periodization, progression and plateau analytics.",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json")

app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    return {"message": "TrainIQ API", "version": settings.VERSION, "docs": "/docs"}


@app.get("/health")
async def health_check():
    """Liveness check. Does not touch the database."""
    return {"status": "healthy", "service": "trainiq-api", "version": settings.VERSION}


@app.get("/info")
async def info():
    """Project metadata plus the engine defaults the analytics run with."""
    return {
        "project name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "authors": settings.AUTHORS,
        "project url": settings.PROJECT_URL,
        "engine": {
            "context window weeks": settings.CONTEXT_WINDOW_WEEKS,
            "load window weeks": settings.LOAD_WINDOW_WEEKS,
            "fatigue window weeks": settings.FATIGUE_WINDOW_WEEKS,
            "weight quantum kg": settings.WEIGHT_QUANTUM,
        },
    }
