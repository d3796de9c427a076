"""
FastAPI Application Entry Point

This module initializes the FastAPI application and configures:
- Logging
- API routes (management API first, catch-all redirect last)
- Middleware (logging, CORS)
- Startup/shutdown of the schema and the background click recorder
"""

import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shortener.api import endpoints
from shortener.core.recorder_manager import (
    get_click_recorder,
    initialize_click_recorder,
    shutdown_click_recorder,
)
from shortener.core.setting import settings
from shortener.db.session import create_schema
from shortener.middleware.logging import add_logging_middleware

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"

app = FastAPI(
    title="URL Shortener Service",
    description="Base62 URL shortener with background click recording",
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

add_logging_middleware(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health endpoints defined before the redirect router to match before catch-all route
@app.get("/", tags=["Health"])
async def root():
    """Root endpoint for health checks."""
    return {
        "message": "URL Shortener Service",
        "version": APP_VERSION,
        "docs": "/docs"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint for monitoring.

    Returns:
        Health status of the service and click recorder counters
    """
    recorder = get_click_recorder()
    return {
        "status": "healthy",
        "click_recorder": recorder.get_stats() if recorder else None,
    }


app.include_router(endpoints.urls_router, tags=["URL Shortener"])
app.include_router(endpoints.redirect_router, tags=["URL Redirect"])


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    if settings.AUTO_CREATE_SCHEMA:
        await create_schema()
    await initialize_click_recorder()


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    await shutdown_click_recorder()


def run() -> None:
    """Run the service with uvicorn (console script entry point)."""
    uvicorn.run(
        "shortener.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
