"""
FastAPI application entry point for the Publication Analytics API.

This module serves as the central orchestration file for the service. It
configures logging and CORS, opens the asyncpg pool for the lifetime of the
application, registers the dashboard router, and starts the ASGI server.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from publication_analytics import __version__
from publication_analytics.api import api_router
from publication_analytics.core.config import get_settings
from publication_analytics.core.database import init_db, close_db


settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the publication log pool on startup and close it on shutdown.

    A database that is down at startup does not stop the API: the pool is
    opened lazily on the first fetch, and until then dashboard sections
    report the source as unavailable.
    """
    # Startup
    logger.info("Publication Analytics API starting")
    try:
        await init_db()
        logger.info("Publication log pool ready")
    except Exception as e:
        logger.error(f"Publication log database unreachable at startup: {e}")

    yield

    # Shutdown
    logger.info("Publication Analytics API shutting down")
    try:
        await close_db()
        logger.info("Publication log pool closed")
    except Exception as e:
        logger.error(f"Failed to close publication log pool: {e}")


# Create FastAPI application
app = FastAPI(
    title="Publication Analytics API",
    version=__version__,
    description=(
        "Aggregation backend for the publication dashboard. "
        "Provides volume metrics, daily evolution, client ranking, "
        "hourly and weekly distribution, vehicle analysis and the detailed table."
    ),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routers
app.include_router(api_router)


@app.get("/health")
async def health_check():
    """Liveness probe; does not touch the database."""
    return {"status": "healthy"}


@app.get("/")
async def root():
    """Service name, version and documentation links."""
    return {
        "name": "Publication Analytics API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Local development server
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "publication_analytics.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
