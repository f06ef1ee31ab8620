"""
Backend API package initialization.

This package contains the FastAPI router modules of the publication analytics
service:
- dashboard: Composite dashboard, single-view aggregations, client list and
  the detailed table
"""

from fastapi import APIRouter

from publication_analytics.api.dashboard import router as dashboard_router

# Create main API router
api_router = APIRouter()

api_router.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])

__all__ = [
    "api_router",
    "dashboard_router",
]
