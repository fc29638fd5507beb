# src/datafix/domains/dashboard/api/__init__.py
"""
Dashboard API Router

Combines all dashboard-related sub-routers.
"""

from fastapi import APIRouter

from .summary import router as summary_router

router = APIRouter(tags=["dashboard"])

router.include_router(summary_router, prefix="/api/dashboard")

__all__ = ["router"]
