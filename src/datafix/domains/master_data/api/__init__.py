# src/datafix/domains/master_data/api/__init__.py
"""
Master Data API Router
"""

from fastapi import APIRouter

from .lookups import router as lookups_router

router = APIRouter(prefix="/api/master-data", tags=["master-data"])

router.include_router(lookups_router)

__all__ = ["router"]
