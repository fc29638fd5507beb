# src/datafix/domains/users/api/__init__.py
"""
Users API Router
"""

from fastapi import APIRouter

from .profiles import router as profiles_router

router = APIRouter(tags=["users"])

router.include_router(profiles_router, prefix="/api/users")

__all__ = ["router"]
