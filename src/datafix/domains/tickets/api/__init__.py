# src/datafix/domains/tickets/api/__init__.py
"""
Tickets Domain API Routes

Aggregates all ticket sub-routers into a single router for main.py.
"""

from fastapi import APIRouter

from .crud import router as crud_router
from .submit import router as submit_router
from .assignment import router as assignment_router

TICKETS_PREFIX = "/api/tickets"

# Create the aggregated tickets router
router = APIRouter(tags=["tickets"])

# Sub-routers declare collection routes as "", so the prefix goes on each include
router.include_router(submit_router, prefix=TICKETS_PREFIX, tags=["tickets-submit"])
router.include_router(crud_router, prefix=TICKETS_PREFIX, tags=["tickets-crud"])
router.include_router(assignment_router, prefix=TICKETS_PREFIX, tags=["tickets-assignment"])

__all__ = ["router"]
