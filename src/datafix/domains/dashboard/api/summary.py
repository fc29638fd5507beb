# src/datafix/domains/dashboard/api/summary.py
"""
Dashboard Summary API

Headline numbers, recent activity and (for admins) the charts.
"""

import logging

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from ....api.deps import get_current_session
from ....api.responses import success_response
from ....auth.session import UserSession
from ..services.analytics import DashboardView

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def get_dashboard(session: UserSession = Depends(get_current_session)):
    """Everything the dashboard page shows for the current session."""
    view = await run_in_threadpool(DashboardView(session).load)
    return success_response(view.to_dict())
