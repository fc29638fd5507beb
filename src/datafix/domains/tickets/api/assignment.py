# src/datafix/domains/tickets/api/assignment.py
"""
Ticket Assignment API Routes
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ....api.deps import get_current_session
from ....api.responses import success_response
from ....auth.session import UserSession
from ..services.list_service import TicketListView, ticket_summary

logger = logging.getLogger(__name__)

router = APIRouter()


class AssigneeUpdate(BaseModel):
    assigned_to: Optional[str] = None


@router.put("/{ticket_id}/assignee")
def reassign_ticket(ticket_id: str, body: AssigneeUpdate, session: UserSession = Depends(get_current_session)):
    """Set or clear a ticket's assignee (admins only)."""
    view = TicketListView(session)
    view.load()
    ticket = view.reassign(ticket_id, body.assigned_to)
    return success_response(ticket_summary(ticket, view.config.tickets.other_feature_name))
