# src/datafix/domains/tickets/api/crud.py
"""
Ticket CRUD API Routes

List, read, update and delete tickets, plus status counts.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict

from ....api.deps import get_current_session
from ....api.responses import list_response, success_response
from ....auth.permissions import Capability, can, require
from ....auth.session import UserSession
from ....core.errors import NotFoundError
from ....core.models import TicketFilters
from ....repositories import get_ticket_repository
from ..services.detail_service import TicketDetailView
from ..services.list_service import TicketListView, ticket_summary

logger = logging.getLogger(__name__)

router = APIRouter()


class TicketUpdate(BaseModel):
    """Admin edit form: new status and/or how the data was fixed."""
    model_config = ConfigDict(extra="forbid")

    status: Optional[str] = None
    fix_description: Optional[str] = None


@router.get("")
def list_tickets(
    status: Optional[str] = Query(None),
    branch_id: Optional[str] = Query(None),
    assigned_to: Optional[str] = Query(None),
    q: Optional[str] = Query(None),
    priority: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    session: UserSession = Depends(get_current_session),
):
    """List visible tickets, newest first, with search, filters and pagination."""
    view = TicketListView(session)
    view.set_filters(search=q, status=status, priority=priority)
    view.load(TicketFilters(status=view.status_filter, branch_id=branch_id, assigned_to=assigned_to))

    other = view.config.tickets.other_feature_name
    return list_response(
        items=[ticket_summary(t, other) for t in view.page(page)],
        total=len(view.filtered()),
        page=page,
        page_size=view.page_size,
    )


@router.get("/stats")
def ticket_stats(session: UserSession = Depends(get_current_session)):
    """Ticket counts per status; requesters get counts over their own tickets."""
    if can(session, Capability.VIEW_ALL_TICKETS):
        stats = get_ticket_repository().get_stats()
    else:
        view = TicketListView(session)
        view.load()
        stats = view.stats
    return success_response(stats.to_dict())


@router.get("/{ticket_id}")
def get_ticket(ticket_id: str, session: UserSession = Depends(get_current_session)):
    """Get a ticket with its detail lines, screenshots and history."""
    view = TicketDetailView(session, ticket_id)
    view.load()
    if view.not_found:
        raise NotFoundError("Ticket", ticket_id)
    return success_response(view.to_dict())


@router.patch("/{ticket_id}")
def update_ticket(ticket_id: str, body: TicketUpdate, session: UserSession = Depends(get_current_session)):
    """Update status and/or fix description (admins only)."""
    view = TicketDetailView(session, ticket_id)
    view.save(status=body.status, fix_description=body.fix_description)
    return success_response(view.to_dict())


@router.delete("/{ticket_id}")
def delete_ticket(ticket_id: str, session: UserSession = Depends(get_current_session)):
    """Permanently delete a ticket (admins only)."""
    require(session, Capability.DELETE_TICKET, "Only admins can delete tickets")
    get_ticket_repository().delete(ticket_id)
    logger.info(f"Ticket {ticket_id} deleted by {session.user_id}")
    return success_response({"deleted": ticket_id})
