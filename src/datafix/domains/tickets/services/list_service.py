# src/datafix/domains/tickets/services/list_service.py
"""
Ticket List View

Loads tickets for a session (admins see everything, requesters only their
own), applies the client-side search, status and priority filters, paginates,
and performs optimistic assignee changes.
"""

import logging
import math
from typing import Any, Dict, List, Optional

from ....auth.permissions import Capability, can, require
from ....auth.session import UserSession
from ....core.errors import DataFixError, NotFoundError, ValidationError
from ....core.models import Priority, Profile, Ticket, TicketFilters, TicketStats, TicketStatus
from ....utils.formatters import (
    format_date,
    format_relative_time,
    get_priority_color,
    get_priority_label,
    get_status_color,
    get_status_label,
    truncate_text,
)

logger = logging.getLogger(__name__)

DESCRIPTION_PREVIEW_LENGTH = 100


def ticket_summary(ticket: Ticket, other_feature_name: Optional[str] = None) -> Dict[str, Any]:
    """Row shown in ticket tables and the dashboard's recent activity."""
    feature_name = (
        ticket.effective_feature_name(other_feature_name)
        if other_feature_name
        else ticket.effective_feature_name()
    )
    return {
        "id": ticket.id,
        "short_id": (ticket.id or "")[:8],
        "feature_name": feature_name or "-",
        "issue_type": ticket.issue_type,
        "description": truncate_text(ticket.description, DESCRIPTION_PREVIEW_LENGTH),
        "branch_name": ticket.branch.name if ticket.branch else None,
        "status": ticket.status.value,
        "status_label": get_status_label(ticket.status),
        "status_color": get_status_color(ticket.status),
        "priority": int(ticket.priority),
        "priority_label": get_priority_label(ticket.priority),
        "priority_color": get_priority_color(ticket.priority),
        "reporter": ticket.reporter_display,
        "assigned_to": ticket.assigned_to,
        "assignee": ticket.assignee_display,
        "created_at": ticket.created_at,
        "created_display": format_date(ticket.created_at),
        "created_relative": format_relative_time(ticket.created_at),
    }


def matches_search(ticket: Ticket, term: str) -> bool:
    """Case-insensitive match on id, feature name, free-text feature and description."""
    term = (term or "").strip().lower()
    if not term:
        return True
    haystack = (
        ticket.id,
        ticket.feature.name if ticket.feature else None,
        ticket.feature_other,
        ticket.description,
    )
    return any(term in value.lower() for value in haystack if value)


class TicketListView:
    """
    State behind the ticket list page.

    Attributes:
        tickets: every ticket visible to the session, newest first
        stats: status counts over the visible tickets
        search, status_filter, priority_filter: client-side filters
        error: message of the last failed load, if any
    """

    def __init__(self, session: UserSession, tickets=None, config=None, users=None):
        self.session = session
        self._repo = tickets
        self._users = users
        self._config = config
        self.tickets: List[Ticket] = []
        self.stats = TicketStats()
        self.search = ""
        self.status_filter: Optional[TicketStatus] = None
        self.priority_filter: Optional[Priority] = None
        self.server_filters = TicketFilters()
        self.loading = False
        self.error: Optional[str] = None

    @property
    def repo(self):
        if self._repo is None:
            from ....repositories import get_ticket_repository
            self._repo = get_ticket_repository()
        return self._repo

    @property
    def users(self):
        if self._users is None:
            from ....repositories import get_user_repository
            self._users = get_user_repository()
        return self._users

    @property
    def config(self):
        if self._config is None:
            from ....config import get_config
            self._config = get_config()
        return self._config

    @property
    def page_size(self) -> int:
        return self.config.tickets.page_size

    @property
    def sees_all(self) -> bool:
        return can(self.session, Capability.VIEW_ALL_TICKETS)

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load(self, filters: Optional[TicketFilters] = None) -> List[Ticket]:
        """
        Fetch tickets from the backend.

        Requesters are always scoped to tickets they reported, whatever
        ``filters`` says.
        """
        if filters is not None:
            self.server_filters = filters
        effective = TicketFilters(**vars(self.server_filters))
        if not self.sees_all:
            effective.reporter_user_id = self.session.user_id

        self.loading = True
        self.error = None
        try:
            self.tickets = self.repo.list(effective)
            self.stats = TicketStats.from_tickets(self.tickets)
        except DataFixError as e:
            logger.error(f"Error loading tickets: {e.message}")
            self.error = e.message
            raise
        finally:
            self.loading = False
        return self.tickets

    # -------------------------------------------------------------------------
    # Filtering and pagination
    # -------------------------------------------------------------------------

    def set_filters(self, search: Optional[str] = None, status=None, priority=None):
        """Update client-side filters; ``None`` clears a filter."""
        try:
            status_filter = TicketStatus(status) if status else None
        except ValueError:
            raise ValidationError.for_field("status", f"Unknown status: {status}")
        try:
            priority_filter = Priority(int(priority)) if priority else None
        except (TypeError, ValueError):
            raise ValidationError.for_field("priority", "Priority must be 1, 2 or 3")

        self.search = search or ""
        self.status_filter = status_filter
        self.priority_filter = priority_filter

    def filtered(self) -> List[Ticket]:
        result = [t for t in self.tickets if matches_search(t, self.search)]
        if self.status_filter is not None:
            result = [t for t in result if t.status == self.status_filter]
        if self.priority_filter is not None:
            result = [t for t in result if t.priority == self.priority_filter]
        return result

    def total_pages(self) -> int:
        return max(1, math.ceil(len(self.filtered()) / self.page_size))

    def page(self, number: int = 1) -> List[Ticket]:
        """Tickets on a 1-based page of the filtered list."""
        number = max(1, number)
        start = (number - 1) * self.page_size
        return self.filtered()[start:start + self.page_size]

    # -------------------------------------------------------------------------
    # Reassignment
    # -------------------------------------------------------------------------

    def reassign(self, ticket_id: str, assignee_id: Optional[str], assignee: Optional[Profile] = None) -> Ticket:
        """
        Change a ticket's assignee.

        The assignee's profile is looked up unless given, so the row shows
        their name. The local list is then updated first. If the backend
        write fails the list is reloaded from the backend and the error is
        raised.
        """
        require(self.session, Capability.ASSIGN_TICKET)

        ticket = next((t for t in self.tickets if t.id == ticket_id), None)
        if ticket is None:
            raise NotFoundError("Ticket", ticket_id)
        if assignee_id and assignee is None:
            assignee = self.users.get_profile(assignee_id)

        ticket.assigned_to = assignee_id or None
        ticket.assignee = assignee if assignee_id else None

        try:
            self.repo.update(ticket_id, {"assigned_to": assignee_id or None})
        except DataFixError as e:
            logger.warning(f"Reassigning ticket {ticket_id} failed, reloading list: {e.message}")
            self.load()
            raise

        logger.info(f"Ticket {ticket_id} assigned to {assignee_id or 'nobody'}")
        return ticket

