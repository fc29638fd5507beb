# src/datafix/domains/tickets/services/detail_service.py
"""
Ticket Detail View

One ticket with its detail lines, screenshots and status history. Admins may
change the status and record how the data was fixed; everyone else gets a
read-only view.
"""

import logging
from typing import Any, Dict, List, Optional

from ....auth.permissions import Capability, can, require
from ....auth.session import UserSession
from ....core.errors import NotFoundError, ValidationError
from ....core.models import DetailLine, DetailSide, Ticket, TicketStatus
from ....utils.formatters import format_date, get_status_label
from .list_service import ticket_summary
from .workflow_service import WorkflowService

logger = logging.getLogger(__name__)


class TicketDetailView:
    """
    State behind the ticket detail page.

    ``not_found`` is set instead of raising when the ticket does not exist
    (or belongs to someone else and the session may only see its own).
    """

    def __init__(self, session: UserSession, ticket_id: str, tickets=None, config=None, workflow=None):
        self.session = session
        self.ticket_id = ticket_id
        self._repo = tickets
        self._config = config
        self._workflow = workflow
        self.ticket: Optional[Ticket] = None
        self.not_found = False

    @property
    def repo(self):
        if self._repo is None:
            from ....repositories import get_ticket_repository
            self._repo = get_ticket_repository()
        return self._repo

    @property
    def config(self):
        if self._config is None:
            from ....config import get_config
            self._config = get_config()
        return self._config

    @property
    def workflow(self) -> WorkflowService:
        if self._workflow is None:
            self._workflow = WorkflowService(self.config.tickets.transition_policy)
        return self._workflow

    @property
    def can_edit(self) -> bool:
        """Status and fix-description controls are offered only when True."""
        return can(self.session, Capability.EDIT_TICKET)

    def load(self) -> Optional[Ticket]:
        try:
            ticket = self.repo.get_by_id(self.ticket_id)
        except NotFoundError:
            ticket = None

        if ticket is not None and not self._visible(ticket):
            logger.info(f"User {self.session.user_id} may not view ticket {self.ticket_id}")
            ticket = None

        self.ticket = ticket
        self.not_found = ticket is None
        return ticket

    def _visible(self, ticket: Ticket) -> bool:
        if can(self.session, Capability.VIEW_ALL_TICKETS):
            return True
        return ticket.reporter_user_id == self.session.user_id

    # -------------------------------------------------------------------------
    # Derived data
    # -------------------------------------------------------------------------

    def lines(self, side: DetailSide) -> List[DetailLine]:
        return self.ticket.lines_for(side) if self.ticket else []

    def first_line(self, side: DetailSide) -> Optional[DetailLine]:
        """Headline of the wrong or correct column."""
        lines = self.lines(side)
        return lines[0] if lines else None

    def available_statuses(self) -> List[TicketStatus]:
        if not self.ticket or not self.can_edit:
            return []
        return self.workflow.get_available_transitions(self.ticket.status)

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def save(self, status: Optional[str] = None, fix_description: Optional[str] = None) -> Ticket:
        """Write the admin's status and fix description, then reload."""
        require(self.session, Capability.EDIT_TICKET, "Only admins can update tickets")

        fields: Dict[str, Any] = {}
        if status is not None:
            fields["status"] = status
        if fix_description is not None:
            fields["fix_description"] = fix_description
        if not fields:
            raise ValidationError("Nothing to update")

        self.repo.update(self.ticket_id, fields)
        logger.info(f"Ticket {self.ticket_id} saved by {self.session.user_id}")

        ticket = self.load()
        if ticket is None:
            raise NotFoundError("Ticket", self.ticket_id)
        return ticket

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        if self.ticket is None:
            return {"not_found": True, "message": "Ticket not found"}

        other = self.config.tickets.other_feature_name
        wrong = self.first_line(DetailSide.WRONG)
        expected = self.first_line(DetailSide.EXPECTED)
        return {
            "not_found": False,
            "ticket": self.ticket.to_dict(),
            "summary": ticket_summary(self.ticket, other),
            "wrong_description": wrong.to_dict() if wrong else None,
            "expected_description": expected.to_dict() if expected else None,
            "wrong_lines": [line.to_dict() for line in self.lines(DetailSide.WRONG)],
            "expected_lines": [line.to_dict() for line in self.lines(DetailSide.EXPECTED)],
            "history": [
                {
                    "from_status": h.from_status.value if h.from_status else None,
                    "to_status": h.to_status.value if h.to_status else None,
                    "to_label": get_status_label(h.to_status) if h.to_status else None,
                    "changed_by": h.changed_by,
                    "created_display": format_date(h.created_at),
                }
                for h in self.ticket.status_history
            ],
            "can_edit": self.can_edit,
            "available_statuses": [
                {"value": s.value, "label": get_status_label(s)} for s in self.available_statuses()
            ],
        }
