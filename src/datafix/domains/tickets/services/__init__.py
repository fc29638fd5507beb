# src/datafix/domains/tickets/services/__init__.py
"""
Tickets Domain Services

View models and business logic for creating, listing and resolving tickets.
"""

from .workflow_service import WorkflowService, POLICY_OPEN, POLICY_STRICT
from .submission_service import (
    DetailLineInput,
    SubmissionResult,
    TicketForm,
    TicketSubmissionService,
    merge_detail_lines,
)
from .list_service import TicketListView
from .detail_service import TicketDetailView

__all__ = [
    "WorkflowService",
    "POLICY_OPEN",
    "POLICY_STRICT",
    "DetailLineInput",
    "SubmissionResult",
    "TicketForm",
    "TicketSubmissionService",
    "merge_detail_lines",
    "TicketListView",
    "TicketDetailView",
]
