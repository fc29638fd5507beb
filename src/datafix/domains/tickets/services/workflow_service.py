# src/datafix/domains/tickets/services/workflow_service.py
"""
Workflow Service

Business logic for ticket status transitions.

Two policies are supported:
- ``open``: any admin may set any status at any time (the default, matching
  the edit form which offers every status).
- ``strict``: open/pending -> in_progress -> resolved | rejected.
"""

import logging
from typing import List

from ....core.errors import InvalidTransitionError, ValidationError
from ....core.models import TicketStatus

logger = logging.getLogger(__name__)

POLICY_OPEN = "open"
POLICY_STRICT = "strict"

# Valid status transitions under the strict policy
STATUS_TRANSITIONS = {
    TicketStatus.OPEN: [TicketStatus.IN_PROGRESS],
    TicketStatus.PENDING: [TicketStatus.IN_PROGRESS],
    TicketStatus.IN_PROGRESS: [TicketStatus.RESOLVED, TicketStatus.REJECTED],
    TicketStatus.RESOLVED: [],
    TicketStatus.REJECTED: [],
}


class WorkflowService:
    """Service for checking ticket status transitions."""

    def __init__(self, policy: str = POLICY_OPEN):
        if policy not in (POLICY_OPEN, POLICY_STRICT):
            raise ValidationError.for_field("transition_policy", f"Unknown transition policy: {policy}")
        self.policy = policy

    @property
    def allows_any_transition(self) -> bool:
        return self.policy == POLICY_OPEN

    def can_transition(self, from_status: TicketStatus, to_status: TicketStatus) -> bool:
        """
        Check if a status transition is valid.

        Args:
            from_status: Current status
            to_status: Target status

        Returns:
            True if transition is allowed
        """
        if from_status == to_status or self.allows_any_transition:
            return True
        return to_status in STATUS_TRANSITIONS.get(from_status, [])

    def get_available_transitions(self, current_status: TicketStatus) -> List[TicketStatus]:
        """
        Get the statuses an admin may pick for a ticket in ``current_status``.

        Always includes the current status so an edit form can keep it.
        """
        if self.allows_any_transition:
            return list(TicketStatus)
        return [current_status] + STATUS_TRANSITIONS.get(current_status, [])

    def validate_transition(self, from_status: TicketStatus, to_status: TicketStatus) -> None:
        """Raise InvalidTransitionError when the policy forbids the change."""
        if not self.can_transition(from_status, to_status):
            logger.warning(f"Rejected status change {from_status.value} -> {to_status.value} ({self.policy} policy)")
            raise InvalidTransitionError(from_status.value, to_status.value)
