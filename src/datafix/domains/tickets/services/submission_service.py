# src/datafix/domains/tickets/services/submission_service.py
"""
Ticket Submission Service

Backs the ticket creation form. Validation happens entirely before the first
backend call; the writes then run as a small saga:

1. create the ticket row
2. insert the merged detail lines; on failure the ticket is deleted again
3. upload each screenshot in turn; failures are collected and reported in
   the result instead of being dropped
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from ....auth.permissions import Capability, require
from ....auth.session import UserSession
from ....core.errors import BackendError, DataFixError, ValidationError
from ....core.models import (
    DEFAULT_STATUS,
    Attachment,
    AttachmentUpload,
    DetailLine,
    DetailLineDraft,
    DetailSide,
    Priority,
    Ticket,
    TicketDraft,
)

logger = logging.getLogger(__name__)

TICKET_LIST_PATH = "/tickets"


@dataclass
class DetailLineInput:
    """One row of the wrong/correct tables as typed by the user."""
    item_name: str = ""
    value: str = ""

    @property
    def is_filled(self) -> bool:
        return bool((self.item_name or "").strip() and (self.value or "").strip())


@dataclass
class TicketForm:
    """State of the ticket creation form."""
    wrong_input_date: str = ""
    issue_type: str = ""
    branch_id: str = ""
    feature_id: str = ""
    feature_other: str = ""
    inputter_name: str = ""
    description: str = ""
    priority: int = int(Priority.MEDIUM)
    wrong_lines: List[DetailLineInput] = field(default_factory=lambda: [DetailLineInput()])
    correct_lines: List[DetailLineInput] = field(default_factory=lambda: [DetailLineInput()])

    def add_row(self):
        """Append an empty row to both the wrong and the correct table."""
        self.wrong_lines.append(DetailLineInput())
        self.correct_lines.append(DetailLineInput())

    def validate(self) -> None:
        """Check required fields; raises ValidationError listing every problem."""
        field_errors = []
        for name in ("wrong_input_date", "issue_type", "branch_id", "description"):
            if not (getattr(self, name) or "").strip():
                field_errors.append({"field": name, "message": f"{name} is required", "code": "required"})
        if not (self.feature_id or "").strip() and not (self.feature_other or "").strip():
            field_errors.append({"field": "feature_id", "message": "feature_id or feature_other is required", "code": "required"})
        try:
            Priority(int(self.priority))
        except (TypeError, ValueError):
            field_errors.append({"field": "priority", "message": "Priority must be 1, 2 or 3", "code": "invalid"})

        if field_errors:
            raise ValidationError("Please complete the required fields", field_errors=field_errors)

    def to_draft(self, reporter_user_id: Optional[str]) -> TicketDraft:
        return TicketDraft(
            wrong_input_date=self.wrong_input_date,
            issue_type=self.issue_type,
            branch_id=self.branch_id,
            description=self.description,
            feature_id=self.feature_id or None,
            feature_other=self.feature_other or None,
            inputter_name=self.inputter_name or None,
            reporter_user_id=reporter_user_id,
            priority=int(self.priority),
            status=DEFAULT_STATUS,
        )


def merge_detail_lines(
    wrong_lines: Iterable[DetailLineInput],
    correct_lines: Iterable[DetailLineInput],
) -> List[DetailLineDraft]:
    """
    Merge the parallel wrong/correct tables into detail-line drafts.

    Rows are visited by index; at each index the wrong entry comes before the
    correct one. An entry is kept only when both its item name and value are
    non-blank.
    """
    wrong_lines = list(wrong_lines)
    correct_lines = list(correct_lines)
    drafts: List[DetailLineDraft] = []

    for index in range(max(len(wrong_lines), len(correct_lines))):
        for side, lines in ((DetailSide.WRONG, wrong_lines), (DetailSide.EXPECTED, correct_lines)):
            if index < len(lines) and lines[index].is_filled:
                drafts.append(DetailLineDraft(side=side, item_name=lines[index].item_name, value=lines[index].value))
    return drafts


def check_screenshot(upload: AttachmentUpload, max_bytes: int) -> Optional[str]:
    """Reason a screenshot is unacceptable, or None when it is fine."""
    if not upload.is_image:
        return f"{upload.filename}: only image files are allowed"
    if upload.size > max_bytes:
        return f"{upload.filename}: larger than {max_bytes // (1024 * 1024)} MB"
    return None


@dataclass
class SubmissionResult:
    """Outcome of a successful submission."""
    ticket: Ticket
    detail_lines: List[DetailLine] = field(default_factory=list)
    attachments: List[Attachment] = field(default_factory=list)
    failed_uploads: List[str] = field(default_factory=list)
    redirect_to: str = TICKET_LIST_PATH
    redirect_after: float = 2.0

    @property
    def complete(self) -> bool:
        """False when some screenshots could not be stored."""
        return not self.failed_uploads

    @property
    def message(self) -> str:
        if self.complete:
            return "Ticket submitted"
        return f"Ticket submitted, but {len(self.failed_uploads)} screenshot(s) could not be uploaded"

    def to_dict(self):
        return {
            "ticket": self.ticket.to_dict(),
            "detail_lines": [line.to_dict() for line in self.detail_lines],
            "attachments": [a.to_dict() for a in self.attachments],
            "failed_uploads": list(self.failed_uploads),
            "complete": self.complete,
            "message": self.message,
            "redirect_to": self.redirect_to,
            "redirect_after": self.redirect_after,
        }


class TicketSubmissionService:
    """Runs the ticket creation protocol for one session."""

    def __init__(self, session: UserSession, tickets=None, config=None):
        self.session = session
        self._tickets = tickets
        self._config = config

    @property
    def tickets(self):
        if self._tickets is None:
            from ....repositories import get_ticket_repository
            self._tickets = get_ticket_repository()
        return self._tickets

    @property
    def config(self):
        if self._config is None:
            from ....config import get_config
            self._config = get_config()
        return self._config

    def validate(self, form: TicketForm, screenshots: List[AttachmentUpload]) -> List[DetailLineDraft]:
        """
        Every check that needs no backend call.

        Returns:
            The merged detail-line drafts
        """
        if not screenshots:
            raise ValidationError.for_field("screenshots", "At least one screenshot of the wrong data is required", "required")

        max_bytes = self.config.tickets.max_attachment_bytes
        problems = [reason for reason in (check_screenshot(s, max_bytes) for s in screenshots) if reason]
        if problems:
            raise ValidationError(
                "Only images up to the size limit are allowed",
                field_errors=[{"field": "screenshots", "message": p, "code": "invalid"} for p in problems],
            )

        form.validate()

        drafts = merge_detail_lines(form.wrong_lines, form.correct_lines)
        if not drafts:
            raise ValidationError.for_field(
                "detail_lines", "At least one detail line needs both an item name and a value", "required"
            )
        return drafts

    def submit(self, form: TicketForm, screenshots: List[AttachmentUpload]) -> SubmissionResult:
        """
        Validate, then create the ticket, its detail lines and its screenshots.

        Raises:
            PermissionDeniedError: session may not create tickets
            ValidationError: form incomplete; nothing was written
            BackendError: ticket or detail-line write failed; nothing is left behind
        """
        require(self.session, Capability.CREATE_TICKET)
        drafts = self.validate(form, screenshots)

        ticket = self.tickets.create(form.to_draft(self.session.user_id))

        try:
            lines = self.tickets.add_detail_lines(ticket.id, drafts)
        except DataFixError as e:
            self._discard(ticket)
            raise BackendError(f"Failed to save detail lines: {e.message}", detail=e.detail) from e

        attachments: List[Attachment] = []
        failed: List[str] = []
        for upload in screenshots:
            try:
                attachments.append(self.tickets.upload_attachment(ticket.id, upload))
            except DataFixError as e:
                logger.warning(f"Screenshot {upload.filename} for ticket {ticket.id} not stored: {e.message}")
                failed.append(upload.filename)

        if failed:
            logger.warning(f"Ticket {ticket.id} submitted with {len(failed)} missing screenshot(s)")
        else:
            logger.info(f"Ticket {ticket.id} submitted with {len(lines)} detail line(s), {len(attachments)} screenshot(s)")

        return SubmissionResult(
            ticket=ticket,
            detail_lines=lines,
            attachments=attachments,
            failed_uploads=failed,
            redirect_after=self.config.tickets.redirect_delay_seconds,
        )

    def _discard(self, ticket: Ticket):
        """Compensation: remove a ticket whose detail lines could not be stored."""
        try:
            self.tickets.delete(ticket.id)
            logger.warning(f"Rolled back ticket {ticket.id} after detail-line failure")
        except DataFixError as e:
            logger.error(f"Could not roll back ticket {ticket.id}; it remains without detail lines: {e.message}")
