# src/datafix/core/models/__init__.py
"""
Domain models for the application.

These are pure data classes representing the core domain entities.
Rows coming back from Supabase are parsed with ``from_dict``; parsing
enforces the enumerated status, priority, side and role values, so a model
instance never carries a value outside its fixed set.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional


class TicketStatus(str, Enum):
    """Ticket workflow statuses."""
    OPEN = "open"
    PENDING = "PENDING"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"

    @property
    def is_initial(self) -> bool:
        return self in INITIAL_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


INITIAL_STATUSES = frozenset({TicketStatus.OPEN, TicketStatus.PENDING})
TERMINAL_STATUSES = frozenset({TicketStatus.RESOLVED, TicketStatus.REJECTED})
DEFAULT_STATUS = TicketStatus.OPEN


class Priority(IntEnum):
    """Ticket priority; lower number is more urgent."""
    HIGH = 1
    MEDIUM = 2
    LOW = 3


DEFAULT_PRIORITY = Priority.MEDIUM

# Name of the catch-all feature whose tickets carry a free-text feature.
OTHER_FEATURE_NAME = "Lainnya"


class UserRole(str, Enum):
    """Profile roles."""
    REQUESTER = "requester"
    ADMIN = "admin"


class DetailSide(str, Enum):
    """Which side of a correction a detail line records."""
    WRONG = "wrong"
    EXPECTED = "expected"


def _clean(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp as returned by Supabase."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass
class Branch:
    """Organizational location/unit."""
    id: str
    name: str = ""
    is_active: bool = True
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Branch"]:
        if not data:
            return None
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            is_active=data.get("is_active", True),
            created_at=data.get("created_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _clean(self.__dict__.copy())


@dataclass
class Feature:
    """Product area the incorrect data pertains to."""
    id: str
    name: str = ""
    is_active: bool = True
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Feature"]:
        if not data:
            return None
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            is_active=data.get("is_active", True),
            created_at=data.get("created_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _clean(self.__dict__.copy())


@dataclass
class Profile:
    """A user's role/identity record, one per authenticated user."""
    id: str
    full_name: str = ""
    display_name: Optional[str] = None
    email: Optional[str] = None
    # Joined profiles (reporter/assignee) are fetched without the role column.
    role: Optional[UserRole] = None
    branch_id: Optional[str] = None
    created_at: Optional[str] = None
    branch: Optional[Branch] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Profile"]:
        if not data:
            return None
        role = data.get("role")
        return cls(
            id=data.get("id"),
            full_name=data.get("full_name") or "",
            display_name=data.get("display_name"),
            email=data.get("email"),
            role=UserRole(role) if role else None,
            branch_id=data.get("branch_id"),
            created_at=data.get("created_at"),
            branch=Branch.from_dict(data.get("branch")),
        )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_requester(self) -> bool:
        return self.role == UserRole.REQUESTER

    @property
    def greeting_name(self) -> str:
        """Name shown in the dashboard welcome line."""
        return self.display_name or self.full_name or self.email or "User"

    def to_dict(self) -> Dict[str, Any]:
        d = self.__dict__.copy()
        d["role"] = _enum_value(self.role)
        d["branch"] = self.branch.to_dict() if self.branch else None
        return _clean(d)


@dataclass
class DetailLine:
    """One wrong/expected item-name/value pair attached to a ticket."""
    id: Optional[str]
    ticket_id: str
    side: DetailSide
    item_name: str
    value: Optional[str] = None
    note: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DetailLine":
        return cls(
            id=data.get("id"),
            ticket_id=data.get("ticket_id"),
            side=DetailSide(data["side"]),
            item_name=data.get("item_name", ""),
            value=data.get("value"),
            note=data.get("note"),
            created_at=data.get("created_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d = self.__dict__.copy()
        d["side"] = self.side.value
        return _clean(d)


@dataclass
class DetailLineDraft:
    """A detail line before it has been stored."""
    side: DetailSide
    item_name: str
    value: Optional[str] = None
    note: Optional[str] = None

    def to_row(self, ticket_id: str) -> Dict[str, Any]:
        return _clean({
            "ticket_id": ticket_id,
            "side": self.side.value,
            "item_name": self.item_name,
            "value": self.value,
            "note": self.note,
        })


@dataclass
class Attachment:
    """Reference to a stored screenshot."""
    id: Optional[str]
    ticket_id: str
    file_path: str
    file_name: Optional[str] = None
    mime_type: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Attachment":
        return cls(
            id=data.get("id"),
            ticket_id=data.get("ticket_id"),
            file_path=data.get("file_path", ""),
            file_name=data.get("file_name"),
            mime_type=data.get("mime_type"),
            created_at=data.get("created_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _clean(self.__dict__.copy())


@dataclass
class AttachmentUpload:
    """A screenshot file as received from the submission form."""
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        if "." not in self.filename:
            return "bin"
        return self.filename.rsplit(".", 1)[1].lower()

    @property
    def is_image(self) -> bool:
        return (self.content_type or "").startswith("image/")


@dataclass
class StatusHistory:
    """Backend-written record of one status transition."""
    id: Optional[str]
    ticket_id: str
    to_status: Optional[TicketStatus] = None
    from_status: Optional[TicketStatus] = None
    changed_by: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StatusHistory":
        from_status = data.get("from_status")
        to_status = data.get("to_status")
        return cls(
            id=data.get("id"),
            ticket_id=data.get("ticket_id"),
            from_status=TicketStatus(from_status) if from_status else None,
            to_status=TicketStatus(to_status) if to_status else None,
            changed_by=data.get("changed_by"),
            created_at=data.get("created_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d = self.__dict__.copy()
        d["from_status"] = _enum_value(self.from_status)
        d["to_status"] = _enum_value(self.to_status)
        return _clean(d)


@dataclass
class Ticket:
    """A reported data-correction request."""
    id: str
    wrong_input_date: Optional[str] = None
    issue_type: str = ""
    branch_id: Optional[str] = None
    description: str = ""
    status: TicketStatus = DEFAULT_STATUS
    priority: Priority = DEFAULT_PRIORITY
    reporter_user_id: Optional[str] = None
    reporter_name: Optional[str] = None
    feature_id: Optional[str] = None
    feature_other: Optional[str] = None
    inputter_name: Optional[str] = None
    fix_description: Optional[str] = None
    assigned_to: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    # Relations
    branch: Optional[Branch] = None
    feature: Optional[Feature] = None
    reporter: Optional[Profile] = None
    assignee: Optional[Profile] = None
    attachments: List[Attachment] = field(default_factory=list)
    detail_lines: List[DetailLine] = field(default_factory=list)
    status_history: List[StatusHistory] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ticket":
        """Parse a ticket row; raises ValueError on an unknown status or priority."""
        priority = data.get("priority")
        return cls(
            id=data.get("id"),
            wrong_input_date=data.get("wrong_input_date"),
            issue_type=data.get("issue_type") or "",
            branch_id=data.get("branch_id"),
            description=data.get("description") or "",
            status=TicketStatus(data.get("status") or DEFAULT_STATUS.value),
            priority=Priority(int(priority)) if priority is not None else DEFAULT_PRIORITY,
            reporter_user_id=data.get("reporter_user_id"),
            reporter_name=data.get("reporter_name"),
            feature_id=data.get("feature_id"),
            feature_other=data.get("feature_other"),
            inputter_name=data.get("inputter_name"),
            fix_description=data.get("fix_description"),
            assigned_to=data.get("assigned_to"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            branch=Branch.from_dict(data.get("branch")),
            feature=Feature.from_dict(data.get("feature")),
            reporter=Profile.from_dict(data.get("reporter")),
            assignee=Profile.from_dict(data.get("assignee")),
            attachments=[Attachment.from_dict(a) for a in data.get("attachments") or []],
            detail_lines=[DetailLine.from_dict(d) for d in data.get("detail_lines") or []],
            status_history=[StatusHistory.from_dict(h) for h in data.get("status_history") or []],
        )

    @property
    def created_datetime(self) -> Optional[datetime]:
        return parse_timestamp(self.created_at)

    def effective_feature_name(self, other_feature_name: str = OTHER_FEATURE_NAME) -> Optional[str]:
        """
        Feature name as shown to users.

        The catch-all feature ("Lainnya") is replaced by the free-text
        ``feature_other``; with no linked feature the free text is used.
        """
        if self.feature and self.feature.name:
            if self.feature.name == other_feature_name and self.feature_other:
                return self.feature_other
            return self.feature.name
        return self.feature_other or None

    @property
    def reporter_display(self) -> str:
        if self.reporter and self.reporter.full_name:
            return self.reporter.full_name
        return self.reporter_name or "-"

    @property
    def assignee_display(self) -> str:
        if self.assignee and self.assignee.full_name:
            return self.assignee.full_name
        return self.assigned_to or "Unassigned"

    def lines_for(self, side: DetailSide) -> List[DetailLine]:
        return [line for line in self.detail_lines if line.side == side]

    def to_dict(self) -> Dict[str, Any]:
        d = {
            k: v for k, v in self.__dict__.items()
            if k not in ("branch", "feature", "reporter", "assignee",
                         "attachments", "detail_lines", "status_history")
        }
        d["status"] = self.status.value
        d["priority"] = int(self.priority)
        d["branch"] = self.branch.to_dict() if self.branch else None
        d["feature"] = self.feature.to_dict() if self.feature else None
        d["reporter"] = self.reporter.to_dict() if self.reporter else None
        d["assignee"] = self.assignee.to_dict() if self.assignee else None
        d["attachments"] = [a.to_dict() for a in self.attachments]
        d["detail_lines"] = [line.to_dict() for line in self.detail_lines]
        d["status_history"] = [h.to_dict() for h in self.status_history]
        d["feature_name"] = self.effective_feature_name()
        d["reporter_display"] = self.reporter_display
        d["assignee_display"] = self.assignee_display
        return d


@dataclass
class TicketDraft:
    """Payload for creating a ticket."""
    wrong_input_date: str
    issue_type: str
    branch_id: str
    description: str
    feature_id: Optional[str] = None
    feature_other: Optional[str] = None
    inputter_name: Optional[str] = None
    reporter_user_id: Optional[str] = None
    reporter_name: Optional[str] = None
    priority: Optional[int] = None
    status: Optional[TicketStatus] = None

    def to_row(self) -> Dict[str, Any]:
        d = self.__dict__.copy()
        d["status"] = _enum_value(self.status)
        d["priority"] = int(self.priority) if self.priority is not None else None
        return _clean(d)


@dataclass
class TicketFilters:
    """Server-side equality filters for listing tickets."""
    status: Optional[TicketStatus] = None
    branch_id: Optional[str] = None
    assigned_to: Optional[str] = None
    reporter_user_id: Optional[str] = None

    def to_eq_filters(self) -> Dict[str, Any]:
        return _clean({
            "status": _enum_value(self.status),
            "branch_id": self.branch_id,
            "assigned_to": self.assigned_to,
            "reporter_user_id": self.reporter_user_id,
        })


@dataclass
class TicketStats:
    """Ticket counts per status bucket; ``total`` is always their sum."""
    pending: int = 0
    in_progress: int = 0
    resolved: int = 0
    rejected: int = 0

    @property
    def total(self) -> int:
        return self.pending + self.in_progress + self.resolved + self.rejected

    @property
    def active(self) -> int:
        return self.pending + self.in_progress

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TicketStats":
        data = data or {}
        return cls(
            pending=int(data.get("pending_tickets") or 0),
            in_progress=int(data.get("in_progress_tickets") or 0),
            resolved=int(data.get("resolved_tickets") or 0),
            rejected=int(data.get("rejected_tickets") or 0),
        )

    @classmethod
    def from_tickets(cls, tickets: List[Ticket]) -> "TicketStats":
        stats = cls()
        for ticket in tickets:
            if ticket.status.is_initial:
                stats.pending += 1
            elif ticket.status == TicketStatus.IN_PROGRESS:
                stats.in_progress += 1
            elif ticket.status == TicketStatus.RESOLVED:
                stats.resolved += 1
            elif ticket.status == TicketStatus.REJECTED:
                stats.rejected += 1
        return stats

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_tickets": self.total,
            "pending_tickets": self.pending,
            "in_progress_tickets": self.in_progress,
            "resolved_tickets": self.resolved,
            "rejected_tickets": self.rejected,
        }


__all__ = [
    "TicketStatus",
    "INITIAL_STATUSES",
    "TERMINAL_STATUSES",
    "DEFAULT_STATUS",
    "Priority",
    "DEFAULT_PRIORITY",
    "OTHER_FEATURE_NAME",
    "UserRole",
    "DetailSide",
    "parse_timestamp",
    "Branch",
    "Feature",
    "Profile",
    "DetailLine",
    "DetailLineDraft",
    "Attachment",
    "AttachmentUpload",
    "StatusHistory",
    "Ticket",
    "TicketDraft",
    "TicketFilters",
    "TicketStats",
]
