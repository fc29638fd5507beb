# src/datafix/utils/formatters.py
"""
Display formatting for dates, statuses and priorities.
"""

from datetime import datetime, timezone
from typing import Optional, Union

from ..core.models import Priority, TicketStatus, parse_timestamp

DateLike = Union[str, datetime]

STATUS_LABELS = {
    TicketStatus.OPEN: "Open",
    TicketStatus.PENDING: "Pending",
    TicketStatus.IN_PROGRESS: "In Progress",
    TicketStatus.RESOLVED: "Resolved",
    TicketStatus.REJECTED: "Rejected",
}

STATUS_COLORS = {
    TicketStatus.OPEN: "orange",
    TicketStatus.PENDING: "orange",
    TicketStatus.IN_PROGRESS: "blue",
    TicketStatus.RESOLVED: "green",
    TicketStatus.REJECTED: "red",
}

PRIORITY_LABELS = {
    Priority.HIGH: "High",
    Priority.MEDIUM: "Medium",
    Priority.LOW: "Low",
}

PRIORITY_COLORS = {
    Priority.HIGH: "red",
    Priority.MEDIUM: "orange",
    Priority.LOW: "green",
}


def _to_datetime(value: DateLike) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    return parse_timestamp(value)


def format_date(value: DateLike) -> str:
    """e.g. ``05 Jan 2026 14:30``"""
    dt = _to_datetime(value)
    return dt.strftime("%d %b %Y %H:%M") if dt else "-"


def format_date_short(value: DateLike) -> str:
    """e.g. ``05 Jan 2026``"""
    dt = _to_datetime(value)
    return dt.strftime("%d %b %Y") if dt else "-"


def format_relative_time(value: DateLike, now: Optional[datetime] = None) -> str:
    """Coarse "time ago" string, e.g. ``3 hours ago``."""
    dt = _to_datetime(value)
    if dt is None:
        return "-"
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds = int((now - dt).total_seconds())
    if seconds < 0:
        return "just now"

    for unit, size in (("year", 31536000), ("month", 2592000), ("day", 86400), ("hour", 3600), ("minute", 60)):
        if seconds >= size:
            count = seconds // size
            return f"{count} {unit}{'s' if count != 1 else ''} ago"
    return "just now"


def get_status_label(status: Union[str, TicketStatus]) -> str:
    try:
        return STATUS_LABELS[TicketStatus(status)]
    except ValueError:
        return str(status)


def get_status_color(status: Union[str, TicketStatus]) -> str:
    try:
        return STATUS_COLORS[TicketStatus(status)]
    except ValueError:
        return "gray"


def get_priority_label(priority: Union[int, Priority]) -> str:
    try:
        return PRIORITY_LABELS[Priority(int(priority))]
    except (TypeError, ValueError):
        return "Unknown"


def get_priority_color(priority: Union[int, Priority]) -> str:
    try:
        return PRIORITY_COLORS[Priority(int(priority))]
    except (TypeError, ValueError):
        return "gray"


def truncate_text(text: str, max_length: int) -> str:
    if not text or len(text) <= max_length:
        return text
    return text[:max_length] + "..."
