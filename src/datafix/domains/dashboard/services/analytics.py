# src/datafix/domains/dashboard/services/analytics.py
"""
Dashboard Analytics

Pure functions over ticket lists (trend, feature distribution, headline
rates) plus ``DashboardView``, which loads the data for one session.
"""

import logging
from collections import Counter
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from ....auth.permissions import Capability, can
from ....auth.session import UserSession
from ....core.models import OTHER_FEATURE_NAME, Ticket, TicketFilters, TicketStats, TicketStatus
from ...tickets.services.list_service import ticket_summary

logger = logging.getLogger(__name__)

FALLBACK_FEATURE_NAME = "Others"
CLOSED_STATUSES = frozenset({TicketStatus.RESOLVED, TicketStatus.REJECTED})


def _shift_month(year: int, month: int, offset: int):
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def trend_data(tickets: List[Ticket], today: Optional[date] = None, months: int = 3) -> List[Dict[str, Any]]:
    """
    Monthly ticket counts, oldest month first, ending with the current month.

    ``masuk`` counts tickets created in the month; ``selesai`` counts those
    among them that are now resolved or rejected. Always ``months`` entries.
    """
    today = today or datetime.now(timezone.utc).date()
    buckets = []
    for offset in range(months - 1, -1, -1):
        year, month = _shift_month(today.year, today.month, -offset)
        buckets.append({
            "key": (year, month),
            "month": date(year, month, 1).strftime("%b"),
            "year": year,
            "masuk": 0,
            "selesai": 0,
        })
    by_key = {b["key"]: b for b in buckets}

    for ticket in tickets:
        created = ticket.created_datetime
        if created is None:
            continue
        bucket = by_key.get((created.year, created.month))
        if bucket is None:
            continue
        bucket["masuk"] += 1
        if ticket.status in CLOSED_STATUSES:
            bucket["selesai"] += 1

    for bucket in buckets:
        del bucket["key"]
    return buckets


def feature_distribution(
    tickets: List[Ticket],
    top: int = 4,
    other_feature_name: str = OTHER_FEATURE_NAME,
) -> List[Dict[str, Any]]:
    """Tickets per effective feature name, largest first, limited to ``top``."""
    counts = Counter(
        ticket.effective_feature_name(other_feature_name) or FALLBACK_FEATURE_NAME
        for ticket in tickets
    )
    # Counter.most_common keeps first-seen order among equal counts.
    return [{"name": name, "value": value} for name, value in counts.most_common(top)]


def success_rate(stats: TicketStats) -> str:
    """Resolved share of all tickets, as a percentage with one decimal."""
    if not stats.total:
        return "0.0"
    return f"{stats.resolved / stats.total * 100:.1f}"


class DashboardView:
    """
    Data behind the dashboard page.

    Admins get backend-wide statistics and the charts; requesters get counts
    over their own tickets only.
    """

    def __init__(self, session: UserSession, tickets=None, config=None):
        self.session = session
        self._repo = tickets
        self._config = config
        self.stats = TicketStats()
        self.tickets: List[Ticket] = []

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
    def shows_analytics(self) -> bool:
        return can(self.session, Capability.VIEW_ANALYTICS)

    def load(self) -> "DashboardView":
        if can(self.session, Capability.VIEW_ALL_TICKETS):
            self.tickets = self.repo.list()
            self.stats = self.repo.get_stats()
        else:
            self.tickets = self.repo.list(TicketFilters(reporter_user_id=self.session.user_id))
            self.stats = TicketStats.from_tickets(self.tickets)
        logger.debug(f"Dashboard loaded for {self.session.user_id}: {self.stats.total} tickets")
        return self

    def recent_activity(self) -> List[Ticket]:
        return self.tickets[:self.config.tickets.recent_limit]

    def to_dict(self, today: Optional[date] = None) -> Dict[str, Any]:
        settings = self.config.tickets
        data = {
            "welcome_name": self.session.display_name,
            "stats": self.stats.to_dict(),
            "active_requests": self.stats.active,
            "success_rate": success_rate(self.stats),
            "recent_activity": [ticket_summary(t, settings.other_feature_name) for t in self.recent_activity()],
            "permissions": self.session.permissions.to_dict(),
        }
        if self.shows_analytics:
            data["trend"] = trend_data(self.tickets, today, settings.trend_months)
            data["feature_distribution"] = feature_distribution(
                self.tickets, settings.top_features, settings.other_feature_name
            )
        return data
