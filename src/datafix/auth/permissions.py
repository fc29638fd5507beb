# src/datafix/auth/permissions.py
"""
Role-based capabilities.

Every view and route asks the same question, ``can(session, capability)``,
instead of comparing role strings. ``ViewPermissions`` is the per-session
snapshot of those answers, computed once when the session is built.
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional

from ..core.errors import PermissionDeniedError
from ..core.models import Profile, UserRole


class Capability(str, Enum):
    """Actions gated by role."""
    CREATE_TICKET = "create_ticket"
    VIEW_ALL_TICKETS = "view_all_tickets"
    EDIT_TICKET = "edit_ticket"
    ASSIGN_TICKET = "assign_ticket"
    DELETE_TICKET = "delete_ticket"
    VIEW_ANALYTICS = "view_analytics"
    MANAGE_USERS = "manage_users"


ROLE_CAPABILITIES = {
    UserRole.ADMIN: frozenset(Capability),
    UserRole.REQUESTER: frozenset({Capability.CREATE_TICKET}),
}


def capabilities_for(profile: Optional[Profile]) -> FrozenSet[Capability]:
    """Capabilities granted by a profile's role; none without a profile."""
    if profile is None or profile.role is None:
        return frozenset()
    return ROLE_CAPABILITIES.get(profile.role, frozenset())


def _profile_of(subject) -> Optional[Profile]:
    if subject is None or isinstance(subject, Profile):
        return subject
    return getattr(subject, "profile", None)


def can(subject, capability: Capability) -> bool:
    """
    Check a capability.

    Args:
        subject: a UserSession, a Profile, or None
        capability: the action being attempted
    """
    return capability in capabilities_for(_profile_of(subject))


def require(subject, capability: Capability, message: Optional[str] = None) -> None:
    """Raise PermissionDeniedError unless ``subject`` has ``capability``."""
    if not can(subject, capability):
        raise PermissionDeniedError(message or f"Permission denied: {capability.value}")


@dataclass(frozen=True)
class ViewPermissions:
    """What the UI may offer a session; computed once per session."""
    can_create_ticket: bool = False
    can_view_all_tickets: bool = False
    can_edit_ticket: bool = False
    can_assign_ticket: bool = False
    can_delete_ticket: bool = False
    can_view_analytics: bool = False
    can_manage_users: bool = False

    @classmethod
    def for_profile(cls, profile: Optional[Profile]) -> "ViewPermissions":
        granted = capabilities_for(profile)
        return cls(**{f"can_{cap.value}": cap in granted for cap in Capability})

    def to_dict(self):
        return dict(self.__dict__)
