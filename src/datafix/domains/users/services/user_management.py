# src/datafix/domains/users/services/user_management.py
"""
User Management View

Admin-only listing and editing of profiles. Accounts themselves are created
in Supabase Auth; this view only edits name, role and branch assignment.
"""

import logging
from typing import Any, Dict, List, Optional

from ....auth.permissions import Capability, require
from ....auth.session import UserSession
from ....core.models import Branch, Profile, UserRole
from ....utils.formatters import format_date_short

logger = logging.getLogger(__name__)

UNSET_BRANCH_LABEL = "Belum Set"


def role_counts(profiles: List[Profile]) -> Dict[str, int]:
    """Number of admins, requesters and profiles overall."""
    return {
        "admin": sum(1 for p in profiles if p.role == UserRole.ADMIN),
        "requester": sum(1 for p in profiles if p.role == UserRole.REQUESTER),
        "total": len(profiles),
    }


def branch_label(profile: Profile) -> str:
    return profile.branch.name if profile.branch and profile.branch.name else UNSET_BRANCH_LABEL


class UserManagementView:
    """Profiles plus the branch list used by the edit form."""

    def __init__(self, session: UserSession, users=None, master_data=None):
        require(session, Capability.MANAGE_USERS, "Only admins can manage users")
        self.session = session
        self._users = users
        self._master_data = master_data
        self.profiles: List[Profile] = []
        self.branches: List[Branch] = []

    @property
    def users(self):
        if self._users is None:
            from ....repositories import get_user_repository
            self._users = get_user_repository()
        return self._users

    @property
    def master_data(self):
        if self._master_data is None:
            from ....repositories import get_master_data_repository
            self._master_data = get_master_data_repository()
        return self._master_data

    def load(self) -> "UserManagementView":
        self.profiles = self.users.list_profiles()
        self.branches = self.master_data.get_branches()
        return self

    def save(
        self,
        user_id: str,
        full_name: Optional[str] = None,
        role: Optional[str] = None,
        branch_id: Optional[str] = None,
    ) -> Profile:
        """Update one profile, then reload the list."""
        profile = self.users.update_profile(user_id, full_name=full_name, role=role, branch_id=branch_id)
        logger.info(f"Profile {user_id} updated by {self.session.user_id}")
        self.load()
        return profile

    def to_dict(self) -> Dict[str, Any]:
        return {
            "users": [
                dict(p.to_dict(), branch_label=branch_label(p), joined=format_date_short(p.created_at))
                for p in self.profiles
            ],
            "branches": [b.to_dict() for b in self.branches],
            "counts": role_counts(self.profiles),
        }
