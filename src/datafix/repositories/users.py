# src/datafix/repositories/users.py
"""
User Repository

Lists and updates user profiles. Role permission for edits is checked by the
calling view, not here.
"""

import logging
from typing import Any, Dict, List, Optional

from ..core.errors import NotFoundError, ValidationError
from ..core.models import Profile, UserRole
from .base import SupabaseRepositoryMixin

logger = logging.getLogger(__name__)

PROFILE_FIELDS = frozenset({"full_name", "display_name", "role", "branch_id"})


class SupabaseUserRepository(SupabaseRepositoryMixin):
    """Supabase adapter for the profiles table."""

    def _select(self) -> str:
        return f"id, full_name, display_name, email, role, created_at, branch_id, branch:{self.tables.branches}(*)"

    def list_profiles(self) -> List[Profile]:
        """All profiles joined with their branch, newest first."""
        query = (
            self._table(self.tables.profiles)
            .select(self._select())
            .order("created_at", desc=True)
        )
        result = self._execute(query, "list profiles")
        return [Profile.from_dict(row) for row in result.data or []]

    def get_profile(self, user_id: str) -> Profile:
        """Profile for an authenticated user id."""
        query = self._table(self.tables.profiles).select(self._select()).eq("id", user_id)
        result = self._execute(query, f"load profile {user_id}")

        if not result.data:
            raise NotFoundError("Profile", user_id)
        return Profile.from_dict(result.data[0])

    def update_profile(
        self,
        user_id: str,
        full_name: Optional[str] = None,
        role: Optional[Any] = None,
        branch_id: Optional[str] = None,
        **extra: Any,
    ) -> Profile:
        """Update a profile's name, role and branch assignment."""
        updates: Dict[str, Any] = {k: v for k, v in extra.items() if k in PROFILE_FIELDS}
        if full_name is not None:
            if not full_name.strip():
                raise ValidationError.for_field("full_name", "Full name cannot be empty", "required")
            updates["full_name"] = full_name.strip()
        if role is not None:
            try:
                updates["role"] = UserRole(role).value
            except ValueError:
                raise ValidationError.for_field("role", "Role must be admin or requester")
        if branch_id is not None:
            # Empty string clears the assignment.
            updates["branch_id"] = branch_id or None

        if not updates:
            raise ValidationError("Nothing to update")

        query = self._table(self.tables.profiles).update(updates).eq("id", user_id)
        result = self._execute(query, f"update profile {user_id}")

        if not result.data:
            raise NotFoundError("Profile", user_id)
        logger.info(f"Updated profile {user_id}: {sorted(updates)}")
        return Profile.from_dict(result.data[0])
