# src/datafix/domains/users/api/profiles.py
"""
User Management API Routes

Admin-only profile listing and editing.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ....api.deps import get_current_session
from ....api.responses import success_response
from ....auth.session import UserSession
from ..services.user_management import UserManagementView

logger = logging.getLogger(__name__)

router = APIRouter()


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    role: Optional[str] = None
    # Empty string clears the branch assignment.
    branch_id: Optional[str] = None


@router.get("")
def list_users(session: UserSession = Depends(get_current_session)):
    """All profiles with branch, role counts and the branch list for the edit form."""
    view = UserManagementView(session).load()
    return success_response(view.to_dict())


@router.patch("/{user_id}")
def update_user(user_id: str, body: ProfileUpdate, session: UserSession = Depends(get_current_session)):
    """Change a user's name, role or branch."""
    view = UserManagementView(session)
    profile = view.save(user_id, full_name=body.full_name, role=body.role, branch_id=body.branch_id)
    return success_response(profile.to_dict())
