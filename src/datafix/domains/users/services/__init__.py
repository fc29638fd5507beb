# src/datafix/domains/users/services/__init__.py
"""
Users Domain Services
"""

from .user_management import UNSET_BRANCH_LABEL, UserManagementView, branch_label, role_counts

__all__ = [
    "UNSET_BRANCH_LABEL",
    "UserManagementView",
    "branch_label",
    "role_counts",
]
