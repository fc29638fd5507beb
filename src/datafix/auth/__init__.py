# src/datafix/auth/__init__.py
"""
Authentication and authorization.

- session: SessionHolder lifecycle owner, UserSession value object
- permissions: capability checks shared by every view and route
"""

from .permissions import Capability, ViewPermissions, can, require
from .session import SessionHolder, SignInResult, UserSession, resolve_session

__all__ = [
    "Capability",
    "ViewPermissions",
    "can",
    "require",
    "SessionHolder",
    "SignInResult",
    "UserSession",
    "resolve_session",
]
