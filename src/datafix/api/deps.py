# src/datafix/api/deps.py
"""
Shared route dependencies.
"""

from fastapi import Request

from ..auth.session import UserSession
from ..core.errors import AuthenticationError


def get_current_session(request: Request) -> UserSession:
    """Session resolved by AuthMiddleware for this request."""
    session = getattr(request.state, "session", None)
    if session is None:
        raise AuthenticationError()
    return session
