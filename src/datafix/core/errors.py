# src/datafix/core/errors.py
"""
Domain errors.

Every failure a view or route can surface is one of these. The API layer maps
them onto the standard error envelope in ``api/responses.py``.
"""

from typing import Any, Dict, List, Optional


class DataFixError(Exception):
    """Base class for all DataFix errors."""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(DataFixError):
    """Input rejected before any backend call."""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[List[Dict[str, str]]] = None,
        detail: Optional[str] = None,
    ):
        super().__init__(message, detail)
        self.field_errors = field_errors or []

    @classmethod
    def for_field(cls, field: str, message: str, code: str = "invalid") -> "ValidationError":
        return cls(message, field_errors=[{"field": field, "message": message, "code": code}])


class InvalidTransitionError(ValidationError):
    """Status change not allowed by the active transition policy."""

    def __init__(self, from_status: str, to_status: str):
        super().__init__(
            f"Cannot move ticket from {from_status} to {to_status}",
            field_errors=[{"field": "status", "message": f"{from_status} -> {to_status} not allowed", "code": "transition"}],
        )
        self.from_status = from_status
        self.to_status = to_status


class NotFoundError(DataFixError):
    """A requested row does not exist."""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(f"{resource} not found", f"No {resource.lower()} with identifier: {identifier}")
        self.resource = resource
        self.identifier = identifier


class PermissionDeniedError(DataFixError):
    """The current session lacks the capability for an action."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message)


class AuthenticationError(DataFixError):
    """Missing, invalid or expired credentials."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class BackendError(DataFixError):
    """A Supabase request failed or the backend is not configured."""
