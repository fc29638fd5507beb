# src/datafix/core/__init__.py
"""
Core domain layer - models, errors and port interfaces.

Following Ports and Adapters (Hexagonal Architecture):
- Ports are the interfaces that define how the domain interacts with the outside world
- Adapters are the concrete implementations of those ports
"""

from .errors import (
    AuthenticationError,
    BackendError,
    DataFixError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from .models import (
    Branch,
    DetailLine,
    Feature,
    Profile,
    Ticket,
    TicketStats,
    TicketStatus,
)
from .ports import StoragePort

__all__ = [
    # Errors
    "DataFixError",
    "ValidationError",
    "InvalidTransitionError",
    "NotFoundError",
    "PermissionDeniedError",
    "AuthenticationError",
    "BackendError",
    # Models
    "Branch",
    "DetailLine",
    "Feature",
    "Profile",
    "Ticket",
    "TicketStats",
    "TicketStatus",
    # Ports
    "StoragePort",
]
