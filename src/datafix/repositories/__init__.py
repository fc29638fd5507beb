# src/datafix/repositories/__init__.py
"""
Repository Layer - Ports and Adapters Pattern

The only components that talk to the backend. Views and routes obtain them
through the factories below so tests can swap the Supabase client.

Usage:
    from src.datafix.repositories import get_ticket_repository

    tickets_repo = get_ticket_repository()
    tickets = tickets_repo.list()
    ticket = tickets_repo.get_by_id("uuid")
"""

from .base import BaseRepository, SupabaseRepositoryMixin
from .master_data import SupabaseMasterDataRepository
from .tickets import SupabaseTicketRepository, TicketRepository
from .users import SupabaseUserRepository


def get_ticket_repository() -> TicketRepository:
    """Get the ticket repository."""
    return SupabaseTicketRepository()


def get_master_data_repository() -> SupabaseMasterDataRepository:
    """Get the branch/feature lookup repository."""
    return SupabaseMasterDataRepository()


def get_user_repository() -> SupabaseUserRepository:
    """Get the profile repository."""
    return SupabaseUserRepository()


__all__ = [
    # Base
    "BaseRepository",
    "SupabaseRepositoryMixin",
    # Tickets
    "TicketRepository",
    "SupabaseTicketRepository",
    "get_ticket_repository",
    # Master data
    "SupabaseMasterDataRepository",
    "get_master_data_repository",
    # Users
    "SupabaseUserRepository",
    "get_user_repository",
]
