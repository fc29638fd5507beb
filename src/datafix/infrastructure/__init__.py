# src/datafix/infrastructure/__init__.py
"""
Infrastructure - connections to external services (Supabase).
"""

from .supabase_client import create_supabase_client, get_supabase_client, reset_supabase_client

__all__ = [
    "create_supabase_client",
    "get_supabase_client",
    "reset_supabase_client",
]
