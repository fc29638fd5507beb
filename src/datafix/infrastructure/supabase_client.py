# src/datafix/infrastructure/supabase_client.py
"""
Supabase Client

Provides the Supabase client used for every backend operation:
- Table queries against the ticket, master-data and profile tables
- The ``get_ticket_stats`` RPC
- Storage uploads for ticket screenshots
- Email/password authentication

Usage:
    from .supabase_client import get_supabase_client

    client = get_supabase_client()
    result = client.table("datafix_tickets").select("*").execute()
"""

import logging
from typing import Optional

from supabase import Client, create_client

from ..config import get_config

logger = logging.getLogger(__name__)

# Singleton client
_supabase_client: Optional[Client] = None


def create_supabase_client() -> Optional[Client]:
    """
    Create a fresh, unshared Supabase client.

    Used wherever a client must carry its own auth session (sign-in), so that
    one user's session never leaks into the shared singleton.

    Returns:
        Supabase client or None if not configured
    """
    settings = get_config().supabase

    if not settings.url or not settings.key:
        logger.warning("Supabase not configured (missing SUPABASE_URL or SUPABASE_KEY)")
        return None

    try:
        client = create_client(settings.url, settings.key)
    except Exception as e:
        logger.error(f"Failed to connect to Supabase: {e}")
        return None

    logger.info(f"Connected to Supabase: {settings.url}")
    return client


def get_supabase_client() -> Optional[Client]:
    """
    Get the Supabase client singleton.

    Returns:
        Supabase client or None if not configured
    """
    global _supabase_client

    if _supabase_client is None:
        _supabase_client = create_supabase_client()
    return _supabase_client


def reset_supabase_client():
    """Forget the cached singleton (config reloads, tests)."""
    global _supabase_client
    _supabase_client = None
