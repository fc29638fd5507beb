# src/datafix/adapters/storage/__init__.py
from .supabase import SupabaseStorageAdapter

__all__ = ["SupabaseStorageAdapter"]
