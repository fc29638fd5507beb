# src/datafix/repositories/base.py
"""
Base Repository - Abstract Interface (Port)

Defines the contract that all repository implementations must follow,
plus the shared plumbing for the Supabase adapters.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, TypeVar

from ..core.errors import BackendError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository defining the interface for read/write data access.

    This is the PORT that defines what operations are available.
    Concrete implementations (adapters) provide the actual behavior.
    """

    @abstractmethod
    def list(self, filters: Optional[Any] = None) -> List[T]:
        """
        List entities, optionally filtered.

        Args:
            filters: Repository-specific filter object

        Returns:
            List of entities
        """
        pass

    @abstractmethod
    def get_by_id(self, entity_id: str) -> T:
        """
        Get a single entity by its ID.

        Raises:
            NotFoundError: if no row matches
        """
        pass

    @abstractmethod
    def create(self, data: Any) -> T:
        """Create a new entity and return it as stored."""
        pass

    @abstractmethod
    def update(self, entity_id: str, data: Dict[str, Any]) -> T:
        """Apply a partial update and return the updated entity."""
        pass

    @abstractmethod
    def delete(self, entity_id: str) -> None:
        """Permanently delete an entity."""
        pass


class SupabaseRepositoryMixin:
    """
    Shared Supabase plumbing: lazy client, config and error wrapping.

    Every failed request is logged and re-raised as BackendError so callers
    only ever deal with domain errors.
    """

    def __init__(self, client=None, config=None):
        self._client = client
        self._config = config

    @property
    def client(self):
        """Lazy-load Supabase client."""
        if self._client is None:
            from ..infrastructure.supabase_client import get_supabase_client
            self._client = get_supabase_client()
        return self._client

    @property
    def config(self):
        if self._config is None:
            from ..config import get_config
            self._config = get_config()
        return self._config

    @property
    def tables(self):
        return self.config.tables

    def _table(self, name: str):
        if not self.client:
            logger.warning("Supabase not available")
            raise BackendError("Supabase not available")
        return self.client.table(name)

    def _execute(self, query, action: str):
        """Run a built query; wrap any failure in BackendError."""
        try:
            return query.execute()
        except Exception as e:
            logger.error(f"Failed to {action}: {e}")
            raise BackendError(f"Failed to {action}", detail=str(e)) from e
