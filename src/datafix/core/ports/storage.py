# src/datafix/core/ports/storage.py
"""
Storage Port Interface

Abstract interface for file storage operations.
Implementations:
- SupabaseStorageAdapter (production)
"""

from abc import ABC, abstractmethod
from typing import Optional, Dict, Any


class StoragePort(ABC):
    """
    Abstract port interface for file storage operations.

    All storage adapters must implement this interface.
    """

    @abstractmethod
    def upload_file(
        self,
        file_content: bytes,
        path: str,
        bucket: str,
        content_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Upload a file to storage.

        Args:
            file_content: Raw file bytes
            path: Object key within the bucket
            bucket: Storage bucket name
            content_type: MIME type of the file

        Returns:
            Dict with 'url', 'path', 'bucket' and 'size'

        Raises:
            BackendError: if the upload fails
        """
        pass

    @abstractmethod
    def get_public_url(self, path: str, bucket: str) -> Optional[str]:
        """
        Get a public URL for a file.

        Args:
            path: Object key within the bucket
            bucket: Storage bucket name

        Returns:
            Public URL string, or None if not available
        """
        pass

    @abstractmethod
    def delete_file(self, path: str, bucket: str) -> bool:
        """
        Delete a file from storage.

        Args:
            path: Object key within the bucket
            bucket: Storage bucket name

        Returns:
            True if deleted successfully
        """
        pass
