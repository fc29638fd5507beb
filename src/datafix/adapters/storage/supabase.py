# src/datafix/adapters/storage/supabase.py
"""
Supabase Storage Adapter

Implements StoragePort interface using Supabase Storage.
"""

import logging
from typing import Any, Dict, Optional

from ...core.errors import BackendError
from ...core.ports.storage import StoragePort

logger = logging.getLogger(__name__)


class SupabaseStorageAdapter(StoragePort):
    """
    Supabase implementation of StoragePort.

    Uses the shared Supabase client unless one is injected.
    """

    def __init__(self, client=None):
        self._client = client

    @property
    def client(self):
        """Lazy-load Supabase client."""
        if self._client is None:
            from ...infrastructure.supabase_client import get_supabase_client
            self._client = get_supabase_client()
        return self._client

    def _bucket(self, bucket: str):
        if not self.client:
            raise BackendError("Supabase Storage not available")
        return self.client.storage.from_(bucket)

    def upload_file(
        self,
        file_content: bytes,
        path: str,
        bucket: str,
        content_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Upload a file to Supabase Storage."""
        file_options = {}
        if content_type:
            file_options["content-type"] = content_type

        storage = self._bucket(bucket)
        try:
            storage.upload(path=path, file=file_content, file_options=file_options)
        except Exception as e:
            logger.error(f"Error uploading {path} to bucket {bucket}: {e}")
            raise BackendError(f"Failed to upload file: {e}") from e

        public_url = self.get_public_url(path, bucket)
        logger.info(f"Uploaded {path} to Supabase Storage ({len(file_content)} bytes)")

        return {
            "url": public_url,
            "path": path,
            "bucket": bucket,
            "size": len(file_content),
            "content_type": content_type,
        }

    def get_public_url(self, path: str, bucket: str) -> Optional[str]:
        """Get a public URL for a file."""
        try:
            url_data = self._bucket(bucket).get_public_url(path)
        except BackendError:
            raise
        except Exception as e:
            logger.error(f"Error getting public URL for {path}: {e}")
            return None
        # Older storage clients return {"publicUrl": ...}
        return url_data if isinstance(url_data, str) else url_data.get("publicUrl")

    def delete_file(self, path: str, bucket: str) -> bool:
        """Delete a file from Supabase Storage."""
        try:
            self._bucket(bucket).remove([path])
        except Exception as e:
            logger.error(f"Error deleting {path} from bucket {bucket}: {e}")
            return False
        logger.info(f"Deleted {path} from Supabase Storage")
        return True
