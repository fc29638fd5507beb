# src/datafix/repositories/master_data.py
"""
Master Data Repository

Read-only lookups for the reference lists that populate selection inputs:
active branches (alphabetical) and active features (creation order).
"""

import logging
from typing import List

from ..core.models import Branch, Feature
from .base import SupabaseRepositoryMixin

logger = logging.getLogger(__name__)


class SupabaseMasterDataRepository(SupabaseRepositoryMixin):
    """Supabase adapter for branches and features."""

    def get_branches(self) -> List[Branch]:
        """Active branches ordered by name."""
        query = (
            self._table(self.tables.branches)
            .select("*")
            .eq("is_active", True)
            .order("name")
        )
        result = self._execute(query, "get branches")
        return [Branch.from_dict(row) for row in result.data or []]

    def get_features(self) -> List[Feature]:
        """Active features in insertion order."""
        query = (
            self._table(self.tables.features)
            .select("*")
            .eq("is_active", True)
            .order("created_at")
        )
        result = self._execute(query, "get features")
        return [Feature.from_dict(row) for row in result.data or []]
