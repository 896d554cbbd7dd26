"""Engagement Repository Interface

Read access to engagements (contracts) held by the CRM store.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.engagement import Engagement


class EngagementRepository(ABC):
    """Repository interface for Engagement lookups"""

    @abstractmethod
    async def get_by_id(self, engagement_id: str) -> Optional[Engagement]:
        """
        Retrieve engagement by ID

        Args:
            engagement_id: Engagement identifier

        Returns:
            Engagement if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_ids(self, engagement_ids: List[str]) -> List[Engagement]:
        """
        Retrieve several engagements at once

        Args:
            engagement_ids: Engagement identifiers (unknown ids are skipped)

        Returns:
            List of found engagements
        """
        pass

    @abstractmethod
    async def list_active_retainers(self) -> List[Engagement]:
        """
        List engagements that take part in monthly invoicing

        Returns:
            Engagements with status=active and type=retainer, ordered by
            start date then id (assembly order is significant)
        """
        pass
