"""Engagement Service Repository Interface

Access to services attached to engagements.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.engagement_service import EngagementService


class EngagementServiceRepository(ABC):
    """Repository interface for EngagementService persistence"""

    @abstractmethod
    async def get_by_id(self, service_id: str) -> Optional[EngagementService]:
        """
        Retrieve service by ID

        Args:
            service_id: Engagement service identifier

        Returns:
            EngagementService if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_for_engagement(self, engagement_id: str) -> List[EngagementService]:
        """
        List all services of an engagement (callers filter by billing type)

        Args:
            engagement_id: Engagement identifier

        Returns:
            List of services
        """
        pass

    @abstractmethod
    async def list_unbilled_one_offs(self) -> List[EngagementService]:
        """
        List one-off services waiting to be invoiced

        Returns:
            Active one_off services with invoicing_status=pending
        """
        pass

    @abstractmethod
    async def update(self, service: EngagementService) -> EngagementService:
        """
        Persist changes to a service

        Args:
            service: Service with updated values

        Returns:
            Updated service
        """
        pass
