"""SQLAlchemy implementation of EngagementServiceRepository"""

from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.engagement_service_repository import EngagementServiceRepository
from src.domain.engagement_service import BillingType, EngagementService, OneOffInvoicingStatus


class SqlAlchemyEngagementServiceRepository(EngagementServiceRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, service_id: str) -> Optional[EngagementService]:
        stmt = select(EngagementService).where(EngagementService.id == service_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_engagement(self, engagement_id: str) -> List[EngagementService]:
        """
        List all services of an engagement

        Args:
            engagement_id: Engagement identifier

        Returns:
            Services ordered by creation time, then id
        """
        stmt = (
            select(EngagementService)
            .where(EngagementService.engagement_id == engagement_id)
            .order_by(EngagementService.created_at, EngagementService.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_unbilled_one_offs(self) -> List[EngagementService]:
        stmt = (
            select(EngagementService)
            .where(EngagementService.billing_type == BillingType.ONE_OFF)
            .where(EngagementService.invoicing_status == OneOffInvoicingStatus.PENDING)
            .where(EngagementService.is_active == True)  # noqa: E712
            .order_by(EngagementService.created_at, EngagementService.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, service: EngagementService) -> EngagementService:
        self.session.add(service)
        await self.session.flush()
        await self.session.refresh(service)
        return service
