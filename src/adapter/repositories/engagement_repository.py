"""SQLAlchemy implementation of EngagementRepository"""

from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.engagement_repository import EngagementRepository
from src.domain.engagement import Engagement, EngagementStatus, EngagementType


class SqlAlchemyEngagementRepository(EngagementRepository):
    """
    SQLAlchemy implementation of EngagementRepository

    Active retainers are returned in a stable order (start date, then id)
    so credit package attribution does not depend on insertion order.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, engagement_id: str) -> Optional[Engagement]:
        stmt = select(Engagement).where(Engagement.id == engagement_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_ids(self, engagement_ids: List[str]) -> List[Engagement]:
        if not engagement_ids:
            return []
        stmt = select(Engagement).where(Engagement.id.in_(engagement_ids))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_active_retainers(self) -> List[Engagement]:
        stmt = (
            select(Engagement)
            .where(Engagement.status == EngagementStatus.ACTIVE)
            .where(Engagement.type == EngagementType.RETAINER)
            .order_by(Engagement.start_date, Engagement.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
