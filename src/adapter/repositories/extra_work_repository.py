"""SQLAlchemy implementation of ExtraWorkRepository"""

from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.extra_work_repository import ExtraWorkRepository
from src.domain.extra_work import ExtraWork, ExtraWorkStatus
from src.domain.invoice import billing_period_of


class SqlAlchemyExtraWorkRepository(ExtraWorkRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, extra_work_id: str) -> Optional[ExtraWork]:
        stmt = select(ExtraWork).where(ExtraWork.id == extra_work_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_ready_to_invoice(self, year: int, month: int) -> List[ExtraWork]:
        """
        List extra work ready to be billed in the given month

        Args:
            year: Billing year
            month: Billing month (1-12)

        Returns:
            Items ordered by work date, then id
        """
        stmt = (
            select(ExtraWork)
            .where(ExtraWork.status == ExtraWorkStatus.READY_TO_INVOICE)
            .where(ExtraWork.billing_period == billing_period_of(year, month))
            .order_by(ExtraWork.work_date, ExtraWork.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, extra_work: ExtraWork) -> ExtraWork:
        self.session.add(extra_work)
        await self.session.flush()
        await self.session.refresh(extra_work)
        return extra_work
