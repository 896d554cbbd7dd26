"""SQLAlchemy implementation of CreditPackageRepository"""

from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.credit_package_repository import CreditPackageRepository
from src.domain.credit_package import CreditPackageMonth


class SqlAlchemyCreditPackageRepository(CreditPackageRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_for_client_month(
        self, client_id: str, year: int, month: int
    ) -> Optional[CreditPackageMonth]:
        stmt = (
            select(CreditPackageMonth)
            .where(CreditPackageMonth.client_id == client_id)
            .where(CreditPackageMonth.year == year)
            .where(CreditPackageMonth.month == month)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_month(self, year: int, month: int) -> List[CreditPackageMonth]:
        stmt = (
            select(CreditPackageMonth)
            .where(CreditPackageMonth.year == year)
            .where(CreditPackageMonth.month == month)
            .order_by(CreditPackageMonth.client_id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
