"""SQLAlchemy implementation of ClientRepository"""

from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.client_repository import ClientRepository
from src.domain.client import Client


class SqlAlchemyClientRepository(ClientRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, client_id: str) -> Optional[Client]:
        stmt = select(Client).where(Client.id == client_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_ids(self, client_ids: List[str]) -> List[Client]:
        if not client_ids:
            return []
        stmt = select(Client).where(Client.id.in_(client_ids))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
