"""SQLAlchemy Issued Invoice Repository Implementation

Implements the issuance ledger using SQLAlchemy async session.
"""

import re
from datetime import datetime
from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.issued_invoice_repository import IssuedInvoiceRepository
from src.domain.issued_invoice import IssuedInvoice


class SqlAlchemyIssuedInvoiceRepository(IssuedInvoiceRepository):
    """
    SQLAlchemy implementation of IssuedInvoiceRepository

    Uses async session for database operations. Entries are only ever
    inserted, plus the superseded_at stamp on reissue.
    """

    def __init__(self, session: AsyncSession, number_prefix: str = "FV"):
        self.session = session
        self.number_prefix = number_prefix

    async def add(self, issued_invoice: IssuedInvoice) -> IssuedInvoice:
        """
        Append an issued invoice to the ledger

        Args:
            issued_invoice: Entry to persist

        Returns:
            Persisted entry with generated ID and created_at
        """
        issued_invoice.created_at = datetime.utcnow()
        self.session.add(issued_invoice)
        await self.session.flush()
        await self.session.refresh(issued_invoice)
        return issued_invoice

    async def get_by_id(self, issued_invoice_id: int) -> Optional[IssuedInvoice]:
        stmt = select(IssuedInvoice).where(IssuedInvoice.id == issued_invoice_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_year(
        self, year: int, include_superseded: bool = True
    ) -> List[IssuedInvoice]:
        """
        Retrieve ledger entries of a billing year

        Args:
            year: Billing year
            include_superseded: Also return entries superseded by a reissue

        Returns:
            Entries, newest issued_at first
        """
        stmt = select(IssuedInvoice).where(IssuedInvoice.year == year)

        if not include_superseded:
            stmt = stmt.where(IssuedInvoice.superseded_at.is_(None))

        stmt = stmt.order_by(IssuedInvoice.issued_at.desc(), IssuedInvoice.id.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_years(self) -> List[int]:
        stmt = select(IssuedInvoice.year).distinct().order_by(IssuedInvoice.year.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_next_invoice_number(self, year: int) -> str:
        """
        Generate the next ledger invoice number

        Format: PREFIX-YYYY-NNN (e.g., FV-2024-001). Superseded entries keep
        their numbers, so they count towards the maximum.

        Returns:
            Next invoice number string
        """
        prefix = f"{self.number_prefix}-{year}-"
        pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")

        stmt = select(IssuedInvoice.internal_number).where(
            IssuedInvoice.internal_number.like(f"{prefix}%")
        )
        result = await self.session.execute(stmt)

        # Numeric max, string max breaks past 999
        sequence = 0
        for number in result.scalars().all():
            match = pattern.match(number)
            if match:
                sequence = max(sequence, int(match.group(1)))

        return f"{prefix}{sequence + 1:03d}"

    async def get_active_for_invoice(self, source_invoice_id: str) -> Optional[IssuedInvoice]:
        stmt = (
            select(IssuedInvoice)
            .where(IssuedInvoice.source_invoice_id == source_invoice_id)
            .where(IssuedInvoice.superseded_at.is_(None))
            .order_by(IssuedInvoice.issued_at.desc(), IssuedInvoice.id.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_superseded(
        self, issued_invoice: IssuedInvoice, superseded_at: datetime
    ) -> IssuedInvoice:
        issued_invoice.superseded_at = superseded_at
        self.session.add(issued_invoice)
        await self.session.flush()
        await self.session.refresh(issued_invoice)
        return issued_invoice
