"""Integration tests for SqlAlchemyIssuedInvoiceRepository"""

import pytest
from datetime import datetime
from decimal import Decimal

from src.adapter.repositories import SqlAlchemyIssuedInvoiceRepository
from src.domain.issued_invoice import IssuedInvoice


def entry(number, year=2024, source_invoice_id="inv-eng-1-2024-1", issued_at=None):
    return IssuedInvoice(
        source_invoice_id=source_invoice_id,
        engagement_id="eng-1",
        engagement_name="Správa sociálních sítí",
        client_id="client-1",
        client_name="Kavárna",
        year=year,
        month=1,
        internal_number=number,
        external_number=f"{year}-1001",
        line_items=[{"id": "li-svc-1-2024-1", "final_amount": "50000"}],
        total_amount=Decimal("50000"),
        issued_at=issued_at or datetime(year, 2, 1),
    )


@pytest.mark.asyncio
class TestIssuedInvoiceNumbering:
    async def test_first_number_of_year(self, db_session):
        repo = SqlAlchemyIssuedInvoiceRepository(db_session)

        assert await repo.get_next_invoice_number(2024) == "FV-2024-001"

    async def test_numbers_are_scoped_by_year(self, db_session):
        repo = SqlAlchemyIssuedInvoiceRepository(db_session)
        await repo.add(entry("FV-2023-007", year=2023))
        await repo.add(entry("FV-2024-001"))
        await db_session.commit()

        assert await repo.get_next_invoice_number(2024) == "FV-2024-002"
        assert await repo.get_next_invoice_number(2023) == "FV-2023-008"

    async def test_sequence_is_numeric_past_999(self, db_session):
        repo = SqlAlchemyIssuedInvoiceRepository(db_session)
        await repo.add(entry("FV-2024-999"))
        await repo.add(entry("FV-2024-1000"))
        await db_session.commit()

        assert await repo.get_next_invoice_number(2024) == "FV-2024-1001"

    async def test_custom_prefix(self, db_session):
        repo = SqlAlchemyIssuedInvoiceRepository(db_session, number_prefix="AG")
        await repo.add(entry("FV-2024-005"))
        await db_session.commit()

        assert await repo.get_next_invoice_number(2024) == "AG-2024-001"


@pytest.mark.asyncio
class TestIssuedInvoiceLedger:
    async def test_add_assigns_id_and_created_at(self, db_session):
        repo = SqlAlchemyIssuedInvoiceRepository(db_session)

        saved = await repo.add(entry("FV-2024-001"))

        assert saved.id is not None
        assert saved.created_at is not None
        assert saved.line_items[0]["id"] == "li-svc-1-2024-1"

    async def test_superseded_entries(self, db_session):
        repo = SqlAlchemyIssuedInvoiceRepository(db_session)
        first = await repo.add(entry("FV-2024-001", issued_at=datetime(2024, 2, 1)))
        await repo.add(entry("FV-2024-002", source_invoice_id="inv-eng-2-2024-1", issued_at=datetime(2024, 2, 2)))

        await repo.mark_superseded(first, datetime(2024, 2, 3))
        await db_session.commit()

        assert await repo.get_active_for_invoice("inv-eng-1-2024-1") is None
        all_entries = await repo.get_by_year(2024)
        active = await repo.get_by_year(2024, include_superseded=False)
        assert [e.internal_number for e in all_entries] == ["FV-2024-002", "FV-2024-001"]
        assert [e.internal_number for e in active] == ["FV-2024-002"]
        assert (await repo.get_by_id(first.id)).is_superseded

    async def test_list_years(self, db_session):
        repo = SqlAlchemyIssuedInvoiceRepository(db_session)
        await repo.add(entry("FV-2023-001", year=2023))
        await repo.add(entry("FV-2024-001"))
        await repo.add(entry("FV-2024-002"))
        await db_session.commit()

        assert await repo.list_years() == [2024, 2023]
