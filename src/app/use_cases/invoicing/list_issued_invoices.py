"""ListIssuedInvoices Use Case

Issued invoice history of a year, read from the ledger.
"""

from decimal import Decimal
from libs.result import Result, Return, Error
from src.app.repositories.issued_invoice_repository import IssuedInvoiceRepository
from .dtos import IssuedInvoiceDTO, IssuedInvoiceHistoryDTO


class ListIssuedInvoices:
    """
    Use Case: List issued invoices of a year

    Business Rules:
    1. Entries ordered by issued_at, newest first
    2. Superseded entries are listed with their marker
    3. count and total_amount cover active entries only
    4. available_years always contains the requested year
    """

    def __init__(self, issued_invoice_repo: IssuedInvoiceRepository):
        self.issued_invoice_repo = issued_invoice_repo

    async def execute(self, year: int) -> Result[IssuedInvoiceHistoryDTO]:
        try:
            entries = await self.issued_invoice_repo.get_by_year(year, include_superseded=True)
            years = await self.issued_invoice_repo.list_years()
            if year not in years:
                years = sorted(set(years) | {year}, reverse=True)

            active = [entry for entry in entries if not entry.is_superseded]

            return Return.ok(
                IssuedInvoiceHistoryDTO(
                    year=year,
                    count=len(active),
                    total_amount=sum((entry.total_amount for entry in active), Decimal("0")),
                    available_years=years,
                    invoices=[
                        IssuedInvoiceDTO(
                            **entry.model_dump(exclude={"created_at"}),
                            is_superseded=entry.is_superseded,
                        )
                        for entry in entries
                    ],
                )
            )

        except Exception as e:
            return Return.err(
                Error(
                    code="LIST_ISSUED_INVOICES_FAILED",
                    message="Failed to list issued invoices",
                    reason=str(e),
                )
            )
