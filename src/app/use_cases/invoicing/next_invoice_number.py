"""GetNextInvoiceNumber Use Case"""

from libs.result import Result, Return, Error
from src.app.repositories.issued_invoice_repository import IssuedInvoiceRepository
from .dtos import NextInvoiceNumberDTO


class GetNextInvoiceNumber:
    """Use Case: Preview the next ledger invoice number of a year"""

    def __init__(self, issued_invoice_repo: IssuedInvoiceRepository):
        self.issued_invoice_repo = issued_invoice_repo

    async def execute(self, year: int) -> Result[NextInvoiceNumberDTO]:
        try:
            number = await self.issued_invoice_repo.get_next_invoice_number(year)
            return Return.ok(NextInvoiceNumberDTO(year=year, invoice_number=number))

        except Exception as e:
            return Return.err(
                Error(
                    code="NEXT_INVOICE_NUMBER_FAILED",
                    message="Failed to compute next invoice number",
                    reason=str(e),
                )
            )
