"""ReissueInvoice Use Case

Reopens an issued invoice for editing. The ledger keeps the previous entry,
stamped as superseded.
"""

import logging
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.repositories.issued_invoice_repository import IssuedInvoiceRepository
from src.app.services.unit_of_work import UnitOfWork
from src.domain.invoice import InvoiceStatus
from .dtos import ReissueResultDTO
from .workspace import WorkspaceRegistry, invoice_not_found, invoice_not_issued

logger = logging.getLogger(__name__)


class ReissueInvoice:
    """
    Use Case: Reissue an invoice

    Business Rules:
    1. Invoice must exist in the period and be issued
    2. Invoice returns to draft and leaves the issued set
    3. Line item approvals are kept
    4. The active ledger entry is stamped superseded_at (never deleted)

    Flow:
    1. Validate the invoice is issued
    2. Stamp the ledger entry
    3. Commit transaction and reopen the invoice
    """

    def __init__(
        self,
        uow: UnitOfWork,
        issued_invoice_repo: IssuedInvoiceRepository,
        registry: WorkspaceRegistry,
    ):
        self.uow = uow
        self.issued_invoice_repo = issued_invoice_repo
        self.registry = registry

    async def execute(self, year: int, month: int, invoice_id: str) -> Result[ReissueResultDTO]:
        workspace = self.registry.get(year, month)

        if workspace.is_issuing:
            return Return.err(
                Error(
                    code="ISSUANCE_IN_PROGRESS",
                    message=f"Invoices of {workspace.period} are being issued, try again later",
                    reason="Reissue is blocked while issuance runs",
                )
            )

        try:
            # Step 1: Validate
            invoice = workspace.get_invoice(invoice_id)
            if invoice is None:
                return Return.err(invoice_not_found(invoice_id))
            if invoice.status != InvoiceStatus.ISSUED:
                return Return.err(invoice_not_issued(invoice_id))

            # Step 2: Stamp the ledger
            superseded_at = datetime.utcnow()
            entry = await self.issued_invoice_repo.get_active_for_invoice(invoice_id)
            if entry is not None:
                entry = await self.issued_invoice_repo.mark_superseded(entry, superseded_at)
            else:
                logger.warning(f"No active ledger entry for reissued invoice {invoice_id}")

            # Step 3: Commit, then reopen
            await self.uow.commit()
            workspace.reopen(invoice_id)

            logger.info(
                f"Invoice {invoice_id} reopened"
                + (f", ledger entry {entry.internal_number} superseded" if entry else "")
            )

            return Return.ok(
                ReissueResultDTO(
                    invoice_id=invoice.id,
                    status=invoice.status.value,
                    superseded_ledger_id=entry.id if entry else None,
                    superseded_number=entry.internal_number if entry else None,
                    superseded_at=superseded_at if entry else None,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="REISSUE_INVOICE_FAILED",
                    message="Failed to reissue invoice",
                    reason=str(e),
                )
            )
