"""IssueInvoices Use Case

Issues approved draft invoices: records each one with the invoicing provider,
appends it to the issuance ledger and marks its billable sources invoiced.
"""

import asyncio
import logging
from datetime import datetime
from decimal import Decimal
from typing import Awaitable, Callable, List, Optional, Tuple
from libs.result import Result, Return, Error
from src.app.repositories.client_repository import ClientRepository
from src.app.repositories.engagement_service_repository import EngagementServiceRepository
from src.app.repositories.extra_work_repository import ExtraWorkRepository
from src.app.repositories.issued_invoice_repository import IssuedInvoiceRepository
from src.app.services.invoicing_provider import (
    InvoicingProvider,
    InvoicingProviderError,
    ProviderInvoice,
)
from src.app.services.notification_service import IssuanceNotifier
from src.app.services.unit_of_work import UnitOfWork
from src.domain.engagement_service import OneOffInvoicingStatus
from src.domain.extra_work import ExtraWorkStatus
from src.domain.invoice import MonthlyInvoice, InvoiceStatus
from src.domain.invoice_line import LineItemSource
from src.domain.issued_invoice import IssuedInvoice
from .dtos import (
    FailedIssuanceDTO,
    IssueInvoicesCommandDTO,
    IssueInvoicesResultDTO,
    IssuedInvoiceInfoDTO,
)
from .workspace import (
    InvoiceWorkspace,
    WorkspaceRegistry,
    empty_invoice,
    invoice_already_issued,
    invoice_not_found,
    issuance_in_progress,
)

logger = logging.getLogger(__name__)


class IssueInvoices:
    """
    Use Case: Issue a batch of invoices

    Business Rules:
    1. The batch is the explicit invoice ids or, when omitted, the selection
    2. Every invoice must exist, still be a draft and have line items
    3. Every line item of every invoice must be approved; otherwise nothing
       is issued and the offending invoices are reported
    4. Only one issuance per period runs at a time and the workspace is
       locked against edits until it finishes
    5. One provider call per invoice, retried with exponential backoff;
       an invoice whose retries are exhausted stays a draft and the rest of
       the batch continues
    6. Issuing marks the invoice's extra work and one-off services invoiced
    7. A failed notification never undoes an issuance

    Flow:
    1. Resolve and validate the batch
    2. Set the period busy flag
    3. Per invoice: provider call, ledger number, ledger entry, source
       updates, commit, mark issued, notify
    4. Clear the busy flag and return per-invoice outcomes
    """

    def __init__(
        self,
        uow: UnitOfWork,
        issued_invoice_repo: IssuedInvoiceRepository,
        extra_work_repo: ExtraWorkRepository,
        service_repo: EngagementServiceRepository,
        client_repo: ClientRepository,
        provider: InvoicingProvider,
        notifier: IssuanceNotifier,
        registry: WorkspaceRegistry,
        simulated_delay_seconds: float = 0.0,
        max_retries: int = 3,
        retry_backoff_seconds: float = 0.5,
        missing_reference_placeholder: str = "—",
        issued_by_default: Optional[str] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.uow = uow
        self.issued_invoice_repo = issued_invoice_repo
        self.extra_work_repo = extra_work_repo
        self.service_repo = service_repo
        self.client_repo = client_repo
        self.provider = provider
        self.notifier = notifier
        self.registry = registry
        self.simulated_delay_seconds = simulated_delay_seconds
        self.max_retries = max_retries
        self.retry_backoff_seconds = retry_backoff_seconds
        self.missing_reference_placeholder = missing_reference_placeholder
        self.issued_by_default = issued_by_default
        self.sleep = sleep

    async def execute(self, command: IssueInvoicesCommandDTO) -> Result[IssueInvoicesResultDTO]:
        """
        Execute invoice issuance

        Args:
            command: IssueInvoicesCommandDTO with period, optional ids and user

        Returns:
            Result[IssueInvoicesResultDTO]: Per-invoice outcomes or a batch error
        """
        workspace = self.registry.get(command.year, command.month)

        # Step 1: Resolve and validate the batch
        batch = self._resolve_batch(workspace, command.invoice_ids)
        if batch.is_err():
            return batch
        invoices = batch.value

        # Step 2: Busy flag
        workspace.is_issuing = True
        try:
            if self.simulated_delay_seconds:
                await self.sleep(self.simulated_delay_seconds)

            issued_by = command.issued_by or self.issued_by_default
            issued: List[IssuedInvoiceInfoDTO] = []
            failed: List[FailedIssuanceDTO] = []

            # Step 3: Issue one by one
            for invoice in invoices:
                info, failure = await self._issue_one(workspace, invoice, issued_by)
                if info is not None:
                    issued.append(info)
                if failure is not None:
                    failed.append(failure)

            issued_amount = sum((info.amount for info in issued), Decimal("0"))
            logger.info(
                f"Issued {len(issued)} of {len(invoices)} invoices for {workspace.period} "
                f"(amount {issued_amount}, failed {len(failed)})"
            )

            return Return.ok(
                IssueInvoicesResultDTO(
                    issued_count=len(issued),
                    issued_amount=issued_amount,
                    issued=issued,
                    failed=failed,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Issuance for {workspace.period} failed: {e}")
            return Return.err(
                Error(
                    code="ISSUE_INVOICES_FAILED",
                    message="Failed to issue invoices",
                    reason=str(e),
                )
            )
        finally:
            # Step 4: Release the period
            workspace.is_issuing = False

    def _resolve_batch(
        self, workspace: InvoiceWorkspace, invoice_ids: Optional[List[str]]
    ) -> Result[List[MonthlyInvoice]]:
        if workspace.is_issuing:
            return Return.err(issuance_in_progress(workspace.period))

        ids = list(dict.fromkeys(invoice_ids if invoice_ids else workspace.selected_ids))
        if not ids:
            return Return.err(
                Error(
                    code="NO_INVOICES_SELECTED",
                    message="Select at least one invoice to issue",
                    reason="Empty issuance batch",
                )
            )

        invoices = []
        for invoice_id in ids:
            invoice = workspace.get_invoice(invoice_id)
            if invoice is None:
                return Return.err(invoice_not_found(invoice_id))
            if invoice.status == InvoiceStatus.ISSUED:
                return Return.err(invoice_already_issued(invoice_id))
            if not invoice.line_items:
                return Return.err(empty_invoice(invoice_id))
            invoices.append(invoice)

        unapproved = [invoice.id for invoice in invoices if not invoice.is_fully_approved]
        if unapproved:
            return Return.err(
                Error(
                    code="UNAPPROVED_LINE_ITEMS",
                    message=f"All line items must be approved before issuing: {', '.join(unapproved)}",
                    reason="Approval gate",
                    details={"invoice_ids": unapproved},
                )
            )

        return Return.ok(invoices)

    async def _call_provider(
        self, invoice: MonthlyInvoice
    ) -> Tuple[Optional[ProviderInvoice], int, Optional[str]]:
        """Provider call with exponential backoff, returns (response, attempts, last error)"""
        attempts = 0
        while True:
            attempts += 1
            try:
                return await self.provider.create_invoice(invoice), attempts, None
            except InvoicingProviderError as e:
                if attempts > self.max_retries:
                    logger.error(
                        f"Provider rejected invoice {invoice.id} after {attempts} attempts: {e}"
                    )
                    return None, attempts, str(e)
                delay = self.retry_backoff_seconds * (2 ** (attempts - 1))
                logger.warning(
                    f"Provider call for invoice {invoice.id} failed (attempt {attempts}), "
                    f"retrying in {delay}s: {e}"
                )
                await self.sleep(delay)

    async def _issue_one(
        self, workspace: InvoiceWorkspace, invoice: MonthlyInvoice, issued_by: Optional[str]
    ) -> Tuple[Optional[IssuedInvoiceInfoDTO], Optional[FailedIssuanceDTO]]:
        # Approval is checked again right before the provider sees the invoice
        if not invoice.line_items or not invoice.is_fully_approved:
            logger.warning(f"Invoice {invoice.id} is no longer issuable, skipping")
            return None, FailedIssuanceDTO(
                invoice_id=invoice.id,
                code="UNAPPROVED_LINE_ITEMS",
                message="All line items must be approved before issuing",
                attempts=0,
            )

        provider_invoice, attempts, provider_error = await self._call_provider(invoice)
        if provider_invoice is None:
            return None, FailedIssuanceDTO(
                invoice_id=invoice.id,
                code="PROVIDER_UNAVAILABLE",
                message=f"Invoicing provider did not accept the invoice: {provider_error}",
                attempts=attempts,
            )

        issued_at = datetime.utcnow()
        try:
            internal_number = await self.issued_invoice_repo.get_next_invoice_number(invoice.year)
            client = await self.client_repo.get_by_id(invoice.client_id)

            entry = await self.issued_invoice_repo.add(
                IssuedInvoice(
                    source_invoice_id=invoice.id,
                    engagement_id=invoice.engagement_id,
                    engagement_name=invoice.engagement_name or self.missing_reference_placeholder,
                    client_id=invoice.client_id,
                    client_name=client.display_name if client else self.missing_reference_placeholder,
                    year=invoice.year,
                    month=invoice.month,
                    internal_number=internal_number,
                    external_number=provider_invoice.invoice_number,
                    external_id=provider_invoice.external_id,
                    external_url=provider_invoice.external_url,
                    line_items=[item.model_dump(mode="json") for item in invoice.line_items],
                    total_amount=invoice.total_amount,
                    currency=invoice.currency,
                    issued_at=issued_at,
                    issued_by=issued_by,
                )
            )

            await self._mark_sources_invoiced(invoice, internal_number, issued_at)
            await self.uow.commit()

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Recording issued invoice {invoice.id} failed: {e}")
            return None, FailedIssuanceDTO(
                invoice_id=invoice.id,
                code="ISSUE_INVOICE_FAILED",
                message=f"Failed to record issued invoice: {e}",
                attempts=attempts,
            )

        workspace.mark_issued(invoice.id, issued_at)

        notified = await self._notify(entry)
        if notified:
            invoice.webhook_sent_at = datetime.utcnow()

        return IssuedInvoiceInfoDTO(
            invoice_id=invoice.id,
            ledger_id=entry.id,
            internal_number=entry.internal_number,
            external_number=entry.external_number,
            external_url=entry.external_url,
            amount=invoice.total_amount,
            currency=invoice.currency,
            notified=notified,
        ), None

    async def _mark_sources_invoiced(
        self, invoice: MonthlyInvoice, invoice_number: str, issued_at: datetime
    ) -> None:
        for item in invoice.line_items:
            if item.source == LineItemSource.EXTRA_WORK and item.extra_work_id:
                work = await self.extra_work_repo.get_by_id(item.extra_work_id)
                if work is None or work.status == ExtraWorkStatus.INVOICED:
                    continue
                work.status = ExtraWorkStatus.INVOICED
                work.invoice_id = invoice.id
                work.invoice_number = invoice_number
                work.invoiced_at = issued_at
                await self.extra_work_repo.update(work)

            elif item.source == LineItemSource.ONE_OFF and item.service_id:
                service = await self.service_repo.get_by_id(item.service_id)
                if service is None or service.invoicing_status == OneOffInvoicingStatus.INVOICED:
                    continue
                service.invoicing_status = OneOffInvoicingStatus.INVOICED
                service.invoiced_at = issued_at
                service.invoiced_in_period = invoice.billing_period
                service.invoice_id = invoice.id
                await self.service_repo.update(service)

    async def _notify(self, entry: IssuedInvoice) -> bool:
        try:
            return await self.notifier.send_invoice_issued(entry)
        except Exception as e:
            logger.error(f"Issuance notification for {entry.internal_number} failed: {e}")
            return False
