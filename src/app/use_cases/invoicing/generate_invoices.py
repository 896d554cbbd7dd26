"""GenerateMonthlyInvoices Use Case

Builds the draft invoices of a period from the CRM sources and loads them
into the period's workspace.
"""

import logging
from libs.result import Result, Return, Error
from .assembler import InvoiceAssembler, total_of
from .billable_sources import BillableSources
from .dtos import GenerateInvoicesCommandDTO, InvoiceListDTO
from .workspace import InvoiceWorkspace, WorkspaceRegistry

logger = logging.getLogger(__name__)


def invoice_list_of(workspace: InvoiceWorkspace) -> InvoiceListDTO:
    invoices = workspace.current_invoices
    return InvoiceListDTO(
        year=workspace.year,
        month=workspace.month,
        state=workspace.state.value,
        invoice_count=len(invoices),
        total_amount=total_of(invoices),
        selected_invoice_ids=workspace.selected_ids,
        invoices=invoices,
        generated_at=workspace.generated_at,
    )


class GenerateMonthlyInvoices:
    """
    Use Case: Generate the draft invoices of a billing period

    Business Rules:
    1. Sources are read fresh on every call (generation is idempotent)
    2. User edits of the period are kept unless regeneration is requested
    3. Issued invoices of the period are never replaced

    Flow:
    1. Load billable sources for the period
    2. Assemble draft invoices
    3. Load them into the workspace (honoring edit precedence)
    4. Return the current invoices of the period
    """

    def __init__(
        self,
        sources: BillableSources,
        assembler: InvoiceAssembler,
        registry: WorkspaceRegistry,
    ):
        self.sources = sources
        self.assembler = assembler
        self.registry = registry

    async def execute(self, command: GenerateInvoicesCommandDTO) -> Result[InvoiceListDTO]:
        """
        Execute invoice generation

        Args:
            command: GenerateInvoicesCommandDTO with year, month and regenerate flag

        Returns:
            Result[InvoiceListDTO]: Current invoices of the period or error
        """
        workspace = self.registry.get(command.year, command.month)

        if workspace.is_issuing:
            return Return.err(
                Error(
                    code="ISSUANCE_IN_PROGRESS",
                    message=f"Invoices of {workspace.period} are being issued, try again later",
                    reason="Generation is blocked while issuance runs",
                )
            )

        try:
            # Step 1: Load sources
            snapshot = await self.sources.load(command.year, command.month)

            # Step 2: Assemble
            invoices = self.assembler.assemble_snapshot(snapshot)

            # Step 3: Load into the workspace
            if command.regenerate:
                workspace.request_regeneration()
            replaced = workspace.load_generated(invoices)

            logger.info(
                f"Generated {len(invoices)} invoices for {workspace.period} "
                f"(total {total_of(invoices)}, user edits kept: {not replaced})"
            )

            return Return.ok(invoice_list_of(workspace))

        except Exception as e:
            logger.error(f"Invoice generation failed for {workspace.period}: {e}")
            return Return.err(
                Error(
                    code="GENERATE_INVOICES_FAILED",
                    message="Failed to generate invoices",
                    reason=str(e),
                )
            )
