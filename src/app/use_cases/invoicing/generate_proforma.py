"""GenerateProforma Use Case

Generates a proforma invoice PDF of a draft workspace invoice for preview
purposes.
"""

import base64
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.repositories.client_repository import ClientRepository
from src.app.services.pdf_service import PdfService
from src.domain.invoice import InvoiceStatus
from .dtos import InvoiceLineDTO, ProformaInvoiceResponseDTO
from .workspace import WorkspaceRegistry, invoice_not_found


class GenerateProforma:
    """
    Use Case: Generate proforma invoice PDF

    Business Rules:
    1. Invoice must exist in the period
    2. Invoice must have status=draft (proforma is for preview)
    3. Generates PDF with invoice details and line items
    4. Returns PDF as base64-encoded string

    Flow:
    1. Retrieve invoice from the workspace
    2. Validate invoice status is draft
    3. Resolve client name
    4. Generate PDF using PDF service
    5. Return response with PDF as base64
    """

    def __init__(
        self,
        registry: WorkspaceRegistry,
        client_repo: ClientRepository,
        pdf_service: PdfService,
        missing_reference_placeholder: str = "—",
    ):
        self.registry = registry
        self.client_repo = client_repo
        self.pdf_service = pdf_service
        self.missing_reference_placeholder = missing_reference_placeholder

    async def execute(
        self, year: int, month: int, invoice_id: str
    ) -> Result[ProformaInvoiceResponseDTO]:
        """
        Execute proforma invoice generation

        Args:
            year: Billing year
            month: Billing month
            invoice_id: Workspace invoice ID

        Returns:
            Result[ProformaInvoiceResponseDTO]: Success with PDF or error
        """
        try:
            # Step 1: Retrieve invoice
            invoice = self.registry.get(year, month).get_invoice(invoice_id)
            if invoice is None:
                return Return.err(invoice_not_found(invoice_id))

            # Step 2: Validate status is draft
            if invoice.status != InvoiceStatus.DRAFT:
                return Return.err(
                    Error(
                        code="INVALID_INVOICE_STATUS",
                        message=f"Proforma can only be generated for draft invoices. "
                                f"Current status: {invoice.status.value}",
                        reason="Only draft invoices support proforma generation",
                    )
                )

            # Step 3: Client name
            client = await self.client_repo.get_by_id(invoice.client_id)
            client_name = client.display_name if client else self.missing_reference_placeholder

            # Step 4: Generate PDF
            pdf_bytes = self.pdf_service.generate_proforma_invoice(
                invoice=invoice,
                client_name=client_name,
            )
            pdf_base64 = base64.b64encode(pdf_bytes).decode("utf-8")

            # Step 5: Build response
            return Return.ok(
                ProformaInvoiceResponseDTO(
                    invoice_id=invoice.id,
                    engagement_name=invoice.engagement_name,
                    client_name=client_name,
                    status=invoice.status.value,
                    billing_period=invoice.billing_period,
                    total_amount=invoice.total_amount,
                    currency=invoice.currency,
                    line_items=[InvoiceLineDTO.from_line_item(item) for item in invoice.line_items],
                    pdf_base64=pdf_base64,
                    generated_at=datetime.utcnow(),
                )
            )

        except Exception as e:
            return Return.err(
                Error(
                    code="GENERATE_PROFORMA_FAILED",
                    message="Failed to generate proforma invoice",
                    reason=str(e),
                )
            )
