"""PDF Generation Service Interface

Defines the contract for rendering invoice previews.
"""

from abc import ABC, abstractmethod
from src.domain.invoice import MonthlyInvoice


class PdfService(ABC):
    """
    Service interface for PDF generation

    Provides PDF generation capabilities for invoices.
    """

    @abstractmethod
    def generate_proforma_invoice(
        self,
        invoice: MonthlyInvoice,
        client_name: str,
        company_name: str = "Agency s.r.o.",
        company_address: str = "Vodičkova 1, 110 00 Praha 1",
    ) -> bytes:
        """
        Generate a proforma invoice PDF

        Args:
            invoice: Draft monthly invoice with line items
            client_name: Client display name for the Bill To block
            company_name: Company name to display on invoice
            company_address: Company address to display on invoice

        Returns:
            PDF document as bytes
        """
        pass
