"""Invoicing Provider Interface

Defines the contract for the external invoicing system that assigns official
invoice numbers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from src.domain.invoice import MonthlyInvoice


class InvoicingProviderError(Exception):
    """Raised when the provider rejects or fails to record an invoice"""


@dataclass(frozen=True)
class ProviderInvoice:
    """Provider response for a recorded invoice"""

    invoice_number: str     # e.g. 2024-1234, sequential per year
    external_id: str        # Provider-side identifier
    external_url: str       # Link to the invoice in the provider UI


class InvoicingProvider(ABC):
    """
    External invoicing system

    Contract:
    - One call per invoice
    - invoice_number is sequential and scoped by the invoice year
    - external_url can be opened by users
    """

    @abstractmethod
    async def create_invoice(self, invoice: MonthlyInvoice) -> ProviderInvoice:
        """
        Record an invoice in the provider

        Args:
            invoice: Invoice being issued

        Returns:
            ProviderInvoice with number, id and URL

        Raises:
            InvoicingProviderError: If the provider call fails
        """
        pass
