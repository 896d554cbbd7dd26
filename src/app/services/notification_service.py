"""Issuance Notification Interface

Defines the contract for announcing issued invoices to other systems.
"""

from abc import ABC, abstractmethod
from src.domain.issued_invoice import IssuedInvoice


class IssuanceNotifier(ABC):
    """
    Abstract notifier for issued invoices

    Implementations can send notifications via:
    - Log output
    - Webhook (HTTP POST)
    """

    @abstractmethod
    async def send_invoice_issued(self, issued_invoice: IssuedInvoice) -> bool:
        """
        Announce an issued invoice

        Args:
            issued_invoice: Ledger entry that was just recorded

        Returns:
            True if notification sent successfully, False otherwise
        """
        pass
