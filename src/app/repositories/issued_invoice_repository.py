"""Issued Invoice Repository Interface

The issuance ledger: append-only record of issued invoices.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from src.domain.issued_invoice import IssuedInvoice


class IssuedInvoiceRepository(ABC):
    """
    Repository interface for the issuance ledger

    Entries are appended at issuance and never deleted; reissuing an invoice
    only stamps superseded_at on its previous entry.
    """

    @abstractmethod
    async def add(self, issued_invoice: IssuedInvoice) -> IssuedInvoice:
        """
        Append an issued invoice to the ledger

        Args:
            issued_invoice: Entry to record

        Returns:
            Recorded entry with ledger-local id and created_at assigned
        """
        pass

    @abstractmethod
    async def get_by_id(self, issued_invoice_id: int) -> Optional[IssuedInvoice]:
        """
        Retrieve a ledger entry by ID

        Args:
            issued_invoice_id: Ledger-local identifier

        Returns:
            IssuedInvoice if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_year(
        self, year: int, include_superseded: bool = True
    ) -> List[IssuedInvoice]:
        """
        Retrieve ledger entries for a billing year

        Args:
            year: Billing year
            include_superseded: Also return entries superseded by a reissue

        Returns:
            Entries ordered by issued_at, newest first
        """
        pass

    @abstractmethod
    async def list_years(self) -> List[int]:
        """
        List billing years present in the ledger

        Returns:
            Years, newest first
        """
        pass

    @abstractmethod
    async def get_next_invoice_number(self, year: int) -> str:
        """
        Compute the next ledger invoice number for a year

        Format: PREFIX-YYYY-NNN (e.g., FV-2024-001). Scans existing numbers of
        the year and returns max + 1.

        Args:
            year: Billing year

        Returns:
            Next invoice number string
        """
        pass

    @abstractmethod
    async def get_active_for_invoice(self, source_invoice_id: str) -> Optional[IssuedInvoice]:
        """
        Retrieve the current (not superseded) entry for a workspace invoice

        Args:
            source_invoice_id: Workspace invoice ID

        Returns:
            Latest non-superseded entry, None if there is none
        """
        pass

    @abstractmethod
    async def mark_superseded(
        self, issued_invoice: IssuedInvoice, superseded_at: datetime
    ) -> IssuedInvoice:
        """
        Mark an entry as superseded by a reissue

        Args:
            issued_invoice: Entry to mark
            superseded_at: Timestamp of the reissue

        Returns:
            Updated entry
        """
        pass
