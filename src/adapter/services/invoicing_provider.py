"""Simulated Invoicing Provider

Stands in for the external invoicing system: assigns provider numbers
(YYYY-NNNN) and links without any network call.
"""

import logging
import random
import time
from typing import Dict, Optional
from src.app.services.invoicing_provider import InvoicingProvider, ProviderInvoice
from src.domain.invoice import MonthlyInvoice

logger = logging.getLogger(__name__)

MAX_SEQUENCE = 9999


class SimulatedInvoicingProvider(InvoicingProvider):
    """
    In-process provider simulation

    Numbers are sequential per year; each year's sequence starts at a random
    four digit number unless start_sequence is given. After 9999 the sequence
    wraps to 0001 so numbers keep the YYYY-NNNN shape.
    """

    def __init__(self, base_url: str, start_sequence: Optional[int] = None):
        self.base_url = base_url.rstrip("/")
        self.start_sequence = start_sequence
        self._next_by_year: Dict[int, int] = {}
        self._calls = 0

    def _next_number(self, year: int) -> int:
        if year not in self._next_by_year:
            start = self.start_sequence
            if start is None:
                start = random.randint(1000, 8999)
            self._next_by_year[year] = start
        number = self._next_by_year[year]
        self._next_by_year[year] = number + 1 if number < MAX_SEQUENCE else 1
        return number

    async def create_invoice(self, invoice: MonthlyInvoice) -> ProviderInvoice:
        self._calls += 1
        external_id = f"{int(time.time() * 1000)}-{self._calls}"
        invoice_number = f"{invoice.year}-{self._next_number(invoice.year):04d}"

        logger.debug(f"Provider recorded invoice {invoice.id} as {invoice_number}")
        return ProviderInvoice(
            invoice_number=invoice_number,
            external_id=external_id,
            external_url=f"{self.base_url}/invoices/{external_id}",
        )
