"""Monthly Invoice Domain Entity

One invoice per engagement per month, assembled from billable sources and
edited in memory before issuance.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from sqlmodel import Field
from src.domain.base import BaseModel
from src.domain.invoice_line import InvoiceLineItem


class InvoiceStatus(str, Enum):
    """Invoice status types"""
    DRAFT = "draft"
    ISSUED = "issued"


def invoice_id_for(engagement_id: str, year: int, month: int) -> str:
    """Deterministic invoice id, one per (engagement, year, month)"""
    return f"inv-{engagement_id}-{year}-{month}"


def billing_period_of(year: int, month: int) -> str:
    return f"{year}-{month:02d}"


class MonthlyInvoice(BaseModel):
    """
    Monthly Invoice - Engagement invoice for a single month

    Domain Rules:
    - subtotal = sum(unit_price * quantity) over line items
    - total_adjustments = sum(adjustment_amount) over line items
    - total_amount = subtotal + total_adjustments
    - Totals are recomputed from line items, never set directly
    - Status transitions: draft -> issued (-> draft again on reissue)
    """

    id: str = Field(description="Invoice ID (inv-{engagement}-{year}-{month} when generated)")
    engagement_id: str = Field(description="Billed engagement")
    engagement_name: str = Field(default="", description="Engagement name for display")
    client_id: str = Field(description="Billed client")
    year: int = Field(description="Billing year")
    month: int = Field(description="Billing month (1-12)")

    line_items: List[InvoiceLineItem] = Field(default_factory=list)

    subtotal: Decimal = Field(default=Decimal("0"))
    total_adjustments: Decimal = Field(default=Decimal("0"))
    total_amount: Decimal = Field(default=Decimal("0"))

    currency: str = Field(default="CZK", description="Currency code")
    status: InvoiceStatus = Field(default=InvoiceStatus.DRAFT)
    issued_at: Optional[datetime] = Field(default=None)
    webhook_sent_at: Optional[datetime] = Field(default=None)
    notes: str = Field(default="")

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def billing_period(self) -> str:
        return billing_period_of(self.year, self.month)

    @property
    def is_fully_approved(self) -> bool:
        return all(item.is_approved for item in self.line_items)

    @property
    def approved_count(self) -> int:
        return sum(1 for item in self.line_items if item.is_approved)

    def find_line_item(self, line_item_id: str) -> Optional[InvoiceLineItem]:
        return next((item for item in self.line_items if item.id == line_item_id), None)

    def recalculate(self) -> "MonthlyInvoice":
        """Recompute every line's final_amount and the invoice totals"""
        for item in self.line_items:
            item.recalculate()
        self.subtotal = sum((item.base_amount for item in self.line_items), Decimal("0"))
        self.total_adjustments = sum(
            (item.adjustment_amount for item in self.line_items), Decimal("0")
        )
        self.total_amount = self.subtotal + self.total_adjustments
        return self
