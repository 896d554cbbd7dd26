"""Invoice Line Item Domain Entity

One billable entry on a monthly invoice, tagged with its originating source.
Line items live in memory inside a MonthlyInvoice until the invoice is issued.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field
from src.domain.base import BaseModel


class LineItemSource(str, Enum):
    """Where a line item came from"""
    ENGAGEMENT = "engagement"            # Retainer service
    EXTRA_WORK = "extra_work"
    CREATIVE_BOOST = "creative_boost"    # Credit package
    ONE_OFF = "one_off"
    MANUAL = "manual"                    # Added or duplicated by a user


class InvoiceLineItem(BaseModel):
    """
    Invoice Line Item - Individual billable entry

    Domain Rules:
    - Belongs to exactly one invoice
    - final_amount = unit_price * quantity + adjustment_amount, always
    - New items are unapproved; issuing requires every item approved
    """

    id: str = Field(description="Line item ID (deterministic for generated items)")
    invoice_id: str = Field(description="Owning invoice ID")
    source: LineItemSource = Field(description="Origin of the line item")

    engagement_id: Optional[str] = Field(default=None, description="Source engagement")
    extra_work_id: Optional[str] = Field(default=None, description="Source extra work")
    service_id: Optional[str] = Field(default=None, description="Source engagement service")

    source_description: str = Field(default="", description="Description of the source record")
    source_amount: Decimal = Field(default=Decimal("0"), description="Unprorated source amount")

    period_start: date = Field(description="First billed day")
    period_end: date = Field(description="Last billed day")
    prorated_days: int = Field(description="Billed days within the month")
    total_days_in_month: int = Field(description="Days in the billed month")
    prorated_amount: Decimal = Field(default=Decimal("0"), description="Amount after proration")

    line_description: str = Field(default="", description="Text printed on the invoice")
    unit_price: Decimal = Field(default=Decimal("0"), description="Price per unit")
    quantity: Decimal = Field(default=Decimal("1"), description="Quantity")
    adjustment_amount: Decimal = Field(default=Decimal("0"), description="Discount or surcharge")
    adjustment_reason: str = Field(default="", description="Why the adjustment was made")
    final_amount: Decimal = Field(default=Decimal("0"), description="Derived total of the line")

    is_approved: bool = Field(default=False, description="Approved for issuance")
    note: str = Field(default="", description="Internal note")

    hours: Optional[Decimal] = Field(default=None, description="Hours (hourly billed work)")
    hourly_rate: Optional[Decimal] = Field(default=None, description="Hourly rate")
    currency: str = Field(default="CZK", description="Currency code")
    is_reverse_charge: bool = Field(default=False, description="Reverse charge VAT regime")

    @property
    def base_amount(self) -> Decimal:
        return self.unit_price * self.quantity

    def recalculate(self) -> "InvoiceLineItem":
        self.final_amount = self.base_amount + self.adjustment_amount
        return self
