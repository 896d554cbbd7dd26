"""Extra Work Domain Entity

Ad hoc billable work outside the retainer scope.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, String, Date, Text
from src.domain.base import BaseModel, generate_uuid


class ExtraWorkStatus(str, Enum):
    """Linear extra work lifecycle"""
    PENDING_APPROVAL = "pending_approval"
    IN_PROGRESS = "in_progress"
    READY_TO_INVOICE = "ready_to_invoice"
    INVOICED = "invoiced"                # Terminal


class ExtraWork(BaseModel, table=True):
    """
    Extra Work - Approved ad hoc work queued for a billing period

    Domain Rules:
    - Only READY_TO_INVOICE items with a matching billing_period are billable
    - INVOICED is terminal; invoice_id/invoice_number/invoiced_at are set then
    """

    __tablename__ = "extra_works"
    __table_args__ = (
        Index('ix_extra_works_period_status', 'billing_period', 'status'),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Extra work identifier"
    )

    client_id: str = Field(
        description="Client the work was done for"
    )

    engagement_id: Optional[str] = Field(
        default=None,
        description="Engagement the work is billed under (optional)"
    )

    name: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Short name of the work"
    )

    description: str = Field(
        default="",
        sa_column=Column(Text, nullable=False, default=""),
        description="Longer description"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Amount to bill"
    )

    currency: Optional[str] = Field(
        default=None,
        sa_column=Column(String(3), nullable=True),
        description="Currency code"
    )

    hours_worked: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(10, 2), nullable=True),
        description="Hours spent (for hourly billed work)"
    )

    hourly_rate: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(18, 2), nullable=True),
        description="Hourly rate (for hourly billed work)"
    )

    work_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Date the work was done"
    )

    billing_period: str = Field(
        sa_column=Column(String(7), nullable=False),
        description="Billing period in YYYY-MM format"
    )

    status: ExtraWorkStatus = Field(
        default=ExtraWorkStatus.PENDING_APPROVAL,
        description="Lifecycle status"
    )

    invoice_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="Invoice that billed the work"
    )

    invoice_number: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True),
        description="Invoice number that billed the work"
    )

    invoiced_at: Optional[datetime] = Field(
        default=None,
        description="When the work was invoiced"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Creation timestamp"
    )
