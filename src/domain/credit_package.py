"""Credit Package Month Domain Entity

Precomputed Creative Boost package summary for a client and month.
Credit accounting itself lives outside this system.
"""

from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric
from src.domain.base import BaseModel, generate_uuid


class CreditPackageMonth(BaseModel, table=True):
    """
    Credit Package Month - Creative Boost package for one client-month

    Domain Rules:
    - Billed at the package price, not by usage
    - invoice_amount overrides max_credits * price_per_credit when set
    - A package with a non-positive invoice amount is not billed
    """

    __tablename__ = "credit_package_months"
    __table_args__ = (
        Index('ix_credit_package_months_client_period', 'client_id', 'year', 'month', unique=True),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Package month identifier"
    )

    client_id: str = Field(
        description="Client owning the package"
    )

    year: int = Field(description="Year")
    month: int = Field(description="Month (1-12)")

    max_credits: int = Field(
        default=0,
        description="Package size in credits"
    )

    used_credits: int = Field(
        default=0,
        description="Credits consumed in the month"
    )

    price_per_credit: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Price per credit"
    )

    invoice_amount: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(18, 2), nullable=True),
        description="Amount to invoice (overrides the package price)"
    )

    @property
    def package_amount(self) -> Decimal:
        return Decimal(self.max_credits) * self.price_per_credit

    @property
    def billable_amount(self) -> Decimal:
        if self.invoice_amount is not None:
            return self.invoice_amount
        return self.package_amount
