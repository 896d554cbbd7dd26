"""Engagement Service Domain Entity

A priced service attached to an engagement, billed monthly or once.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, String
from src.domain.base import BaseModel, generate_uuid


class BillingType(str, Enum):
    """How the service is billed"""
    MONTHLY = "monthly"
    ONE_OFF = "one_off"


class OneOffInvoicingStatus(str, Enum):
    """Invoicing progress of a one-off service"""
    NOT_APPLICABLE = "not_applicable"   # Monthly services
    PENDING = "pending"                 # Waiting to be invoiced
    INVOICED = "invoiced"               # Billed exactly once


class EngagementService(BaseModel, table=True):
    """
    Engagement Service - Priced service within an engagement

    Domain Rules:
    - Belongs to exactly one engagement
    - MONTHLY services contribute one line per period they overlap
    - ONE_OFF services contribute one line, once; invoicing_status moves
      pending -> invoiced when the invoice carrying them is issued
    - Services with creative_boost_max_credits are credit packages and are
      billed from the package summary instead of their own price
    """

    __tablename__ = "engagement_services"
    __table_args__ = (
        Index('ix_engagement_services_engagement_id', 'engagement_id'),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Engagement service identifier"
    )

    engagement_id: str = Field(
        description="Owning engagement ID"
    )

    name: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Service name"
    )

    price: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Full price per period (monthly) or total price (one-off)"
    )

    currency: Optional[str] = Field(
        default=None,
        sa_column=Column(String(3), nullable=True),
        description="Currency code; falls back to the engagement currency"
    )

    billing_type: BillingType = Field(
        default=BillingType.MONTHLY,
        description="monthly or one_off"
    )

    is_active: bool = Field(
        default=True,
        description="Inactive services are never billed"
    )

    creative_boost_max_credits: Optional[int] = Field(
        default=None,
        description="Credit package size (set only for credit package services)"
    )

    creative_boost_price_per_credit: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(18, 2), nullable=True),
        description="Price per credit of the package"
    )

    invoicing_status: OneOffInvoicingStatus = Field(
        default=OneOffInvoicingStatus.NOT_APPLICABLE,
        description="One-off invoicing status"
    )

    invoiced_at: Optional[datetime] = Field(
        default=None,
        description="When the one-off service was invoiced"
    )

    invoiced_in_period: Optional[str] = Field(
        default=None,
        sa_column=Column(String(7), nullable=True),
        description="Billing period (YYYY-MM) the one-off was invoiced in"
    )

    invoice_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="Invoice that billed the one-off"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Service creation timestamp"
    )

    @property
    def is_credit_package(self) -> bool:
        return bool(self.creative_boost_max_credits)
