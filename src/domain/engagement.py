"""Engagement Domain Entity

A billable agreement (contract) between the agency and a client.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, String, Date
from src.domain.base import BaseModel, generate_uuid


class EngagementType(str, Enum):
    """Engagement types"""
    RETAINER = "retainer"    # Recurring monthly fee
    ONE_OFF = "one_off"      # Billed through one-off services only
    INTERNAL = "internal"    # Never billed


class EngagementStatus(str, Enum):
    """Engagement lifecycle status"""
    PLANNED = "planned"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Engagement(BaseModel, table=True):
    """
    Engagement - Contract between the agency and a client

    Domain Rules:
    - Only ACTIVE + RETAINER engagements take part in monthly invoice generation
    - end_date is optional (None = ongoing)
    - One-off engagements are billed via one-off services instead
    """

    __tablename__ = "engagements"
    __table_args__ = (
        Index('ix_engagements_client_id', 'client_id'),
        Index('ix_engagements_status_type', 'status', 'type'),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Engagement identifier"
    )

    client_id: str = Field(
        description="Owning client ID"
    )

    name: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Engagement name shown on invoices"
    )

    type: EngagementType = Field(
        default=EngagementType.RETAINER,
        description="Engagement type (retainer, one_off, internal)"
    )

    status: EngagementStatus = Field(
        default=EngagementStatus.ACTIVE,
        description="Engagement status"
    )

    monthly_fee: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Agreed monthly fee"
    )

    currency: str = Field(
        default="CZK",
        sa_column=Column(String(3), nullable=False, default="CZK"),
        description="Currency code (ISO 4217)"
    )

    start_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="First day of the engagement"
    )

    end_date: Optional[date] = Field(
        default=None,
        sa_column=Column(Date, nullable=True),
        description="Last day of the engagement (None = ongoing)"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Engagement creation timestamp"
    )

    @property
    def is_billable_retainer(self) -> bool:
        return (
            self.status == EngagementStatus.ACTIVE
            and self.type == EngagementType.RETAINER
        )

    def overlaps(self, period_start: date, period_end: date) -> bool:
        """True when the engagement is active on at least one day of the period"""
        if self.start_date > period_end:
            return False
        if self.end_date is not None and self.end_date < period_start:
            return False
        return True
