"""Issued Invoice Domain Entity

Immutable ledger snapshot of an invoice at the moment it was issued.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import BigInteger, Integer, JSON, Numeric, String
from src.domain.base import BaseModel


class IssuedInvoice(BaseModel, table=True):
    """
    Issued Invoice - Ledger entry created once per issuance

    Domain Rules:
    - Never mutated after creation, except superseded_at on reissue
    - internal_number follows PREFIX-YYYY-NNN (ledger sequence)
    - external_number is assigned by the invoicing provider (YYYY-NNNN)
    - Both numbers are kept; neither replaces the other
    - line_items is a JSON snapshot of the invoice lines at issuance
    """

    __tablename__ = "issued_invoices"
    __table_args__ = (
        Index('ix_issued_invoices_year', 'year'),
        Index('ix_issued_invoices_source_invoice_id', 'source_invoice_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True),
        description="Ledger-local identifier (auto-increment)"
    )

    source_invoice_id: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Workspace invoice that was issued"
    )

    engagement_id: str = Field(description="Billed engagement")
    engagement_name: str = Field(default="", description="Engagement name at issuance")
    client_id: str = Field(description="Billed client")
    client_name: str = Field(default="", description="Client display name at issuance")

    year: int = Field(description="Billing year")
    month: int = Field(description="Billing month")

    internal_number: str = Field(
        sa_column=Column(String(50), nullable=False),
        description="Ledger number (e.g., FV-2024-001)"
    )

    external_number: str = Field(
        sa_column=Column(String(50), nullable=False),
        description="Provider invoice number (e.g., 2024-1234)"
    )

    external_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="Invoice ID in the invoicing provider"
    )

    external_url: Optional[str] = Field(
        default=None,
        sa_column=Column(String(512), nullable=True),
        description="Link to the invoice in the invoicing provider"
    )

    line_items: List[Dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="Snapshot of line items at issuance"
    )

    total_amount: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Invoice total at issuance"
    )

    currency: str = Field(
        default="CZK",
        sa_column=Column(String(3), nullable=False),
        description="Currency code (ISO 4217)"
    )

    issued_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Issuance timestamp"
    )

    issued_by: Optional[str] = Field(
        default=None,
        description="User who issued the invoice"
    )

    created_at: Optional[datetime] = Field(
        default=None,
        description="Ledger entry creation timestamp (set by the ledger)"
    )

    superseded_at: Optional[datetime] = Field(
        default=None,
        description="Set when the invoice was reissued; the entry stays for audit"
    )

    @property
    def is_superseded(self) -> bool:
        return self.superseded_at is not None
