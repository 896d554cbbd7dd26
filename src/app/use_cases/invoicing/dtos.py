"""Data Transfer Objects for Invoicing Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from src.domain.invoice import MonthlyInvoice
from src.domain.invoice_line import InvoiceLineItem


class GenerateInvoicesCommandDTO(BaseModel):
    """
    Command DTO for generating monthly invoices

    Used as input to GenerateMonthlyInvoices use case.
    """

    year: int = Field(
        ...,
        ge=2000,
        le=2100,
        description="Billing year"
    )

    month: int = Field(
        ...,
        ge=1,
        le=12,
        description="Billing month (1-12)"
    )

    regenerate: bool = Field(
        default=False,
        description="Discard user edits and rebuild the period from sources"
    )


class InvoiceListDTO(BaseModel):
    """
    Response DTO with the current invoices of a period

    Returned by generation and by the period listing endpoint.
    """

    year: int
    month: int
    state: str = Field(..., description="pristine, user_edited or regenerate_requested")
    invoice_count: int
    total_amount: Decimal
    selected_invoice_ids: List[str] = Field(default_factory=list)
    invoices: List[MonthlyInvoice] = Field(default_factory=list)
    generated_at: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "year": 2024,
                "month": 1,
                "state": "pristine",
                "invoice_count": 1,
                "total_amount": "50000",
                "selected_invoice_ids": [],
                "invoices": [],
                "generated_at": "2024-02-01T09:00:00Z"
            }
        }


class LineItemPatchDTO(BaseModel):
    """
    Partial update of a line item

    Only fields that are explicitly set are applied; final_amount and the
    invoice totals are always recomputed afterwards.
    """

    line_description: Optional[str] = None
    unit_price: Optional[Decimal] = None
    quantity: Optional[Decimal] = Field(default=None, ge=0)
    adjustment_amount: Optional[Decimal] = None
    adjustment_reason: Optional[str] = None
    note: Optional[str] = None
    is_approved: Optional[bool] = None
    hours: Optional[Decimal] = None
    hourly_rate: Optional[Decimal] = None
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    is_reverse_charge: Optional[bool] = None

    class Config:
        json_schema_extra = {
            "example": {
                "adjustment_amount": "-5000",
                "adjustment_reason": "Sleva za zpoždění kampaně",
                "is_approved": True
            }
        }


class NewInvoiceItemDTO(BaseModel):
    """Manual item used when adding an invoice for an engagement"""

    description: str = Field(
        ...,
        min_length=1,
        description="Line description"
    )

    amount: Decimal = Field(
        ...,
        description="Unit price of the item"
    )

    hours: Optional[Decimal] = Field(default=None, description="Hours worked")
    hourly_rate: Optional[Decimal] = Field(default=None, description="Hourly rate")
    currency: str = Field(default="CZK", min_length=3, max_length=3)
    is_reverse_charge: bool = Field(default=False)


class AddInvoiceCommandDTO(BaseModel):
    """
    Command DTO for adding an invoice (or an item) for an engagement

    Used as input to AddInvoiceForEngagement use case.
    """

    year: int = Field(..., ge=2000, le=2100)
    month: int = Field(..., ge=1, le=12)
    engagement_id: str = Field(..., min_length=1, description="Engagement to invoice")
    item: NewInvoiceItemDTO


class SelectionResultDTO(BaseModel):
    """Outcome of selecting or deselecting an invoice"""

    invoice_id: str
    selected: bool
    auto_approved_count: int = Field(
        default=0,
        description="Line items approved as a side effect of selecting"
    )
    selected_invoice_ids: List[str] = Field(default_factory=list)


class IssueInvoicesCommandDTO(BaseModel):
    """
    Command DTO for issuing invoices

    Used as input to IssueInvoices use case. Without invoice_ids the current
    selection of the period is issued.
    """

    year: int = Field(..., ge=2000, le=2100)
    month: int = Field(..., ge=1, le=12)

    invoice_ids: Optional[List[str]] = Field(
        default=None,
        description="Invoices to issue (single or bulk); defaults to the selection"
    )

    issued_by: Optional[str] = Field(
        default=None,
        description="User issuing the invoices"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "year": 2024,
                "month": 1,
                "invoice_ids": ["inv-eng-1-2024-1"],
                "issued_by": "user-1"
            }
        }


class IssuedInvoiceInfoDTO(BaseModel):
    """One successfully issued invoice"""

    invoice_id: str
    ledger_id: Optional[int] = None
    internal_number: str
    external_number: str
    external_url: Optional[str] = None
    amount: Decimal
    currency: str
    notified: bool = False


class FailedIssuanceDTO(BaseModel):
    """One invoice of the batch that was not issued"""

    invoice_id: str
    code: str
    message: str
    attempts: int


class IssueInvoicesResultDTO(BaseModel):
    """
    Response DTO for invoice issuance

    Contains counts and per-invoice outcomes.
    """

    issued_count: int
    issued_amount: Decimal
    issued: List[IssuedInvoiceInfoDTO] = Field(default_factory=list)
    failed: List[FailedIssuanceDTO] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "issued_count": 1,
                "issued_amount": "50000.00",
                "issued": [
                    {
                        "invoice_id": "inv-eng-1-2024-1",
                        "ledger_id": 1,
                        "internal_number": "FV-2024-001",
                        "external_number": "2024-4821",
                        "external_url": "https://app.fakturoid.cz/agency/invoices/1706774400000-1",
                        "amount": "50000.00",
                        "currency": "CZK",
                        "notified": True
                    }
                ],
                "failed": []
            }
        }


class ReissueResultDTO(BaseModel):
    """Response DTO for reissuing an invoice"""

    invoice_id: str
    status: str
    superseded_ledger_id: Optional[int] = None
    superseded_number: Optional[str] = None
    superseded_at: Optional[datetime] = None


class CategoryStatsDTO(BaseModel):
    count: int = 0
    amount: Decimal = Decimal("0")


class IssuedStatsDTO(BaseModel):
    """Statistics over issued invoices of a period"""

    total_count: int
    total_amount: Decimal
    by_source_category: Dict[str, CategoryStatsDTO] = Field(default_factory=dict)


class WorkspaceSummaryDTO(BaseModel):
    """Headline numbers of an invoicing period"""

    year: int
    month: int
    state: str
    invoice_count: int
    line_item_count: int
    total_amount: Decimal
    approved_invoice_count: int
    issued_count: int
    issued_amount: Decimal
    selected_count: int
    selected_amount: Decimal


class IssuedInvoiceDTO(BaseModel):
    """Ledger entry as shown in the issued invoice history"""

    id: int
    source_invoice_id: str
    engagement_id: str
    engagement_name: str
    client_id: str
    client_name: str
    year: int
    month: int
    internal_number: str
    external_number: str
    external_id: Optional[str] = None
    external_url: Optional[str] = None
    line_items: List[Dict[str, Any]] = Field(default_factory=list)
    total_amount: Decimal
    currency: str
    issued_at: datetime
    issued_by: Optional[str] = None
    superseded_at: Optional[datetime] = None
    is_superseded: bool = False


class IssuedInvoiceHistoryDTO(BaseModel):
    """
    Response DTO for the issued invoice history of a year

    total_amount and count cover active (not superseded) entries only.
    """

    year: int
    count: int
    total_amount: Decimal
    available_years: List[int] = Field(default_factory=list)
    invoices: List[IssuedInvoiceDTO] = Field(default_factory=list)


class NextInvoiceNumberDTO(BaseModel):
    year: int
    invoice_number: str


class UnbilledItemDTO(BaseModel):
    """Pending one-off service waiting for an invoice"""

    service_id: str
    name: str
    price: Decimal
    currency: str
    engagement_id: str
    engagement_name: str
    client_id: Optional[str] = None
    client_name: str
    created_at: datetime
    days_since_created: int
    is_old: bool


class UnbilledItemsDTO(BaseModel):
    """Response DTO for the unbilled one-off overview"""

    count: int
    total_amount: Decimal
    old_count: int
    items: List[UnbilledItemDTO] = Field(default_factory=list)


class InvoiceLineDTO(BaseModel):
    """Line item DTO for proforma response"""

    id: str
    description: str
    quantity: Decimal
    unit_price: Decimal
    adjustment_amount: Decimal
    final_amount: Decimal

    @classmethod
    def from_line_item(cls, item: InvoiceLineItem) -> "InvoiceLineDTO":
        return cls(
            id=item.id,
            description=item.line_description,
            quantity=item.quantity,
            unit_price=item.unit_price,
            adjustment_amount=item.adjustment_amount,
            final_amount=item.final_amount,
        )


class ProformaInvoiceResponseDTO(BaseModel):
    """
    Response DTO for proforma invoice generation

    Contains invoice details and the PDF as base64-encoded string.
    """

    invoice_id: str
    engagement_name: str
    client_name: str
    status: str
    billing_period: str
    total_amount: Decimal
    currency: str
    line_items: List[InvoiceLineDTO] = Field(default_factory=list)
    pdf_base64: str = Field(..., description="PDF document encoded as base64")
    generated_at: datetime
