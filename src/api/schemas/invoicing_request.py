"""Request schemas for Invoicing API

Pydantic models for validating incoming HTTP requests.
"""

from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class LineItemUpdateRequestSchema(BaseModel):
    """
    Request schema for editing a line item

    Used for PATCH /invoicing/{year}/{month}/invoices/{invoice_id}/items/{item_id}.
    Omitted fields are left unchanged.
    """

    line_description: Optional[str] = Field(default=None, min_length=1)
    unit_price: Optional[Decimal] = None
    quantity: Optional[Decimal] = Field(default=None, ge=0)
    adjustment_amount: Optional[Decimal] = None
    adjustment_reason: Optional[str] = None
    note: Optional[str] = None
    is_approved: Optional[bool] = None
    hours: Optional[Decimal] = Field(default=None, ge=0)
    hourly_rate: Optional[Decimal] = Field(default=None, ge=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    is_reverse_charge: Optional[bool] = None

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v):
        return v.upper() if v else v

    class Config:
        json_schema_extra = {
            "example": {
                "unit_price": "45000",
                "adjustment_amount": "-2000",
                "adjustment_reason": "Kompenzace za výpadek",
                "is_approved": True
            }
        }


class AddInvoiceRequestSchema(BaseModel):
    """
    Request schema for adding an invoice for an engagement

    Used for POST /invoicing/{year}/{month}/invoices.
    """

    engagement_id: str = Field(..., min_length=1, description="Engagement to invoice")
    description: str = Field(..., min_length=1, description="Line description")
    amount: Decimal = Field(..., description="Item amount")
    hours: Optional[Decimal] = Field(default=None, ge=0)
    hourly_rate: Optional[Decimal] = Field(default=None, ge=0)
    currency: str = Field(default="CZK", min_length=3, max_length=3)
    is_reverse_charge: bool = Field(default=False)

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v):
        return v.upper()

    class Config:
        json_schema_extra = {
            "example": {
                "engagement_id": "eng-1",
                "description": "Správa kampaní - mimořádná kampaň",
                "amount": "12000",
                "currency": "CZK"
            }
        }


class IssueInvoicesRequestSchema(BaseModel):
    """
    Request schema for issuing invoices

    Used for POST /invoicing/{year}/{month}/issue. Without invoice_ids the
    current selection is issued.
    """

    invoice_ids: Optional[List[str]] = Field(default=None)
    issued_by: Optional[str] = Field(default=None, min_length=1)

    @field_validator("invoice_ids")
    @classmethod
    def non_empty_ids(cls, v):
        if v is not None and any(not i for i in v):
            raise ValueError("Invoice ids must be non-empty")
        return v
