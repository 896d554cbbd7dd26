from .base import BaseModel, generate_uuid
from .client import Client
from .engagement import Engagement, EngagementType, EngagementStatus
from .engagement_service import EngagementService, BillingType, OneOffInvoicingStatus
from .extra_work import ExtraWork, ExtraWorkStatus
from .credit_package import CreditPackageMonth
from .invoice_line import InvoiceLineItem, LineItemSource
from .invoice import MonthlyInvoice, InvoiceStatus, invoice_id_for, billing_period_of
from .issued_invoice import IssuedInvoice

__all__ = [
    "BaseModel",
    "generate_uuid",
    "Client",
    "Engagement",
    "EngagementType",
    "EngagementStatus",
    "EngagementService",
    "BillingType",
    "OneOffInvoicingStatus",
    "ExtraWork",
    "ExtraWorkStatus",
    "CreditPackageMonth",
    "InvoiceLineItem",
    "LineItemSource",
    "MonthlyInvoice",
    "InvoiceStatus",
    "invoice_id_for",
    "billing_period_of",
    "IssuedInvoice",
]
