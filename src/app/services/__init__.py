from .unit_of_work import UnitOfWork
from .notification_service import IssuanceNotifier
from .invoicing_provider import InvoicingProvider, InvoicingProviderError, ProviderInvoice
from .pdf_service import PdfService

__all__ = [
    "UnitOfWork",
    "IssuanceNotifier",
    "InvoicingProvider",
    "InvoicingProviderError",
    "ProviderInvoice",
    "PdfService",
]
