from .unit_of_work import SqlAlchemyUnitOfWork
from .invoicing_provider import SimulatedInvoicingProvider
from .notification_service import (
    LoggingIssuanceNotifier,
    WebhookIssuanceNotifier,
    CompositeIssuanceNotifier,
    create_issuance_notifier,
)
from .pdf_service import ReportLabPdfService

__all__ = [
    "SqlAlchemyUnitOfWork",
    "SimulatedInvoicingProvider",
    "LoggingIssuanceNotifier",
    "WebhookIssuanceNotifier",
    "CompositeIssuanceNotifier",
    "create_issuance_notifier",
    "ReportLabPdfService",
]
