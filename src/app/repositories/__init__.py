from .client_repository import ClientRepository
from .engagement_repository import EngagementRepository
from .engagement_service_repository import EngagementServiceRepository
from .extra_work_repository import ExtraWorkRepository
from .credit_package_repository import CreditPackageRepository
from .issued_invoice_repository import IssuedInvoiceRepository

__all__ = [
    "ClientRepository",
    "EngagementRepository",
    "EngagementServiceRepository",
    "ExtraWorkRepository",
    "CreditPackageRepository",
    "IssuedInvoiceRepository",
]
