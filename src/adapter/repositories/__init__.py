from .client_repository import SqlAlchemyClientRepository
from .engagement_repository import SqlAlchemyEngagementRepository
from .engagement_service_repository import SqlAlchemyEngagementServiceRepository
from .extra_work_repository import SqlAlchemyExtraWorkRepository
from .credit_package_repository import SqlAlchemyCreditPackageRepository
from .issued_invoice_repository import SqlAlchemyIssuedInvoiceRepository

__all__ = [
    "SqlAlchemyClientRepository",
    "SqlAlchemyEngagementRepository",
    "SqlAlchemyEngagementServiceRepository",
    "SqlAlchemyExtraWorkRepository",
    "SqlAlchemyCreditPackageRepository",
    "SqlAlchemyIssuedInvoiceRepository",
]
