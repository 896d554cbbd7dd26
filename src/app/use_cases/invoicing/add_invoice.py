"""AddInvoiceForEngagement Use Case

Adds a manual item for an engagement to the period, creating the
engagement's invoice when it has none yet.
"""

from libs.result import Result, Return, Error
from src.app.repositories.engagement_repository import EngagementRepository
from src.domain.invoice import MonthlyInvoice
from .dtos import AddInvoiceCommandDTO
from .workspace import WorkspaceRegistry


class AddInvoiceForEngagement:
    """
    Use Case: Add an invoice (or an item) for an engagement

    Business Rules:
    1. Engagement must exist
    2. Appends to the engagement's draft invoice of the period if present
    3. Otherwise creates inv-{engagement}-{year}-{month} with the item
    """

    def __init__(self, engagement_repo: EngagementRepository, registry: WorkspaceRegistry):
        self.engagement_repo = engagement_repo
        self.registry = registry

    async def execute(self, command: AddInvoiceCommandDTO) -> Result[MonthlyInvoice]:
        try:
            engagement = await self.engagement_repo.get_by_id(command.engagement_id)
            workspace = self.registry.get(command.year, command.month)
            return workspace.add_invoice(engagement, command.engagement_id, command.item)

        except Exception as e:
            return Return.err(
                Error(
                    code="ADD_INVOICE_FAILED",
                    message="Failed to add invoice",
                    reason=str(e),
                )
            )
