"""ListUnbilledItems Use Case

Overview of one-off services still waiting to be invoiced.
"""

from datetime import date
from decimal import Decimal
from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.client_repository import ClientRepository
from src.app.repositories.engagement_repository import EngagementRepository
from src.app.repositories.engagement_service_repository import EngagementServiceRepository
from .dtos import UnbilledItemDTO, UnbilledItemsDTO


class ListUnbilledItems:
    """
    Use Case: List unbilled one-off services

    Business Rules:
    1. Active one-off services with invoicing_status=pending
    2. Oldest first
    3. is_old when created more than age_warning_days ago
    4. Missing engagement or client names show the placeholder
    """

    def __init__(
        self,
        service_repo: EngagementServiceRepository,
        engagement_repo: EngagementRepository,
        client_repo: ClientRepository,
        age_warning_days: int = 60,
        missing_reference_placeholder: str = "—",
        default_currency: str = "CZK",
    ):
        self.service_repo = service_repo
        self.engagement_repo = engagement_repo
        self.client_repo = client_repo
        self.age_warning_days = age_warning_days
        self.missing_reference_placeholder = missing_reference_placeholder
        self.default_currency = default_currency

    async def execute(self, today: Optional[date] = None) -> Result[UnbilledItemsDTO]:
        today = today or date.today()
        try:
            services = await self.service_repo.list_unbilled_one_offs()

            engagements = await self.engagement_repo.get_by_ids(
                list({s.engagement_id for s in services})
            )
            engagements_by_id = {e.id: e for e in engagements}
            clients = await self.client_repo.get_by_ids(
                list({e.client_id for e in engagements})
            )
            clients_by_id = {c.id: c for c in clients}

            items = []
            for service in sorted(services, key=lambda s: (s.created_at, s.id)):
                engagement = engagements_by_id.get(service.engagement_id)
                client = clients_by_id.get(engagement.client_id) if engagement else None
                age = (today - service.created_at.date()).days
                items.append(
                    UnbilledItemDTO(
                        service_id=service.id,
                        name=service.name,
                        price=service.price,
                        currency=service.currency
                        or (engagement.currency if engagement else self.default_currency),
                        engagement_id=service.engagement_id,
                        engagement_name=engagement.name if engagement else self.missing_reference_placeholder,
                        client_id=engagement.client_id if engagement else None,
                        client_name=client.display_name if client else self.missing_reference_placeholder,
                        created_at=service.created_at,
                        days_since_created=age,
                        is_old=age > self.age_warning_days,
                    )
                )

            return Return.ok(
                UnbilledItemsDTO(
                    count=len(items),
                    total_amount=sum((item.price for item in items), Decimal("0")),
                    old_count=sum(1 for item in items if item.is_old),
                    items=items,
                )
            )

        except Exception as e:
            return Return.err(
                Error(
                    code="LIST_UNBILLED_ITEMS_FAILED",
                    message="Failed to list unbilled items",
                    reason=str(e),
                )
            )
