"""Billable Source Adapters

Read-only accessors that gather everything the assembler needs for one
billing period from the CRM repositories.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional
from src.app.repositories.client_repository import ClientRepository
from src.app.repositories.credit_package_repository import CreditPackageRepository
from src.app.repositories.engagement_repository import EngagementRepository
from src.app.repositories.engagement_service_repository import EngagementServiceRepository
from src.app.repositories.extra_work_repository import ExtraWorkRepository
from src.domain.client import Client
from src.domain.engagement import Engagement
from src.domain.engagement_service import BillingType, EngagementService
from src.domain.extra_work import ExtraWork

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreditPackageSummary:
    """Creative Boost package billed for a client in a month"""

    max_credits: int
    used_credits: int
    invoice_amount: Decimal


@dataclass
class BillableSnapshot:
    """
    All billable inputs of one period

    contracts keep repository order (start date, then id); the order decides
    which contract of a client receives the credit package line.
    """

    year: int
    month: int
    contracts: List[Engagement] = field(default_factory=list)
    services: Dict[str, List[EngagementService]] = field(default_factory=dict)
    extra_work: Dict[str, List[ExtraWork]] = field(default_factory=dict)
    one_offs: Dict[str, List[EngagementService]] = field(default_factory=dict)
    credit_packages: Dict[str, CreditPackageSummary] = field(default_factory=dict)


class BillableSources:
    """Facade over the CRM repositories used for invoice generation"""

    def __init__(
        self,
        engagement_repo: EngagementRepository,
        service_repo: EngagementServiceRepository,
        extra_work_repo: ExtraWorkRepository,
        credit_package_repo: CreditPackageRepository,
        client_repo: ClientRepository,
    ):
        self.engagement_repo = engagement_repo
        self.service_repo = service_repo
        self.extra_work_repo = extra_work_repo
        self.credit_package_repo = credit_package_repo
        self.client_repo = client_repo

    async def list_active_retainer_contracts(self) -> List[Engagement]:
        contracts = await self.engagement_repo.list_active_retainers()
        return [c for c in contracts if c.is_billable_retainer]

    async def list_services_for_contract(self, engagement_id: str) -> List[EngagementService]:
        """Active monthly services of a contract"""
        services = await self.service_repo.list_for_engagement(engagement_id)
        return [
            s for s in services
            if s.is_active and s.billing_type == BillingType.MONTHLY
        ]

    async def get_ready_to_invoice(self, year: int, month: int) -> List[ExtraWork]:
        return await self.extra_work_repo.get_ready_to_invoice(year, month)

    async def get_unbilled_one_off_services(self) -> List[EngagementService]:
        return await self.service_repo.list_unbilled_one_offs()

    async def get_package_invoice_amount(
        self, client_id: str, year: int, month: int
    ) -> Optional[CreditPackageSummary]:
        """
        Creative Boost package amount of a client for a month

        Returns:
            CreditPackageSummary, or None when the client has no package or
            its amount is not positive
        """
        package = await self.credit_package_repo.get_for_client_month(client_id, year, month)
        if package is None:
            return None
        amount = package.billable_amount
        if amount <= 0:
            return None
        return CreditPackageSummary(
            max_credits=package.max_credits,
            used_credits=package.used_credits,
            invoice_amount=amount,
        )

    async def get_client_by_id(self, client_id: str) -> Optional[Client]:
        return await self.client_repo.get_by_id(client_id)

    async def load(self, year: int, month: int) -> BillableSnapshot:
        """
        Gather every billable input of a period

        Extra work and one-off services without an engagement are dropped:
        they cannot be attributed to a contract invoice.
        """
        snapshot = BillableSnapshot(year=year, month=month)
        snapshot.contracts = await self.list_active_retainer_contracts()

        for contract in snapshot.contracts:
            snapshot.services[contract.id] = await self.list_services_for_contract(contract.id)
            if contract.client_id not in snapshot.credit_packages:
                package = await self.get_package_invoice_amount(contract.client_id, year, month)
                if package is not None:
                    snapshot.credit_packages[contract.client_id] = package

        extra_work: Dict[str, List[ExtraWork]] = defaultdict(list)
        for work in await self.get_ready_to_invoice(year, month):
            if not work.engagement_id:
                logger.warning(f"Extra work {work.id} has no engagement, skipping")
                continue
            extra_work[work.engagement_id].append(work)
        snapshot.extra_work = dict(extra_work)

        one_offs: Dict[str, List[EngagementService]] = defaultdict(list)
        for service in await self.get_unbilled_one_off_services():
            one_offs[service.engagement_id].append(service)
        snapshot.one_offs = dict(one_offs)

        logger.info(
            f"Loaded billable sources for {year}-{month:02d}: "
            f"{len(snapshot.contracts)} contracts, "
            f"{sum(len(v) for v in snapshot.extra_work.values())} extra work, "
            f"{sum(len(v) for v in snapshot.one_offs.values())} one-offs, "
            f"{len(snapshot.credit_packages)} credit packages"
        )
        return snapshot
