"""Unit tests for GenerateMonthlyInvoices use case

Tests cover:
- Loading sources and assembling drafts
- Edit precedence across generations
- Busy period and failure handling
"""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.invoicing.assembler import InvoiceAssembler
from src.app.use_cases.invoicing.billable_sources import BillableSnapshot, BillableSources
from src.app.use_cases.invoicing.dtos import GenerateInvoicesCommandDTO, LineItemPatchDTO
from src.app.use_cases.invoicing.generate_invoices import GenerateMonthlyInvoices
from src.app.use_cases.invoicing.workspace import WorkspaceRegistry
from src.domain.credit_package import CreditPackageMonth
from src.domain.engagement_service import BillingType


@pytest.fixture
def registry():
    return WorkspaceRegistry()


@pytest.fixture
def mock_sources():
    """Mock billable sources"""
    return MagicMock()


@pytest.fixture
def generate_use_case(mock_sources, registry):
    return GenerateMonthlyInvoices(
        sources=mock_sources,
        assembler=InvoiceAssembler(),
        registry=registry,
    )


@pytest.fixture
def january_snapshot(make_engagement, make_service):
    def _snapshot(price=Decimal("50000")):
        return BillableSnapshot(
            year=2024,
            month=1,
            contracts=[make_engagement()],
            services={"eng-1": [make_service(price=price)]},
        )
    return _snapshot


@pytest.mark.asyncio
class TestGenerateMonthlyInvoices:
    async def test_generates_draft_invoices(self, generate_use_case, mock_sources, january_snapshot):
        """
        Given: One active retainer with a 50000 service
        When: Invoices of January 2024 are generated
        Then: One draft invoice with the full amount is returned
        """
        # Arrange
        mock_sources.load = AsyncMock(return_value=january_snapshot())

        # Act
        result = await generate_use_case.execute(GenerateInvoicesCommandDTO(year=2024, month=1))

        # Assert
        assert result.is_ok()
        listing = result.value
        assert listing.state == "pristine"
        assert listing.invoice_count == 1
        assert listing.total_amount == Decimal("50000")
        assert listing.invoices[0].id == "inv-eng-1-2024-1"
        assert listing.generated_at is not None
        mock_sources.load.assert_called_once_with(2024, 1)

    async def test_generation_keeps_user_edits(self, generate_use_case, mock_sources, registry, january_snapshot):
        mock_sources.load = AsyncMock(return_value=january_snapshot())
        await generate_use_case.execute(GenerateInvoicesCommandDTO(year=2024, month=1))
        registry.get(2024, 1).update_line_item(
            "inv-eng-1-2024-1", "li-svc-1-2024-1", LineItemPatchDTO(unit_price=Decimal("40000"))
        )
        mock_sources.load = AsyncMock(return_value=january_snapshot(price=Decimal("60000")))

        result = await generate_use_case.execute(GenerateInvoicesCommandDTO(year=2024, month=1))

        assert result.value.state == "user_edited"
        assert result.value.total_amount == Decimal("40000")

    async def test_regenerate_discards_user_edits(self, generate_use_case, mock_sources, registry, january_snapshot):
        mock_sources.load = AsyncMock(return_value=january_snapshot())
        await generate_use_case.execute(GenerateInvoicesCommandDTO(year=2024, month=1))
        registry.get(2024, 1).update_line_item(
            "inv-eng-1-2024-1", "li-svc-1-2024-1", LineItemPatchDTO(unit_price=Decimal("40000"))
        )
        mock_sources.load = AsyncMock(return_value=january_snapshot(price=Decimal("60000")))

        result = await generate_use_case.execute(
            GenerateInvoicesCommandDTO(year=2024, month=1, regenerate=True)
        )

        assert result.value.state == "pristine"
        assert result.value.total_amount == Decimal("60000")

    async def test_blocked_while_issuing(self, generate_use_case, mock_sources, registry):
        registry.get(2024, 1).is_issuing = True
        mock_sources.load = AsyncMock()

        result = await generate_use_case.execute(GenerateInvoicesCommandDTO(year=2024, month=1))

        assert result.is_err()
        assert result.error.code == "ISSUANCE_IN_PROGRESS"
        mock_sources.load.assert_not_called()

    async def test_source_failure_returns_error(self, generate_use_case, mock_sources):
        mock_sources.load = AsyncMock(side_effect=Exception("Database unavailable"))

        result = await generate_use_case.execute(GenerateInvoicesCommandDTO(year=2024, month=1))

        assert result.is_err()
        assert result.error.code == "GENERATE_INVOICES_FAILED"
        assert "Database unavailable" in result.error.reason


@pytest.mark.asyncio
class TestBillableSources:
    """BillableSources gathering against mocked repositories"""

    async def test_load_groups_sources_by_contract(self, make_engagement, make_service, make_extra_work):
        engagement_repo = MagicMock()
        engagement_repo.list_active_retainers = AsyncMock(return_value=[make_engagement()])
        service_repo = MagicMock()
        service_repo.list_for_engagement = AsyncMock(
            return_value=[
                make_service(),
                make_service(service_id="svc-once", billing_type=BillingType.ONE_OFF),
            ]
        )
        one_off = make_service(service_id="svc-logo", billing_type=BillingType.ONE_OFF)
        service_repo.list_unbilled_one_offs = AsyncMock(return_value=[one_off])
        extra_work_repo = MagicMock()
        extra_work_repo.get_ready_to_invoice = AsyncMock(
            return_value=[make_extra_work(), make_extra_work(work_id="ew-orphan", engagement_id=None)]
        )
        credit_package_repo = MagicMock()
        credit_package_repo.get_for_client_month = AsyncMock(
            return_value=CreditPackageMonth(
                client_id="client-1", year=2024, month=1,
                max_credits=20, used_credits=5, price_per_credit=Decimal("1000"),
            )
        )
        sources = BillableSources(
            engagement_repo, service_repo, extra_work_repo, credit_package_repo, MagicMock()
        )

        snapshot = await sources.load(2024, 1)

        assert [s.id for s in snapshot.services["eng-1"]] == ["svc-1"]
        assert [w.id for w in snapshot.extra_work["eng-1"]] == ["ew-1"]
        assert [s.id for s in snapshot.one_offs["eng-1"]] == ["svc-logo"]
        assert snapshot.credit_packages["client-1"].invoice_amount == Decimal("20000")

    async def test_package_without_positive_amount_is_ignored(self):
        credit_package_repo = MagicMock()
        credit_package_repo.get_for_client_month = AsyncMock(
            return_value=CreditPackageMonth(
                client_id="client-1", year=2024, month=1,
                max_credits=20, invoice_amount=Decimal("0"),
            )
        )
        sources = BillableSources(MagicMock(), MagicMock(), MagicMock(), credit_package_repo, MagicMock())

        assert await sources.get_package_invoice_amount("client-1", 2024, 1) is None
