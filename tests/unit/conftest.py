import pytest
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.domain.engagement import Engagement, EngagementStatus, EngagementType
from src.domain.engagement_service import BillingType, EngagementService, OneOffInvoicingStatus
from src.domain.extra_work import ExtraWork, ExtraWorkStatus


@pytest.fixture
def mock_uow():
    """Mock unit of work"""
    uow = MagicMock()
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def make_engagement():
    def _make(
        engagement_id="eng-1",
        client_id="client-1",
        start_date=date(2023, 6, 1),
        end_date=None,
        name="Správa sociálních sítí",
        status=EngagementStatus.ACTIVE,
        type=EngagementType.RETAINER,
    ):
        return Engagement(
            id=engagement_id,
            client_id=client_id,
            name=name,
            type=type,
            status=status,
            monthly_fee=Decimal("50000"),
            currency="CZK",
            start_date=start_date,
            end_date=end_date,
        )
    return _make


@pytest.fixture
def make_service():
    def _make(
        service_id="svc-1",
        engagement_id="eng-1",
        name="Social media management",
        price=Decimal("50000"),
        billing_type=BillingType.MONTHLY,
        creative_boost_max_credits=None,
        invoicing_status=OneOffInvoicingStatus.NOT_APPLICABLE,
        created_at=None,
    ):
        return EngagementService(
            id=service_id,
            engagement_id=engagement_id,
            name=name,
            price=price,
            currency="CZK",
            billing_type=billing_type,
            is_active=True,
            creative_boost_max_credits=creative_boost_max_credits,
            invoicing_status=invoicing_status,
            created_at=created_at or datetime(2024, 1, 1),
        )
    return _make


@pytest.fixture
def make_extra_work():
    def _make(
        work_id="ew-1",
        engagement_id="eng-1",
        amount=Decimal("8000"),
        work_date=date(2024, 1, 5),
        billing_period="2024-01",
    ):
        return ExtraWork(
            id=work_id,
            client_id="client-1",
            engagement_id=engagement_id,
            name="Banner",
            amount=amount,
            currency="CZK",
            hours_worked=Decimal("8"),
            hourly_rate=Decimal("1000"),
            work_date=work_date,
            billing_period=billing_period,
            status=ExtraWorkStatus.READY_TO_INVOICE,
        )
    return _make
