import pytest_asyncio
from datetime import date, datetime
from decimal import Decimal
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.invoicing_provider import SimulatedInvoicingProvider
from src.depends import get_session
from src.domain.client import Client
from src.domain.credit_package import CreditPackageMonth
from src.domain.engagement import Engagement, EngagementStatus, EngagementType
from src.domain.engagement_service import BillingType, EngagementService, OneOffInvoicingStatus
from src.domain.extra_work import ExtraWork, ExtraWorkStatus


class IntegrationConfig(ApplicationConfig):
    AUTO_CREATE_TABLES = False
    ENABLE_SENTRY = 0
    ISSUANCE_SIMULATED_DELAY_SECONDS = 0
    ISSUANCE_RETRY_BACKOFF_SECONDS = 0
    ISSUANCE_NOTIFICATION_WEBHOOK = None


@pytest_asyncio.fixture(scope="function")
async def engine():
    """In-memory SQLite engine shared by every session of a test"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    """Create a new database session for each test"""
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
async def seed_data(db_session):
    """
    CRM data for January 2024

    - client-1 (brand Kavárna): eng-1 retainer from 2023-06-01 with a 50000
      monthly service, a ready extra work item and a pending one-off logo
    - client-2: eng-2 retainer starting 2024-01-10 with a 31000 service and a
      Creative Boost package of 20 credits at 1000
    - eng-3: completed retainer, never billed
    """
    db_session.add_all(
        [
            Client(id="client-1", name="Kavárna Praha s.r.o.", brand_name="Kavárna"),
            Client(id="client-2", name="Pekárna Brno a.s."),
            Engagement(
                id="eng-1", client_id="client-1", name="Správa sociálních sítí",
                type=EngagementType.RETAINER, status=EngagementStatus.ACTIVE,
                monthly_fee=Decimal("50000"), currency="CZK", start_date=date(2023, 6, 1),
            ),
            Engagement(
                id="eng-2", client_id="client-2", name="Výkonnostní marketing",
                type=EngagementType.RETAINER, status=EngagementStatus.ACTIVE,
                monthly_fee=Decimal("31000"), currency="CZK", start_date=date(2024, 1, 10),
            ),
            Engagement(
                id="eng-3", client_id="client-2", name="Starý kontrakt",
                type=EngagementType.RETAINER, status=EngagementStatus.COMPLETED,
                monthly_fee=Decimal("10000"), currency="CZK",
                start_date=date(2022, 1, 1), end_date=date(2023, 12, 31),
            ),
            EngagementService(
                id="svc-1", engagement_id="eng-1", name="Social media management",
                price=Decimal("50000"), currency="CZK", billing_type=BillingType.MONTHLY,
                created_at=datetime(2023, 6, 1),
            ),
            EngagementService(
                id="svc-logo", engagement_id="eng-1", name="Logo",
                price=Decimal("15000"), currency="CZK", billing_type=BillingType.ONE_OFF,
                invoicing_status=OneOffInvoicingStatus.PENDING,
                created_at=datetime(2023, 11, 1),
            ),
            EngagementService(
                id="svc-2", engagement_id="eng-2", name="PPC kampaně",
                price=Decimal("31000"), currency="CZK", billing_type=BillingType.MONTHLY,
                created_at=datetime(2024, 1, 10),
            ),
            EngagementService(
                id="svc-cb", engagement_id="eng-2", name="Creative Boost",
                price=Decimal("20000"), currency="CZK", billing_type=BillingType.MONTHLY,
                creative_boost_max_credits=20, creative_boost_price_per_credit=Decimal("1000"),
                created_at=datetime(2024, 1, 10),
            ),
            EngagementService(
                id="svc-old", engagement_id="eng-3", name="Old service",
                price=Decimal("10000"), currency="CZK", billing_type=BillingType.MONTHLY,
                created_at=datetime(2022, 1, 1),
            ),
            ExtraWork(
                id="ew-1", client_id="client-1", engagement_id="eng-1", name="Banner",
                amount=Decimal("8000"), currency="CZK",
                hours_worked=Decimal("8"), hourly_rate=Decimal("1000"),
                work_date=date(2024, 1, 5), billing_period="2024-01",
                status=ExtraWorkStatus.READY_TO_INVOICE,
            ),
            ExtraWork(
                id="ew-2", client_id="client-1", engagement_id="eng-1", name="Video",
                amount=Decimal("5000"), currency="CZK",
                work_date=date(2024, 1, 20), billing_period="2024-01",
                status=ExtraWorkStatus.IN_PROGRESS,
            ),
            CreditPackageMonth(
                id="cb-client-2-2024-1", client_id="client-2", year=2024, month=1,
                max_credits=20, used_credits=7, price_per_credit=Decimal("1000"),
            ),
        ]
    )
    await db_session.commit()


@pytest_asyncio.fixture
async def app(db_session):
    """Application wired to the test session and a deterministic provider"""
    from src.api.app import create_app

    app = create_app(IntegrationConfig)
    app.state.invoicing_provider = SimulatedInvoicingProvider(
        IntegrationConfig.INVOICING_PROVIDER_URL, start_sequence=1001
    )

    # Override the session dependency to use test session
    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session
    return app


@pytest_asyncio.fixture
async def client(app):
    """Create test client with database session override"""
    # Use ASGITransport for httpx AsyncClient
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
