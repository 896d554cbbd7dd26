from fastapi import Request
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.app.services.invoicing_provider import InvoicingProvider
from src.app.services.notification_service import IssuanceNotifier
from src.app.use_cases.invoicing.workspace import WorkspaceRegistry

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


# Process-wide state, created once in create_app

def get_workspace_registry(request: Request) -> WorkspaceRegistry:
    return request.app.state.workspace_registry


def get_invoicing_provider(request: Request) -> InvoicingProvider:
    return request.app.state.invoicing_provider


def get_issuance_notifier(request: Request) -> IssuanceNotifier:
    return request.app.state.issuance_notifier


def get_config(request: Request):
    return request.app.state.config
