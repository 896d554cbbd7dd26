import logging
from contextlib import asynccontextmanager
import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import SQLModel
from src.adapter.services.invoicing_provider import SimulatedInvoicingProvider
from src.adapter.services.notification_service import create_issuance_notifier
from src.api.error import register_error_handlers
from src.api.logging import RequestLoggingMiddleware, configure_logging
from src.api.routes import invoicing, issued_invoices
from src.app.use_cases.invoicing.workspace import WorkspaceRegistry
from src.depends import engine

logger = logging.getLogger(__name__)


def create_app(config) -> FastAPI:
    configure_logging(config.LOG_LEVEL)

    if config.ENABLE_SENTRY and config.DSN_SENTRY:
        sentry_sdk.init(dsn=config.DSN_SENTRY, environment=config.SENTRY_ENVIRONMENT)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if config.AUTO_CREATE_TABLES:
            async with engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)
        logger.info("Invoicing API started")
        yield
        await engine.dispose()

    app = FastAPI(
        title="Agency Invoicing API",
        description="Monthly invoice generation, line item reconciliation and issuance",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.workspace_registry = WorkspaceRegistry(config.DEFAULT_CURRENCY)
    app.state.invoicing_provider = SimulatedInvoicingProvider(config.INVOICING_PROVIDER_URL)
    app.state.issuance_notifier = create_issuance_notifier(config.ISSUANCE_NOTIFICATION_WEBHOOK)

    if config.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.CORS_ORIGINS,
            allow_credentials=config.CORS_ALLOW_CREDENTIALS,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if config.ENABLE_LOGGING_MIDDLEWARE:
        app.add_middleware(RequestLoggingMiddleware)

    register_error_handlers(app)

    app.include_router(invoicing.router, prefix=config.API_PREFIX)
    app.include_router(issued_invoices.router, prefix=config.API_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    return app
