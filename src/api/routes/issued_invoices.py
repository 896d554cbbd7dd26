"""Issued Invoice API Routes

Read access to the issuance ledger and the unbilled one-off overview.
"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories import (
    SqlAlchemyClientRepository,
    SqlAlchemyEngagementRepository,
    SqlAlchemyEngagementServiceRepository,
    SqlAlchemyIssuedInvoiceRepository,
)
from src.api.error import ClientError
from src.app.use_cases.invoicing import (
    GetNextInvoiceNumber,
    IssuedInvoiceHistoryDTO,
    ListIssuedInvoices,
    ListUnbilledItems,
    NextInvoiceNumberDTO,
    UnbilledItemsDTO,
)
from src.depends import get_config, get_session

router = APIRouter(prefix="/invoicing", tags=["Issued Invoices"])


@router.get("/issued", response_model=IssuedInvoiceHistoryDTO)
async def list_issued_invoices(
    year: Optional[int] = Query(default=None, ge=2000, le=2100, description="Billing year (default: current)"),
    session: AsyncSession = Depends(get_session),
    config=Depends(get_config),
):
    """
    Issued invoice history of a year.

    Entries are newest first. Superseded entries (reissued invoices) are
    listed with `is_superseded`; `count` and `total_amount` cover active
    entries only.
    """
    use_case = ListIssuedInvoices(
        SqlAlchemyIssuedInvoiceRepository(session, config.INVOICE_NUMBER_PREFIX)
    )
    result = await use_case.execute(year or date.today().year)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("/issued/next-number", response_model=NextInvoiceNumberDTO)
async def get_next_invoice_number(
    year: Optional[int] = Query(default=None, ge=2000, le=2100),
    session: AsyncSession = Depends(get_session),
    config=Depends(get_config),
):
    use_case = GetNextInvoiceNumber(
        SqlAlchemyIssuedInvoiceRepository(session, config.INVOICE_NUMBER_PREFIX)
    )
    result = await use_case.execute(year or date.today().year)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("/unbilled", response_model=UnbilledItemsDTO)
async def list_unbilled_items(
    session: AsyncSession = Depends(get_session),
    config=Depends(get_config),
):
    """One-off services still waiting to be invoiced, oldest first."""
    use_case = ListUnbilledItems(
        service_repo=SqlAlchemyEngagementServiceRepository(session),
        engagement_repo=SqlAlchemyEngagementRepository(session),
        client_repo=SqlAlchemyClientRepository(session),
        age_warning_days=config.UNBILLED_ITEM_AGE_WARNING_DAYS,
        missing_reference_placeholder=config.MISSING_REFERENCE_PLACEHOLDER,
        default_currency=config.DEFAULT_CURRENCY,
    )
    result = await use_case.execute()
    if result.is_err():
        raise ClientError(result.error)
    return result.value
