"""Invoicing API Routes

FastAPI routes for the monthly invoice workspace: generation, line item
editing, approval, selection, issuance and proforma previews.
"""

import base64
from fastapi import APIRouter, Depends, Path, status
from fastapi.responses import Response
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories import (
    SqlAlchemyClientRepository,
    SqlAlchemyCreditPackageRepository,
    SqlAlchemyEngagementRepository,
    SqlAlchemyEngagementServiceRepository,
    SqlAlchemyExtraWorkRepository,
    SqlAlchemyIssuedInvoiceRepository,
)
from src.adapter.services.pdf_service import ReportLabPdfService
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.api.schemas.invoicing_request import (
    AddInvoiceRequestSchema,
    IssueInvoicesRequestSchema,
    LineItemUpdateRequestSchema,
)
from src.app.services.invoicing_provider import InvoicingProvider
from src.app.services.notification_service import IssuanceNotifier
from src.app.use_cases.invoicing import (
    AddInvoiceCommandDTO,
    AddInvoiceForEngagement,
    BillableSources,
    GenerateInvoicesCommandDTO,
    GenerateMonthlyInvoices,
    GenerateProforma,
    InvoiceAssembler,
    InvoiceListDTO,
    IssueInvoices,
    IssueInvoicesCommandDTO,
    IssueInvoicesResultDTO,
    IssuedStatsDTO,
    LineItemPatchDTO,
    NewInvoiceItemDTO,
    ProformaInvoiceResponseDTO,
    ReissueInvoice,
    ReissueResultDTO,
    SelectionResultDTO,
    WorkspaceRegistry,
    WorkspaceSummaryDTO,
    invoice_list_of,
)
from src.app.use_cases.invoicing.workspace import InvoiceWorkspace
from src.depends import (
    get_config,
    get_invoicing_provider,
    get_issuance_notifier,
    get_session,
    get_workspace_registry,
)
from src.domain.invoice import MonthlyInvoice

router = APIRouter(prefix="/invoicing/{year}/{month}", tags=["Invoicing"])

YearPath = Path(..., ge=2000, le=2100, description="Billing year")
MonthPath = Path(..., ge=1, le=12, description="Billing month (1-12)")

NOT_FOUND_RESPONSE = {
    404: {
        "description": "Invoice or line item not found",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "INVOICE_NOT_FOUND",
                        "message": "Invoice inv-eng-1-2024-1 not found"
                    }
                }
            }
        }
    }
}
ISSUED_RESPONSE = {
    409: {
        "description": "Invoice already issued",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "INVOICE_ALREADY_ISSUED",
                        "message": "Invoice inv-eng-1-2024-1 has already been issued"
                    }
                }
            }
        }
    }
}


def _workspace(registry: WorkspaceRegistry, year: int, month: int) -> InvoiceWorkspace:
    return registry.get(year, month)


def _current_invoice(workspace: InvoiceWorkspace, invoice_id: str) -> MonthlyInvoice:
    return workspace.get_invoice(invoice_id)


async def _generate(
    year: int, month: int, regenerate: bool, session: AsyncSession,
    registry: WorkspaceRegistry, config,
) -> InvoiceListDTO:
    sources = BillableSources(
        engagement_repo=SqlAlchemyEngagementRepository(session),
        service_repo=SqlAlchemyEngagementServiceRepository(session),
        extra_work_repo=SqlAlchemyExtraWorkRepository(session),
        credit_package_repo=SqlAlchemyCreditPackageRepository(session),
        client_repo=SqlAlchemyClientRepository(session),
    )
    assembler = InvoiceAssembler(
        default_currency=config.DEFAULT_CURRENCY,
        full_charge_max_start_day=config.PRORATION_FULL_CHARGE_MAX_START_DAY,
    )
    use_case = GenerateMonthlyInvoices(sources, assembler, registry)
    result = await use_case.execute(
        GenerateInvoicesCommandDTO(year=year, month=month, regenerate=regenerate)
    )
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post("/generate", response_model=InvoiceListDTO)
async def generate_invoices(
    year: int = YearPath,
    month: int = MonthPath,
    session: AsyncSession = Depends(get_session),
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
    config=Depends(get_config),
):
    """
    Generate the draft invoices of a period from CRM data.

    User edits of the period are kept; the freshly generated set is stored
    and becomes current only after a regenerate.
    """
    return await _generate(year, month, False, session, registry, config)


@router.post("/regenerate", response_model=InvoiceListDTO)
async def regenerate_invoices(
    year: int = YearPath,
    month: int = MonthPath,
    session: AsyncSession = Depends(get_session),
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
    config=Depends(get_config),
):
    """Discard user edits of the period and generate again (issued invoices stay)."""
    return await _generate(year, month, True, session, registry, config)


@router.get("/invoices", response_model=InvoiceListDTO)
async def list_invoices(
    year: int = YearPath,
    month: int = MonthPath,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
):
    """Current invoices of the period (edited set when present)."""
    return invoice_list_of(_workspace(registry, year, month))


@router.get("/summary", response_model=WorkspaceSummaryDTO)
async def get_summary(
    year: int = YearPath,
    month: int = MonthPath,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
):
    return _workspace(registry, year, month).summary()


@router.get("/stats", response_model=IssuedStatsDTO)
async def get_issued_stats(
    year: int = YearPath,
    month: int = MonthPath,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
):
    """Issued invoice statistics of the period, split by line item source category."""
    return _workspace(registry, year, month).issued_stats()


@router.post(
    "/invoices",
    response_model=MonthlyInvoice,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"description": "Engagement not found"}},
)
async def add_invoice(
    request: AddInvoiceRequestSchema,
    year: int = YearPath,
    month: int = MonthPath,
    session: AsyncSession = Depends(get_session),
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
):
    """
    Add a manual item for an engagement.

    The item is appended to the engagement's draft invoice of the period, or a
    new invoice is created for it.
    """
    command = AddInvoiceCommandDTO(
        year=year,
        month=month,
        engagement_id=request.engagement_id,
        item=NewInvoiceItemDTO(
            description=request.description,
            amount=request.amount,
            hours=request.hours,
            hourly_rate=request.hourly_rate,
            currency=request.currency,
            is_reverse_charge=request.is_reverse_charge,
        ),
    )
    use_case = AddInvoiceForEngagement(SqlAlchemyEngagementRepository(session), registry)
    result = await use_case.execute(command)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.patch(
    "/invoices/{invoice_id}/items/{item_id}",
    response_model=MonthlyInvoice,
    responses={**NOT_FOUND_RESPONSE, **ISSUED_RESPONSE},
)
async def update_line_item(
    invoice_id: str,
    item_id: str,
    request: LineItemUpdateRequestSchema,
    year: int = YearPath,
    month: int = MonthPath,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
):
    """
    Edit a line item.

    Only the fields present in the body are changed. The line's final amount
    and the invoice totals are recomputed; the updated invoice is returned.
    """
    workspace = _workspace(registry, year, month)
    patch = LineItemPatchDTO(**request.model_dump(exclude_unset=True))
    result = workspace.update_line_item(invoice_id, item_id, patch)
    if result.is_err():
        raise ClientError(result.error)
    return _current_invoice(workspace, invoice_id)


@router.post(
    "/invoices/{invoice_id}/items",
    response_model=MonthlyInvoice,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND_RESPONSE, **ISSUED_RESPONSE},
)
async def add_manual_item(
    invoice_id: str,
    year: int = YearPath,
    month: int = MonthPath,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
):
    """Append an empty manual line item to an invoice."""
    workspace = _workspace(registry, year, month)
    result = workspace.add_manual_item(invoice_id)
    if result.is_err():
        raise ClientError(result.error)
    return _current_invoice(workspace, invoice_id)


@router.delete(
    "/invoices/{invoice_id}/items/{item_id}",
    response_model=MonthlyInvoice,
    responses={**NOT_FOUND_RESPONSE, **ISSUED_RESPONSE},
)
async def remove_line_item(
    invoice_id: str,
    item_id: str,
    year: int = YearPath,
    month: int = MonthPath,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
):
    workspace = _workspace(registry, year, month)
    result = workspace.remove_line_item(invoice_id, item_id)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post(
    "/invoices/{invoice_id}/items/{item_id}/duplicate",
    response_model=MonthlyInvoice,
    status_code=status.HTTP_201_CREATED,
    responses={**NOT_FOUND_RESPONSE, **ISSUED_RESPONSE},
)
async def duplicate_line_item(
    invoice_id: str,
    item_id: str,
    year: int = YearPath,
    month: int = MonthPath,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
):
    """Insert an unapproved copy of a line item right after it."""
    workspace = _workspace(registry, year, month)
    result = workspace.duplicate_line_item(invoice_id, item_id)
    if result.is_err():
        raise ClientError(result.error)
    return _current_invoice(workspace, invoice_id)


@router.post(
    "/invoices/{invoice_id}/duplicate",
    response_model=MonthlyInvoice,
    status_code=status.HTTP_201_CREATED,
    responses=NOT_FOUND_RESPONSE,
)
async def duplicate_invoice(
    invoice_id: str,
    year: int = YearPath,
    month: int = MonthPath,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
):
    """Copy an invoice with new ids; every copied line is unapproved."""
    result = _workspace(registry, year, month).duplicate_invoice(invoice_id)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.delete(
    "/invoices/{invoice_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**NOT_FOUND_RESPONSE, **ISSUED_RESPONSE},
)
async def remove_invoice(
    invoice_id: str,
    year: int = YearPath,
    month: int = MonthPath,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
):
    result = _workspace(registry, year, month).remove_invoice(invoice_id)
    if result.is_err():
        raise ClientError(result.error)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/invoices/{invoice_id}/approve",
    response_model=MonthlyInvoice,
    responses={**NOT_FOUND_RESPONSE, **ISSUED_RESPONSE},
)
async def approve_invoice(
    invoice_id: str,
    year: int = YearPath,
    month: int = MonthPath,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
):
    """Approve every line item of an invoice."""
    workspace = _workspace(registry, year, month)
    result = workspace.approve_all_items(invoice_id)
    if result.is_err():
        raise ClientError(result.error)
    return _current_invoice(workspace, invoice_id)


@router.post(
    "/invoices/{invoice_id}/select",
    response_model=SelectionResultDTO,
    responses={**NOT_FOUND_RESPONSE, **ISSUED_RESPONSE},
)
async def select_invoice(
    invoice_id: str,
    year: int = YearPath,
    month: int = MonthPath,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
):
    """Select an invoice for issuance; its unapproved items get approved."""
    workspace = _workspace(registry, year, month)
    result = workspace.select_invoice(invoice_id)
    if result.is_err():
        raise ClientError(result.error)
    return SelectionResultDTO(
        invoice_id=invoice_id,
        selected=True,
        auto_approved_count=result.value,
        selected_invoice_ids=workspace.selected_ids,
    )


@router.delete(
    "/invoices/{invoice_id}/select",
    response_model=SelectionResultDTO,
    responses=NOT_FOUND_RESPONSE,
)
async def deselect_invoice(
    invoice_id: str,
    year: int = YearPath,
    month: int = MonthPath,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
):
    workspace = _workspace(registry, year, month)
    result = workspace.deselect_invoice(invoice_id)
    if result.is_err():
        raise ClientError(result.error)
    return SelectionResultDTO(
        invoice_id=invoice_id,
        selected=False,
        selected_invoice_ids=workspace.selected_ids,
    )


@router.post("/selection/approved", response_model=InvoiceListDTO)
async def select_all_approved(
    year: int = YearPath,
    month: int = MonthPath,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
):
    """Select every fully approved draft invoice of the period."""
    workspace = _workspace(registry, year, month)
    result = workspace.select_all_approved()
    if result.is_err():
        raise ClientError(result.error)
    return invoice_list_of(workspace)


@router.delete("/selection", response_model=InvoiceListDTO)
async def clear_selection(
    year: int = YearPath,
    month: int = MonthPath,
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
):
    workspace = _workspace(registry, year, month)
    result = workspace.clear_selection()
    if result.is_err():
        raise ClientError(result.error)
    return invoice_list_of(workspace)


@router.post(
    "/issue",
    response_model=IssueInvoicesResultDTO,
    responses={
        **NOT_FOUND_RESPONSE,
        **ISSUED_RESPONSE,
        422: {
            "description": "Some line items are not approved",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "UNAPPROVED_LINE_ITEMS",
                            "message": "All line items must be approved before issuing: inv-eng-1-2024-1",
                            "details": {"invoice_ids": ["inv-eng-1-2024-1"]}
                        }
                    }
                }
            }
        },
    },
)
async def issue_invoices(
    request: IssueInvoicesRequestSchema,
    year: int = YearPath,
    month: int = MonthPath,
    session: AsyncSession = Depends(get_session),
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
    provider: InvoicingProvider = Depends(get_invoicing_provider),
    notifier: IssuanceNotifier = Depends(get_issuance_notifier),
    config=Depends(get_config),
):
    """
    Issue invoices.

    Issues the given invoice ids, or the current selection when none are
    given. Every line item of every invoice must be approved, otherwise
    nothing is issued.

    **Returns:**
    - 200: Per-invoice outcomes (provider failures are listed in `failed`)
    - 400: Nothing selected
    - 404: Unknown invoice
    - 409: Invoice already issued or issuance already running
    - 422: Unapproved line items
    """
    use_case = IssueInvoices(
        uow=SqlAlchemyUnitOfWork(session),
        issued_invoice_repo=SqlAlchemyIssuedInvoiceRepository(session, config.INVOICE_NUMBER_PREFIX),
        extra_work_repo=SqlAlchemyExtraWorkRepository(session),
        service_repo=SqlAlchemyEngagementServiceRepository(session),
        client_repo=SqlAlchemyClientRepository(session),
        provider=provider,
        notifier=notifier,
        registry=registry,
        simulated_delay_seconds=config.ISSUANCE_SIMULATED_DELAY_SECONDS,
        max_retries=config.ISSUANCE_MAX_RETRIES,
        retry_backoff_seconds=config.ISSUANCE_RETRY_BACKOFF_SECONDS,
        missing_reference_placeholder=config.MISSING_REFERENCE_PLACEHOLDER,
        issued_by_default=config.ISSUED_BY_DEFAULT,
    )
    result = await use_case.execute(
        IssueInvoicesCommandDTO(
            year=year,
            month=month,
            invoice_ids=request.invoice_ids,
            issued_by=request.issued_by,
        )
    )
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post(
    "/invoices/{invoice_id}/reissue",
    response_model=ReissueResultDTO,
    responses=NOT_FOUND_RESPONSE,
)
async def reissue_invoice(
    invoice_id: str,
    year: int = YearPath,
    month: int = MonthPath,
    session: AsyncSession = Depends(get_session),
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
    config=Depends(get_config),
):
    """Reopen an issued invoice as a draft; its ledger entry is marked superseded."""
    use_case = ReissueInvoice(
        uow=SqlAlchemyUnitOfWork(session),
        issued_invoice_repo=SqlAlchemyIssuedInvoiceRepository(session, config.INVOICE_NUMBER_PREFIX),
        registry=registry,
    )
    result = await use_case.execute(year, month, invoice_id)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


async def _proforma(
    year: int, month: int, invoice_id: str, session: AsyncSession,
    registry: WorkspaceRegistry, config,
) -> ProformaInvoiceResponseDTO:
    use_case = GenerateProforma(
        registry=registry,
        client_repo=SqlAlchemyClientRepository(session),
        pdf_service=ReportLabPdfService(),
        missing_reference_placeholder=config.MISSING_REFERENCE_PLACEHOLDER,
    )
    result = await use_case.execute(year, month, invoice_id)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get(
    "/invoices/{invoice_id}/proforma",
    response_model=ProformaInvoiceResponseDTO,
    responses=NOT_FOUND_RESPONSE,
)
async def get_proforma_invoice(
    invoice_id: str,
    year: int = YearPath,
    month: int = MonthPath,
    session: AsyncSession = Depends(get_session),
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
    config=Depends(get_config),
):
    """
    Generate a proforma PDF of a draft invoice.

    **Returns:**
    - 200: Proforma with the PDF as base64
    - 400: Invoice is not a draft
    - 404: Invoice not found
    """
    return await _proforma(year, month, invoice_id, session, registry, config)


@router.get(
    "/invoices/{invoice_id}/proforma/pdf",
    responses={
        200: {"content": {"application/pdf": {}}, "description": "PDF document"},
        **NOT_FOUND_RESPONSE,
    },
)
async def download_proforma_pdf(
    invoice_id: str,
    year: int = YearPath,
    month: int = MonthPath,
    session: AsyncSession = Depends(get_session),
    registry: WorkspaceRegistry = Depends(get_workspace_registry),
    config=Depends(get_config),
):
    """Download the proforma PDF of a draft invoice."""
    proforma = await _proforma(year, month, invoice_id, session, registry, config)
    return Response(
        content=base64.b64decode(proforma.pdf_base64),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="proforma-{invoice_id}.pdf"'},
    )
