"""Unit tests for IssueInvoices use case

Tests cover:
- Approval gate and batch validation
- Ledger entry, source updates and notification per invoice
- Provider retries with exponential backoff
- Busy flag of the period and the edit lock it puts on the workspace
"""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.services.invoicing_provider import InvoicingProviderError, ProviderInvoice
from src.app.use_cases.invoicing.assembler import InvoiceAssembler
from src.app.use_cases.invoicing.dtos import IssueInvoicesCommandDTO, LineItemPatchDTO
from src.app.use_cases.invoicing.issue_invoices import IssueInvoices
from src.app.use_cases.invoicing.workspace import WorkspaceRegistry
from src.domain.client import Client
from src.domain.engagement_service import BillingType, OneOffInvoicingStatus
from src.domain.extra_work import ExtraWorkStatus
from src.domain.invoice import InvoiceStatus

INVOICE_ID = "inv-eng-1-2024-1"


def provider_invoice(number="2024-1001"):
    return ProviderInvoice(
        invoice_number=number,
        external_id="1706745600000-1",
        external_url="https://invoicing.example.com/invoices/1706745600000-1",
    )


@pytest.fixture
def registry(make_engagement, make_service, make_extra_work):
    """Registry with January 2024 generated: service, extra work and one-off lines"""
    registry = WorkspaceRegistry()
    one_off = make_service(
        service_id="svc-logo",
        name="Logo",
        price=Decimal("15000"),
        billing_type=BillingType.ONE_OFF,
        invoicing_status=OneOffInvoicingStatus.PENDING,
    )
    invoices = InvoiceAssembler().assemble(
        year=2024,
        month=1,
        contracts=[make_engagement()],
        services={"eng-1": [make_service()]},
        extra_work={"eng-1": [make_extra_work()]},
        one_offs={"eng-1": [one_off]},
        credit_packages={},
    )
    registry.get(2024, 1).load_generated(invoices)
    return registry


@pytest.fixture
def workspace(registry):
    return registry.get(2024, 1)


@pytest.fixture
def mock_issued_invoice_repo():
    repo = MagicMock()
    repo.get_next_invoice_number = AsyncMock(return_value="FV-2024-001")
    repo.add = AsyncMock(side_effect=lambda entry: entry)
    return repo


@pytest.fixture
def mock_extra_work_repo(make_extra_work):
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=make_extra_work())
    repo.update = AsyncMock(side_effect=lambda work: work)
    return repo


@pytest.fixture
def mock_service_repo(make_service):
    repo = MagicMock()
    repo.get_by_id = AsyncMock(
        return_value=make_service(
            service_id="svc-logo",
            billing_type=BillingType.ONE_OFF,
            invoicing_status=OneOffInvoicingStatus.PENDING,
        )
    )
    repo.update = AsyncMock(side_effect=lambda service: service)
    return repo


@pytest.fixture
def mock_client_repo():
    repo = MagicMock()
    repo.get_by_id = AsyncMock(
        return_value=Client(id="client-1", name="Kavárna Praha s.r.o.", brand_name="Kavárna")
    )
    return repo


@pytest.fixture
def mock_provider():
    provider = MagicMock()
    provider.create_invoice = AsyncMock(return_value=provider_invoice())
    return provider


@pytest.fixture
def mock_notifier():
    notifier = MagicMock()
    notifier.send_invoice_issued = AsyncMock(return_value=True)
    return notifier


@pytest.fixture
def fake_sleep():
    return AsyncMock()


@pytest.fixture
def issue_use_case(
    mock_uow,
    mock_issued_invoice_repo,
    mock_extra_work_repo,
    mock_service_repo,
    mock_client_repo,
    mock_provider,
    mock_notifier,
    registry,
    fake_sleep,
):
    return IssueInvoices(
        uow=mock_uow,
        issued_invoice_repo=mock_issued_invoice_repo,
        extra_work_repo=mock_extra_work_repo,
        service_repo=mock_service_repo,
        client_repo=mock_client_repo,
        provider=mock_provider,
        notifier=mock_notifier,
        registry=registry,
        max_retries=3,
        retry_backoff_seconds=0.5,
        sleep=fake_sleep,
    )


def issue_command(invoice_ids=None, issued_by="jana@agency.cz"):
    return IssueInvoicesCommandDTO(year=2024, month=1, invoice_ids=invoice_ids, issued_by=issued_by)


@pytest.mark.asyncio
class TestIssueInvoicesSuccess:
    async def test_issue_selected_invoice(
        self, issue_use_case, workspace, mock_issued_invoice_repo, mock_provider, mock_uow, mock_notifier
    ):
        """
        Given: Selected invoice with every line approved
        When: Issuance runs without explicit ids
        Then: Ledger entry recorded with both numbers, invoice issued, commit once
        """
        # Arrange
        workspace.select_invoice(INVOICE_ID)

        # Act
        result = await issue_use_case.execute(issue_command())

        # Assert
        assert result.is_ok()
        outcome = result.value
        assert outcome.issued_count == 1
        assert outcome.issued_amount == Decimal("73000")
        assert outcome.failed == []

        info = outcome.issued[0]
        assert info.invoice_id == INVOICE_ID
        assert info.internal_number == "FV-2024-001"
        assert info.external_number == "2024-1001"
        assert info.notified is True

        entry = mock_issued_invoice_repo.add.call_args[0][0]
        assert entry.source_invoice_id == INVOICE_ID
        assert entry.client_name == "Kavárna"
        assert entry.issued_by == "jana@agency.cz"
        assert entry.total_amount == Decimal("73000")
        assert len(entry.line_items) == 3
        assert entry.line_items[0]["id"] == "li-svc-1-2024-1"

        mock_provider.create_invoice.assert_called_once()
        mock_uow.commit.assert_called_once()
        mock_notifier.send_invoice_issued.assert_called_once_with(entry)

        invoice = workspace.get_invoice(INVOICE_ID)
        assert invoice.status == InvoiceStatus.ISSUED
        assert invoice.issued_at is not None
        assert invoice.webhook_sent_at is not None
        assert workspace.selected_ids == []
        assert INVOICE_ID in workspace.issued_ids
        assert workspace.is_issuing is False

    async def test_sources_are_marked_invoiced(
        self, issue_use_case, workspace, mock_extra_work_repo, mock_service_repo
    ):
        workspace.select_invoice(INVOICE_ID)

        await issue_use_case.execute(issue_command())

        work = mock_extra_work_repo.update.call_args[0][0]
        assert work.status == ExtraWorkStatus.INVOICED
        assert work.invoice_id == INVOICE_ID
        assert work.invoice_number == "FV-2024-001"
        assert work.invoiced_at is not None

        service = mock_service_repo.update.call_args[0][0]
        assert service.invoicing_status == OneOffInvoicingStatus.INVOICED
        assert service.invoiced_in_period == "2024-01"
        assert service.invoice_id == INVOICE_ID

    async def test_missing_client_uses_placeholder(
        self, issue_use_case, workspace, mock_client_repo, mock_issued_invoice_repo
    ):
        mock_client_repo.get_by_id = AsyncMock(return_value=None)
        workspace.select_invoice(INVOICE_ID)

        await issue_use_case.execute(issue_command())

        entry = mock_issued_invoice_repo.add.call_args[0][0]
        assert entry.client_name == "—"

    async def test_notification_failure_does_not_undo_issuance(
        self, issue_use_case, workspace, mock_notifier
    ):
        mock_notifier.send_invoice_issued = AsyncMock(side_effect=Exception("Webhook down"))
        workspace.select_invoice(INVOICE_ID)

        result = await issue_use_case.execute(issue_command())

        assert result.value.issued_count == 1
        assert result.value.issued[0].notified is False
        assert workspace.get_invoice(INVOICE_ID).status == InvoiceStatus.ISSUED
        assert workspace.get_invoice(INVOICE_ID).webhook_sent_at is None

    async def test_simulated_delay_is_awaited(self, issue_use_case, workspace, fake_sleep):
        issue_use_case.simulated_delay_seconds = 0.8
        workspace.select_invoice(INVOICE_ID)

        await issue_use_case.execute(issue_command())

        fake_sleep.assert_called_once_with(0.8)


@pytest.mark.asyncio
class TestIssueInvoicesValidation:
    async def test_unapproved_items_block_the_batch(
        self, issue_use_case, mock_issued_invoice_repo, mock_provider
    ):
        """
        Given: Invoice with unapproved line items
        When: Issuance is requested for it explicitly
        Then: Nothing is issued and the invoice is reported
        """
        result = await issue_use_case.execute(issue_command(invoice_ids=[INVOICE_ID]))

        assert result.is_err()
        assert result.error.code == "UNAPPROVED_LINE_ITEMS"
        assert result.error.details == {"invoice_ids": [INVOICE_ID]}
        mock_provider.create_invoice.assert_not_called()
        mock_issued_invoice_repo.add.assert_not_called()

    async def test_empty_selection(self, issue_use_case):
        result = await issue_use_case.execute(issue_command())

        assert result.is_err()
        assert result.error.code == "NO_INVOICES_SELECTED"

    async def test_unknown_invoice(self, issue_use_case):
        result = await issue_use_case.execute(issue_command(invoice_ids=["inv-missing"]))

        assert result.error.code == "INVOICE_NOT_FOUND"

    async def test_issued_invoice_cannot_be_issued_again(self, issue_use_case, workspace):
        workspace.select_invoice(INVOICE_ID)
        await issue_use_case.execute(issue_command())

        result = await issue_use_case.execute(issue_command(invoice_ids=[INVOICE_ID]))

        assert result.error.code == "INVOICE_ALREADY_ISSUED"

    async def test_concurrent_issuance_is_rejected(self, issue_use_case, workspace, mock_provider):
        workspace.select_invoice(INVOICE_ID)
        workspace.is_issuing = True

        result = await issue_use_case.execute(issue_command())

        assert result.error.code == "ISSUANCE_IN_PROGRESS"
        mock_provider.create_invoice.assert_not_called()

    async def test_invoice_without_lines_is_rejected(
        self, issue_use_case, workspace, mock_provider, mock_issued_invoice_repo
    ):
        """
        Given: Invoice whose line items were all removed
        When: Issuance is requested for it
        Then: EMPTY_INVOICE, provider never called, nothing recorded
        """
        # Arrange
        for item in list(workspace.get_invoice(INVOICE_ID).line_items):
            workspace.remove_line_item(INVOICE_ID, item.id)

        # Act
        result = await issue_use_case.execute(issue_command(invoice_ids=[INVOICE_ID]))

        # Assert
        assert result.is_err()
        assert result.error.code == "EMPTY_INVOICE"
        mock_provider.create_invoice.assert_not_called()
        mock_issued_invoice_repo.add.assert_not_called()


@pytest.mark.asyncio
class TestIssueInvoicesProviderRetry:
    async def test_transient_provider_errors_are_retried(
        self, issue_use_case, workspace, mock_provider, fake_sleep
    ):
        mock_provider.create_invoice = AsyncMock(
            side_effect=[
                InvoicingProviderError("timeout"),
                InvoicingProviderError("timeout"),
                provider_invoice("2024-1002"),
            ]
        )
        workspace.select_invoice(INVOICE_ID)

        result = await issue_use_case.execute(issue_command())

        assert result.value.issued[0].external_number == "2024-1002"
        assert mock_provider.create_invoice.call_count == 3
        assert [c.args[0] for c in fake_sleep.call_args_list] == [0.5, 1.0]

    async def test_exhausted_retries_leave_invoice_draft(
        self, issue_use_case, workspace, mock_provider, mock_issued_invoice_repo, fake_sleep
    ):
        mock_provider.create_invoice = AsyncMock(side_effect=InvoicingProviderError("unavailable"))
        workspace.select_invoice(INVOICE_ID)

        result = await issue_use_case.execute(issue_command())

        assert result.is_ok()
        assert result.value.issued_count == 0
        failure = result.value.failed[0]
        assert failure.code == "PROVIDER_UNAVAILABLE"
        assert failure.attempts == 4
        assert [c.args[0] for c in fake_sleep.call_args_list] == [0.5, 1.0, 2.0]
        mock_issued_invoice_repo.add.assert_not_called()
        assert workspace.get_invoice(INVOICE_ID).status == InvoiceStatus.DRAFT
        assert workspace.is_issuing is False

    async def test_ledger_failure_rolls_back(
        self, issue_use_case, workspace, mock_issued_invoice_repo, mock_uow
    ):
        mock_issued_invoice_repo.add = AsyncMock(side_effect=Exception("Database error"))
        workspace.select_invoice(INVOICE_ID)

        result = await issue_use_case.execute(issue_command())

        assert result.value.failed[0].code == "ISSUE_INVOICE_FAILED"
        mock_uow.rollback.assert_called_once()
        mock_uow.commit.assert_not_called()
        assert workspace.get_invoice(INVOICE_ID).status == InvoiceStatus.DRAFT


@pytest.mark.asyncio
class TestIssueInvoicesWorkspaceLock:
    async def test_line_edit_during_issuance_is_rejected(
        self, issue_use_case, workspace, fake_sleep, mock_issued_invoice_repo
    ):
        """
        Given: Approved, selected invoice and a running issuance
        When: A line edit arrives while the simulated delay is awaited
        Then: The edit fails and the ledger records the approved content
        """
        # Arrange
        workspace.select_invoice(INVOICE_ID)
        issue_use_case.simulated_delay_seconds = 0.8
        edits = []

        def edit_while_issuing(delay):
            edits.append(
                workspace.update_line_item(
                    INVOICE_ID,
                    "li-svc-1-2024-1",
                    LineItemPatchDTO(is_approved=False, unit_price=Decimal("1")),
                )
            )

        fake_sleep.side_effect = edit_while_issuing

        # Act
        result = await issue_use_case.execute(issue_command())

        # Assert
        assert edits[0].error.code == "ISSUANCE_IN_PROGRESS"
        assert result.value.issued_count == 1
        entry = mock_issued_invoice_repo.add.call_args[0][0]
        assert [line["is_approved"] for line in entry.line_items] == [True, True, True]
        assert entry.total_amount == Decimal("73000")

    async def test_invoice_unapproved_after_validation_is_not_sent(
        self, issue_use_case, workspace, fake_sleep, mock_provider, mock_issued_invoice_repo
    ):
        # Arrange
        workspace.select_invoice(INVOICE_ID)
        issue_use_case.simulated_delay_seconds = 0.8

        def revoke_approval(delay):
            workspace.get_invoice(INVOICE_ID).line_items[0].is_approved = False

        fake_sleep.side_effect = revoke_approval

        # Act
        result = await issue_use_case.execute(issue_command())

        # Assert
        assert result.value.issued_count == 0
        failure = result.value.failed[0]
        assert failure.code == "UNAPPROVED_LINE_ITEMS"
        assert failure.attempts == 0
        mock_provider.create_invoice.assert_not_called()
        mock_issued_invoice_repo.add.assert_not_called()
        assert workspace.get_invoice(INVOICE_ID).status == InvoiceStatus.DRAFT

    async def test_lock_is_released_after_issuance(self, issue_use_case, workspace):
        workspace.select_invoice(INVOICE_ID)

        await issue_use_case.execute(issue_command())

        assert workspace.add_manual_item("inv-missing").error.code == "INVOICE_NOT_FOUND"
