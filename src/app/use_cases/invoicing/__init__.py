"""Invoicing use cases"""
from .generate_invoices import GenerateMonthlyInvoices, invoice_list_of
from .add_invoice import AddInvoiceForEngagement
from .issue_invoices import IssueInvoices
from .reissue_invoice import ReissueInvoice
from .list_issued_invoices import ListIssuedInvoices
from .next_invoice_number import GetNextInvoiceNumber
from .list_unbilled_items import ListUnbilledItems
from .generate_proforma import GenerateProforma
from .assembler import InvoiceAssembler
from .billable_sources import BillableSources, BillableSnapshot, CreditPackageSummary
from .workspace import InvoiceWorkspace, WorkspaceRegistry, WorkspaceState
from .dtos import (
    GenerateInvoicesCommandDTO,
    InvoiceListDTO,
    LineItemPatchDTO,
    NewInvoiceItemDTO,
    AddInvoiceCommandDTO,
    SelectionResultDTO,
    IssueInvoicesCommandDTO,
    IssuedInvoiceInfoDTO,
    FailedIssuanceDTO,
    IssueInvoicesResultDTO,
    ReissueResultDTO,
    CategoryStatsDTO,
    IssuedStatsDTO,
    WorkspaceSummaryDTO,
    IssuedInvoiceDTO,
    IssuedInvoiceHistoryDTO,
    NextInvoiceNumberDTO,
    UnbilledItemDTO,
    UnbilledItemsDTO,
    InvoiceLineDTO,
    ProformaInvoiceResponseDTO,
)

__all__ = [
    "GenerateMonthlyInvoices",
    "invoice_list_of",
    "AddInvoiceForEngagement",
    "IssueInvoices",
    "ReissueInvoice",
    "ListIssuedInvoices",
    "GetNextInvoiceNumber",
    "ListUnbilledItems",
    "GenerateProforma",
    "InvoiceAssembler",
    "BillableSources",
    "BillableSnapshot",
    "CreditPackageSummary",
    "InvoiceWorkspace",
    "WorkspaceRegistry",
    "WorkspaceState",
    "GenerateInvoicesCommandDTO",
    "InvoiceListDTO",
    "LineItemPatchDTO",
    "NewInvoiceItemDTO",
    "AddInvoiceCommandDTO",
    "SelectionResultDTO",
    "IssueInvoicesCommandDTO",
    "IssuedInvoiceInfoDTO",
    "FailedIssuanceDTO",
    "IssueInvoicesResultDTO",
    "ReissueResultDTO",
    "CategoryStatsDTO",
    "IssuedStatsDTO",
    "WorkspaceSummaryDTO",
    "IssuedInvoiceDTO",
    "IssuedInvoiceHistoryDTO",
    "NextInvoiceNumberDTO",
    "UnbilledItemDTO",
    "UnbilledItemsDTO",
    "InvoiceLineDTO",
    "ProformaInvoiceResponseDTO",
]
