"""Invoice Workspace

In-memory working set of one invoicing period: the generated invoices, the
user-edited copy, the selection and the issued set. Every mutation goes
through recalculate_invoice so line and invoice totals never drift.
"""

import logging
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple
from libs.result import Result, Return, Error
from src.domain.base import short_id
from src.domain.engagement import Engagement
from src.domain.invoice import MonthlyInvoice, InvoiceStatus, invoice_id_for
from src.domain.invoice_line import InvoiceLineItem, LineItemSource
from .dtos import (
    CategoryStatsDTO,
    IssuedStatsDTO,
    LineItemPatchDTO,
    NewInvoiceItemDTO,
    WorkspaceSummaryDTO,
)
from .proration import month_bounds

logger = logging.getLogger(__name__)

COPY_SUFFIX = " (kopie)"
NEW_ITEM_DESCRIPTION = "Nová položka"

# Line item fields that accept an explicit null in a patch
NULLABLE_PATCH_FIELDS = {"hours", "hourly_rate"}

# Issued statistics bucket per line item source
SOURCE_CATEGORIES = {
    LineItemSource.ENGAGEMENT: "retainer",
    LineItemSource.EXTRA_WORK: "extra_work",
    LineItemSource.CREATIVE_BOOST: "creative_boost",
    LineItemSource.ONE_OFF: "one_off",
    LineItemSource.MANUAL: "one_off",
}
STATS_CATEGORIES = ("retainer", "extra_work", "creative_boost", "one_off")


class WorkspaceState(str, Enum):
    """Whose invoices the workspace currently shows"""
    PRISTINE = "pristine"                           # Generated set, untouched
    USER_EDITED = "user_edited"                     # Edited set wins over regeneration
    REGENERATE_REQUESTED = "regenerate_requested"   # Next generation discards edits


def invoice_not_found(invoice_id: str) -> Error:
    return Error(
        code="INVOICE_NOT_FOUND",
        message=f"Invoice {invoice_id} not found",
        reason="Invoice is not part of the current period",
    )


def line_item_not_found(invoice_id: str, line_item_id: str) -> Error:
    return Error(
        code="LINE_ITEM_NOT_FOUND",
        message=f"Line item {line_item_id} not found on invoice {invoice_id}",
        reason="Line item does not exist",
    )


def invoice_already_issued(invoice_id: str) -> Error:
    return Error(
        code="INVOICE_ALREADY_ISSUED",
        message=f"Invoice {invoice_id} has already been issued",
        reason="Issued invoices are read-only until reissued",
    )


def invoice_not_issued(invoice_id: str) -> Error:
    return Error(
        code="INVOICE_NOT_ISSUED",
        message=f"Invoice {invoice_id} has not been issued",
        reason="Only issued invoices can be reissued",
    )


def issuance_in_progress(period: str) -> Error:
    return Error(
        code="ISSUANCE_IN_PROGRESS",
        message=f"Invoices of {period} are being issued, try again later",
        reason="The workspace is locked while issuance runs",
    )


def empty_invoice(invoice_id: str) -> Error:
    return Error(
        code="EMPTY_INVOICE",
        message=f"Invoice {invoice_id} has no line items",
        reason="An invoice without billable content cannot be issued",
    )


class InvoiceWorkspace:
    """
    Working set of invoices for one (year, month)

    Domain Rules:
    - current_invoices is the edited set once the user has edited anything
      (even if the edits removed every invoice), the generated set otherwise
    - Regeneration never overwrites user edits unless explicitly requested
    - Issued invoices are read-only and survive regeneration
    - Selecting an invoice approves all of its line items
    - Nothing can be mutated while the period is being issued
    """

    def __init__(self, year: int, month: int, default_currency: str = "CZK"):
        self.year = year
        self.month = month
        self.default_currency = default_currency
        self.state = WorkspaceState.PRISTINE
        self.generated_at: Optional[datetime] = None
        self.is_issuing = False
        self._generated: List[MonthlyInvoice] = []
        self._edited: List[MonthlyInvoice] = []
        self._selected: List[str] = []
        self._issued: Set[str] = set()

    # ------------------------------------------------------------------
    # Working set
    # ------------------------------------------------------------------

    @property
    def current_invoices(self) -> List[MonthlyInvoice]:
        if self.state == WorkspaceState.USER_EDITED:
            return self._edited
        return self._generated

    @property
    def generated_invoices(self) -> List[MonthlyInvoice]:
        return self._generated

    @property
    def has_user_edits(self) -> bool:
        return self.state == WorkspaceState.USER_EDITED

    def get_invoice(self, invoice_id: str) -> Optional[MonthlyInvoice]:
        return next((inv for inv in self.current_invoices if inv.id == invoice_id), None)

    def request_regeneration(self) -> None:
        """Discard user edits on the next load_generated call"""
        self.state = WorkspaceState.REGENERATE_REQUESTED

    def load_generated(self, invoices: List[MonthlyInvoice]) -> bool:
        """
        Store a freshly generated invoice set

        Already-issued invoices replace their regenerated counterpart (or are
        kept alongside when no counterpart exists).

        Returns:
            True if the new set became current, False if user edits were kept
        """
        issued = {
            inv.id: inv for inv in self._generated + self._edited if inv.id in self._issued
        }
        merged = [issued.pop(inv.id, inv) for inv in invoices]
        merged.extend(issued.values())

        self._generated = merged
        self.generated_at = datetime.utcnow()

        if self.state == WorkspaceState.USER_EDITED:
            logger.info(
                f"Workspace {self.period}: kept user edits, "
                f"{len(merged)} generated invoices stored in the background"
            )
            return False

        if self.state == WorkspaceState.REGENERATE_REQUESTED:
            logger.info(f"Workspace {self.period}: discarding user edits on request")
            self._edited = []
            self.state = WorkspaceState.PRISTINE

        self._prune_selection()
        return True

    @property
    def period(self) -> str:
        return f"{self.year}-{self.month:02d}"

    def _ensure_edited(self) -> List[MonthlyInvoice]:
        """Copy the generated set into the edited set on the first mutation"""
        if self.state != WorkspaceState.USER_EDITED:
            self._edited = [inv.model_copy(deep=True) for inv in self._generated]
            self.state = WorkspaceState.USER_EDITED
        return self._edited

    def _check_not_issuing(self) -> Result[None]:
        if self.is_issuing:
            return Return.err(issuance_in_progress(self.period))
        return Return.ok()

    def _editable_invoice(self, invoice_id: str) -> Result[MonthlyInvoice]:
        idle = self._check_not_issuing()
        if idle.is_err():
            return idle
        invoice = self.get_invoice(invoice_id)
        if invoice is None:
            return Return.err(invoice_not_found(invoice_id))
        if invoice.status == InvoiceStatus.ISSUED:
            return Return.err(invoice_already_issued(invoice_id))
        edited = self._ensure_edited()
        return Return.ok(next(inv for inv in edited if inv.id == invoice_id))

    @staticmethod
    def recalculate_invoice(invoice: MonthlyInvoice) -> MonthlyInvoice:
        invoice.recalculate()
        invoice.updated_at = datetime.utcnow()
        return invoice

    # ------------------------------------------------------------------
    # Line item mutations
    # ------------------------------------------------------------------

    def update_line_item(
        self, invoice_id: str, line_item_id: str, patch: LineItemPatchDTO
    ) -> Result[InvoiceLineItem]:
        """Apply the explicitly set fields of a patch to a line item"""
        result = self._editable_invoice(invoice_id)
        if result.is_err():
            return result
        invoice = result.value

        item = invoice.find_line_item(line_item_id)
        if item is None:
            return Return.err(line_item_not_found(invoice_id, line_item_id))

        for name, value in patch.model_dump(exclude_unset=True).items():
            if value is None and name not in NULLABLE_PATCH_FIELDS:
                continue
            setattr(item, name, value)

        self.recalculate_invoice(invoice)
        return Return.ok(item)

    def add_manual_item(self, invoice_id: str) -> Result[InvoiceLineItem]:
        """Append an empty manual line item"""
        result = self._editable_invoice(invoice_id)
        if result.is_err():
            return result
        invoice = result.value

        period_start, period_end, total_days = month_bounds(self.year, self.month)
        item = InvoiceLineItem(
            id=f"li-manual-{short_id()}",
            invoice_id=invoice.id,
            source=LineItemSource.MANUAL,
            period_start=period_start,
            period_end=period_end,
            prorated_days=total_days,
            total_days_in_month=total_days,
            line_description=NEW_ITEM_DESCRIPTION,
            currency=self.default_currency,
        )
        invoice.line_items.append(item)
        self.recalculate_invoice(invoice)
        return Return.ok(item)

    def remove_line_item(self, invoice_id: str, line_item_id: str) -> Result[MonthlyInvoice]:
        result = self._editable_invoice(invoice_id)
        if result.is_err():
            return result
        invoice = result.value

        if invoice.find_line_item(line_item_id) is None:
            return Return.err(line_item_not_found(invoice_id, line_item_id))

        invoice.line_items = [item for item in invoice.line_items if item.id != line_item_id]
        self.recalculate_invoice(invoice)
        return Return.ok(invoice)

    def duplicate_line_item(self, invoice_id: str, line_item_id: str) -> Result[InvoiceLineItem]:
        """Insert an unapproved manual copy right after the original item"""
        result = self._editable_invoice(invoice_id)
        if result.is_err():
            return result
        invoice = result.value

        item = invoice.find_line_item(line_item_id)
        if item is None:
            return Return.err(line_item_not_found(invoice_id, line_item_id))

        copy = item.model_copy(deep=True)
        copy.id = f"li-dup-{short_id()}"
        copy.source = LineItemSource.MANUAL
        copy.line_description = f"{item.line_description}{COPY_SUFFIX}"
        copy.is_approved = False

        index = invoice.line_items.index(item)
        invoice.line_items.insert(index + 1, copy)
        self.recalculate_invoice(invoice)
        return Return.ok(copy)

    # ------------------------------------------------------------------
    # Invoice mutations
    # ------------------------------------------------------------------

    def duplicate_invoice(self, invoice_id: str) -> Result[MonthlyInvoice]:
        """
        Clone an invoice with fresh ids

        Every copied line keeps its source but gets a new id, the copy suffix
        and is unapproved. The clone is a draft even if the original was issued.
        """
        idle = self._check_not_issuing()
        if idle.is_err():
            return idle
        original = self.get_invoice(invoice_id)
        if original is None:
            return Return.err(invoice_not_found(invoice_id))

        edited = self._ensure_edited()
        now = datetime.utcnow()
        clone = original.model_copy(deep=True)
        clone.id = f"inv-dup-{short_id()}"
        clone.status = InvoiceStatus.DRAFT
        clone.issued_at = None
        clone.webhook_sent_at = None
        clone.created_at = now
        for item in clone.line_items:
            item.id = f"li-dup-{short_id()}"
            item.invoice_id = clone.id
            item.line_description = f"{item.line_description}{COPY_SUFFIX}"
            item.is_approved = False

        edited.append(self.recalculate_invoice(clone))
        return Return.ok(clone)

    def remove_invoice(self, invoice_id: str) -> Result[MonthlyInvoice]:
        result = self._editable_invoice(invoice_id)
        if result.is_err():
            return result
        invoice = result.value

        self._edited = [inv for inv in self._edited if inv.id != invoice_id]
        self._drop_from_selection(invoice_id)
        return Return.ok(invoice)

    def add_invoice(
        self, engagement: Optional[Engagement], engagement_id: str, item: NewInvoiceItemDTO
    ) -> Result[MonthlyInvoice]:
        """
        Add a manual item for an engagement

        Appends to the engagement's invoice of the period when there is one,
        otherwise creates that invoice with the item as its only line.
        """
        if engagement is None:
            return Return.err(
                Error(
                    code="ENGAGEMENT_NOT_FOUND",
                    message=f"Engagement {engagement_id} not found",
                    reason="Engagement does not exist",
                )
            )
        idle = self._check_not_issuing()
        if idle.is_err():
            return idle

        existing = next(
            (
                inv for inv in self.current_invoices
                if inv.engagement_id == engagement.id and inv.status == InvoiceStatus.DRAFT
            ),
            None,
        )
        target_id = existing.id if existing else invoice_id_for(engagement.id, self.year, self.month)
        if existing is None and self.get_invoice(target_id) is not None:
            return Return.err(invoice_already_issued(target_id))

        period_start, period_end, total_days = month_bounds(self.year, self.month)
        line = InvoiceLineItem(
            id=f"li-manual-{short_id()}",
            invoice_id=target_id,
            source=LineItemSource.MANUAL,
            engagement_id=engagement.id,
            source_description=item.description,
            source_amount=item.amount,
            period_start=period_start,
            period_end=period_end,
            prorated_days=total_days,
            total_days_in_month=total_days,
            prorated_amount=item.amount,
            line_description=item.description,
            unit_price=item.amount,
            hours=item.hours,
            hourly_rate=item.hourly_rate,
            currency=item.currency,
            is_reverse_charge=item.is_reverse_charge,
        )

        edited = self._ensure_edited()
        if existing is not None:
            invoice = next(inv for inv in edited if inv.id == existing.id)
            invoice.line_items.append(line)
        else:
            invoice = MonthlyInvoice(
                id=target_id,
                engagement_id=engagement.id,
                engagement_name=engagement.name,
                client_id=engagement.client_id,
                year=self.year,
                month=self.month,
                line_items=[line],
                currency=engagement.currency or self.default_currency,
            )
            edited.append(invoice)

        self.recalculate_invoice(invoice)
        return Return.ok(invoice)

    # ------------------------------------------------------------------
    # Approval & selection
    # ------------------------------------------------------------------

    @staticmethod
    def is_invoice_approved(invoice: MonthlyInvoice) -> bool:
        return invoice.is_fully_approved

    def approve_all_items(self, invoice_id: str) -> Result[int]:
        """Approve every line item of an invoice, returns how many changed"""
        result = self._editable_invoice(invoice_id)
        if result.is_err():
            return result
        invoice = result.value

        approved = 0
        for item in invoice.line_items:
            if not item.is_approved:
                item.is_approved = True
                approved += 1
        self.recalculate_invoice(invoice)
        return Return.ok(approved)

    @property
    def selected_ids(self) -> List[str]:
        return list(self._selected)

    def select_invoice(self, invoice_id: str) -> Result[int]:
        """
        Add an invoice to the selection

        Unapproved items are approved as part of selecting. Invoices without
        line items cannot be selected.

        Returns:
            Result with the number of items approved by this call
        """
        idle = self._check_not_issuing()
        if idle.is_err():
            return idle
        invoice = self.get_invoice(invoice_id)
        if invoice is None:
            return Return.err(invoice_not_found(invoice_id))
        if invoice.status == InvoiceStatus.ISSUED:
            return Return.err(invoice_already_issued(invoice_id))
        if not invoice.line_items:
            return Return.err(empty_invoice(invoice_id))

        approved = 0
        if not invoice.is_fully_approved:
            result = self.approve_all_items(invoice_id)
            if result.is_err():
                return result
            approved = result.value

        if invoice_id not in self._selected:
            self._selected.append(invoice_id)
        return Return.ok(approved)

    def deselect_invoice(self, invoice_id: str) -> Result[bool]:
        idle = self._check_not_issuing()
        if idle.is_err():
            return idle
        if self.get_invoice(invoice_id) is None:
            return Return.err(invoice_not_found(invoice_id))
        was_selected = invoice_id in self._selected
        self._drop_from_selection(invoice_id)
        return Return.ok(was_selected)

    def select_all_approved(self) -> Result[List[str]]:
        """Select every non-empty draft invoice whose items are all approved"""
        idle = self._check_not_issuing()
        if idle.is_err():
            return idle
        for invoice in self.current_invoices:
            if invoice.status != InvoiceStatus.DRAFT or not invoice.line_items:
                continue
            if invoice.is_fully_approved and invoice.id not in self._selected:
                self._selected.append(invoice.id)
        return Return.ok(self.selected_ids)

    def clear_selection(self) -> Result[None]:
        idle = self._check_not_issuing()
        if idle.is_err():
            return idle
        self._selected = []
        return Return.ok()

    def _drop_from_selection(self, invoice_id: str) -> None:
        self._selected = [i for i in self._selected if i != invoice_id]

    def _prune_selection(self) -> None:
        known = {inv.id for inv in self.current_invoices}
        self._selected = [i for i in self._selected if i in known]

    # ------------------------------------------------------------------
    # Issued set
    # ------------------------------------------------------------------

    @property
    def issued_ids(self) -> Set[str]:
        return set(self._issued)

    def issued_invoices(self) -> List[MonthlyInvoice]:
        return [inv for inv in self.current_invoices if inv.id in self._issued]

    def mark_issued(self, invoice_id: str, issued_at: datetime) -> Result[MonthlyInvoice]:
        invoice = self.get_invoice(invoice_id)
        if invoice is None:
            return Return.err(invoice_not_found(invoice_id))
        invoice.status = InvoiceStatus.ISSUED
        invoice.issued_at = issued_at
        invoice.updated_at = issued_at
        self._issued.add(invoice_id)
        self._drop_from_selection(invoice_id)
        return Return.ok(invoice)

    def reopen(self, invoice_id: str) -> Result[MonthlyInvoice]:
        """Move an issued invoice back to draft, keeping item approvals"""
        invoice = self.get_invoice(invoice_id)
        if invoice is None:
            return Return.err(invoice_not_found(invoice_id))
        if invoice.status != InvoiceStatus.ISSUED:
            return Return.err(invoice_not_issued(invoice_id))
        invoice.status = InvoiceStatus.DRAFT
        invoice.issued_at = None
        invoice.webhook_sent_at = None
        invoice.updated_at = datetime.utcnow()
        self._issued.discard(invoice_id)
        return Return.ok(invoice)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def issued_stats(self) -> IssuedStatsDTO:
        """Count and amount of issued invoices, split by line item source"""
        issued = self.issued_invoices()
        categories: Dict[str, CategoryStatsDTO] = {
            name: CategoryStatsDTO() for name in STATS_CATEGORIES
        }
        for invoice in issued:
            for item in invoice.line_items:
                bucket = categories[SOURCE_CATEGORIES[item.source]]
                bucket.count += 1
                bucket.amount += item.final_amount

        return IssuedStatsDTO(
            total_count=len(issued),
            total_amount=sum((inv.total_amount for inv in issued), Decimal("0")),
            by_source_category=categories,
        )

    def summary(self) -> WorkspaceSummaryDTO:
        invoices = self.current_invoices
        issued = self.issued_invoices()
        selected = [inv for inv in invoices if inv.id in self._selected]
        return WorkspaceSummaryDTO(
            year=self.year,
            month=self.month,
            state=self.state.value,
            invoice_count=len(invoices),
            line_item_count=sum(len(inv.line_items) for inv in invoices),
            total_amount=sum((inv.total_amount for inv in invoices), Decimal("0")),
            approved_invoice_count=sum(
                1 for inv in invoices if inv.line_items and inv.is_fully_approved
            ),
            issued_count=len(issued),
            issued_amount=sum((inv.total_amount for inv in issued), Decimal("0")),
            selected_count=len(selected),
            selected_amount=sum((inv.total_amount for inv in selected), Decimal("0")),
        )


class WorkspaceRegistry:
    """Holds one InvoiceWorkspace per (year, month)"""

    def __init__(self, default_currency: str = "CZK"):
        self.default_currency = default_currency
        self._workspaces: Dict[Tuple[int, int], InvoiceWorkspace] = {}

    def get(self, year: int, month: int) -> InvoiceWorkspace:
        key = (year, month)
        if key not in self._workspaces:
            self._workspaces[key] = InvoiceWorkspace(year, month, self.default_currency)
        return self._workspaces[key]

    def clear(self) -> None:
        self._workspaces = {}
