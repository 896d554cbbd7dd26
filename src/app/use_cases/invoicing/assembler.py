"""Invoice Assembler

Merges the billable sources of a period into one draft invoice per active
retainer contract. Pure: the same inputs always produce the same invoices
(ids included), so regenerating a period is idempotent.
"""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional
from src.domain.engagement import Engagement
from src.domain.engagement_service import EngagementService
from src.domain.extra_work import ExtraWork
from src.domain.invoice import MonthlyInvoice, InvoiceStatus, invoice_id_for
from src.domain.invoice_line import InvoiceLineItem, LineItemSource
from .billable_sources import BillableSnapshot, CreditPackageSummary
from .proration import (
    FULL_CHARGE_MAX_START_DAY,
    compute_proration,
    month_bounds,
    month_label,
    prorate_amount,
)


class InvoiceAssembler:
    """
    Builds monthly invoices from billable sources

    Business Rules:
    1. One invoice per contract active on at least one day of the period
    2. One retainer line per active monthly service (credit package
       services excluded), prorated over the contract's active days
    3. A client's credit package is billed once, on its first contract
       in input order
    4. One line per ready extra work item and per pending one-off service
    5. A contract without any line yields no invoice
    6. Every generated line starts unapproved; every invoice starts as draft
    """

    def __init__(
        self,
        default_currency: str = "CZK",
        full_charge_max_start_day: int = FULL_CHARGE_MAX_START_DAY,
    ):
        self.default_currency = default_currency
        self.full_charge_max_start_day = full_charge_max_start_day

    def assemble_snapshot(self, snapshot: BillableSnapshot) -> List[MonthlyInvoice]:
        return self.assemble(
            year=snapshot.year,
            month=snapshot.month,
            contracts=snapshot.contracts,
            services=snapshot.services,
            extra_work=snapshot.extra_work,
            one_offs=snapshot.one_offs,
            credit_packages=snapshot.credit_packages,
        )

    def assemble(
        self,
        year: int,
        month: int,
        contracts: List[Engagement],
        services: Dict[str, List[EngagementService]],
        extra_work: Dict[str, List[ExtraWork]],
        one_offs: Dict[str, List[EngagementService]],
        credit_packages: Dict[str, CreditPackageSummary],
    ) -> List[MonthlyInvoice]:
        """
        Assemble draft invoices for a period

        Args:
            year: Billing year
            month: Billing month (1-12)
            contracts: Active retainer contracts, in attribution order
            services: Monthly services keyed by contract id
            extra_work: Ready extra work keyed by contract id
            one_offs: Pending one-off services keyed by contract id
            credit_packages: Package summaries keyed by client id

        Returns:
            List of draft MonthlyInvoice, in contract order
        """
        period_start, period_end, total_days = month_bounds(year, month)
        label = month_label(year, month)
        # Consumed as packages get attributed
        unattributed_packages = dict(credit_packages)
        invoices = []

        for contract in contracts:
            if not contract.overlaps(period_start, period_end):
                continue

            invoice_id = invoice_id_for(contract.id, year, month)
            currency = contract.currency or self.default_currency
            line_items: List[InvoiceLineItem] = []

            proration = compute_proration(
                period_start,
                period_end,
                total_days,
                contract.start_date,
                contract.end_date,
                full_charge_max_start_day=self.full_charge_max_start_day,
            )

            for service in services.get(contract.id, []):
                if service.is_credit_package:
                    continue
                amount = prorate_amount(
                    service.price, total_days, proration.active_days, proration.is_prorated
                )
                line_items.append(
                    InvoiceLineItem(
                        id=f"li-{service.id}-{year}-{month}",
                        invoice_id=invoice_id,
                        source=LineItemSource.ENGAGEMENT,
                        engagement_id=contract.id,
                        service_id=service.id,
                        source_description=service.name,
                        source_amount=service.price,
                        period_start=proration.effective_start,
                        period_end=proration.effective_end,
                        prorated_days=proration.active_days,
                        total_days_in_month=total_days,
                        prorated_amount=amount,
                        line_description=f"{service.name} - {label}",
                        unit_price=amount,
                        currency=service.currency or self.default_currency,
                    )
                )

            package = unattributed_packages.pop(contract.client_id, None)
            if package is not None:
                line_items.append(
                    self._credit_package_line(
                        package, contract, invoice_id, year, month,
                        period_start, period_end, total_days, label, currency,
                    )
                )

            for work in extra_work.get(contract.id, []):
                line_items.append(
                    InvoiceLineItem(
                        id=f"li-ew-{work.id}-{year}-{month}",
                        invoice_id=invoice_id,
                        source=LineItemSource.EXTRA_WORK,
                        engagement_id=contract.id,
                        extra_work_id=work.id,
                        source_description=f"Vícepráce: {work.name}",
                        source_amount=work.amount,
                        period_start=period_start,
                        period_end=period_end,
                        prorated_days=total_days,
                        total_days_in_month=total_days,
                        prorated_amount=work.amount,
                        line_description=f"Vícepráce: {work.name} ({_short_date(work.work_date)})",
                        unit_price=work.amount,
                        hours=work.hours_worked,
                        hourly_rate=work.hourly_rate,
                        currency=work.currency or self.default_currency,
                    )
                )

            for service in one_offs.get(contract.id, []):
                line_items.append(
                    InvoiceLineItem(
                        id=f"li-oneoff-{service.id}-{year}-{month}",
                        invoice_id=invoice_id,
                        source=LineItemSource.ONE_OFF,
                        engagement_id=contract.id,
                        service_id=service.id,
                        source_description=f"Jednorázová položka: {service.name}",
                        source_amount=service.price,
                        period_start=period_start,
                        period_end=period_end,
                        prorated_days=total_days,
                        total_days_in_month=total_days,
                        prorated_amount=service.price,
                        line_description=f"Jednorázová položka: {service.name}",
                        unit_price=service.price,
                        currency=service.currency or self.default_currency,
                    )
                )

            if not line_items:
                continue

            invoice = MonthlyInvoice(
                id=invoice_id,
                engagement_id=contract.id,
                engagement_name=contract.name,
                client_id=contract.client_id,
                year=year,
                month=month,
                line_items=line_items,
                currency=currency,
                status=InvoiceStatus.DRAFT,
            )
            invoices.append(invoice.recalculate())

        return invoices

    def _credit_package_line(
        self,
        package: CreditPackageSummary,
        contract: Engagement,
        invoice_id: str,
        year: int,
        month: int,
        period_start: date,
        period_end: date,
        total_days: int,
        label: str,
        currency: str,
    ) -> InvoiceLineItem:
        amount = package.invoice_amount
        return InvoiceLineItem(
            id=f"li-cb-{contract.id}-{year}-{month}",
            invoice_id=invoice_id,
            source=LineItemSource.CREATIVE_BOOST,
            engagement_id=contract.id,
            source_description=(
                f"Creative Boost - balíček {package.max_credits} kr. "
                f"(čerpáno {package.used_credits} kr.)"
            ),
            source_amount=amount,
            period_start=period_start,
            period_end=period_end,
            prorated_days=total_days,
            total_days_in_month=total_days,
            prorated_amount=amount,
            line_description=(
                f"Creative Boost - {label} "
                f"(balíček {package.max_credits} kr., čerpáno {package.used_credits} kr.)"
            ),
            unit_price=amount,
            currency=currency,
        )


def _short_date(value: Optional[date]) -> str:
    """d.M.yyyy without zero padding, e.g. 5.1.2024"""
    if value is None:
        return ""
    return f"{value.day}.{value.month}.{value.year}"


def total_of(invoices: List[MonthlyInvoice]) -> Decimal:
    return sum((invoice.total_amount for invoice in invoices), Decimal("0"))
