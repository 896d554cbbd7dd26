"""Proration Calculator

Day-based proration of a monthly price over the part of a billing period an
engagement was active. Pure functions, no I/O.
"""

import calendar
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

# Engagements starting on or before this day (and running to month end) are
# charged the full month.
FULL_CHARGE_MAX_START_DAY = 5

CZECH_MONTH_NAMES = (
    "leden",
    "únor",
    "březen",
    "duben",
    "květen",
    "červen",
    "červenec",
    "srpen",
    "září",
    "říjen",
    "listopad",
    "prosinec",
)


@dataclass(frozen=True)
class ProrationResult:
    """Active window of an engagement within a billing period"""

    active_days: int
    is_prorated: bool
    effective_start: date
    effective_end: date


def month_bounds(year: int, month: int) -> Tuple[date, date, int]:
    """Return (first day, last day, number of days) of a month"""
    days_in_month = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, days_in_month), days_in_month


def month_label(year: int, month: int) -> str:
    """Czech month label used in line descriptions, e.g. 'leden 2024'"""
    return f"{CZECH_MONTH_NAMES[month - 1]} {year}"


def compute_proration(
    period_start: date,
    period_end: date,
    total_days_in_period: int,
    entity_start: date,
    entity_end: Optional[date] = None,
    full_charge_max_start_day: int = FULL_CHARGE_MAX_START_DAY,
) -> ProrationResult:
    """
    Compute the active window of an engagement in a billing period

    Rules:
    1. effective_start = max(entity_start, period_start)
    2. effective_end = min(entity_end or period_end, period_end)
    3. active_days = inclusive day count of the effective window
    4. Starting on or before full_charge_max_start_day and running to the end
       of the period is never prorated
    5. Otherwise prorated whenever active_days < total_days_in_period

    Args:
        period_start: First day of the billing period
        period_end: Last day of the billing period
        total_days_in_period: Days in the billing period
        entity_start: First active day of the engagement
        entity_end: Last active day of the engagement (None = ongoing)
        full_charge_max_start_day: Latest start day still charged in full

    Returns:
        ProrationResult
    """
    effective_start = max(entity_start, period_start)
    effective_end = min(entity_end or period_end, period_end)
    active_days = (effective_end - effective_start).days + 1

    if effective_start.day <= full_charge_max_start_day and effective_end == period_end:
        return ProrationResult(
            active_days=active_days,
            is_prorated=False,
            effective_start=effective_start,
            effective_end=effective_end,
        )

    return ProrationResult(
        active_days=active_days,
        is_prorated=active_days < total_days_in_period,
        effective_start=effective_start,
        effective_end=effective_end,
    )


def prorate_amount(
    full_price: Decimal, total_days: int, active_days: int, is_prorated: bool
) -> Decimal:
    """
    Scale a monthly price to the active days

    Prorated amounts are rounded to whole currency units (half up).
    """
    if not is_prorated:
        return full_price
    amount = Decimal(full_price) / Decimal(total_days) * Decimal(active_days)
    return amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
