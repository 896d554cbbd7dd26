"""Unit tests for the proration calculator"""

from datetime import date
from decimal import Decimal

from src.app.use_cases.invoicing.proration import (
    compute_proration,
    month_bounds,
    month_label,
    prorate_amount,
)


APRIL_START, APRIL_END, APRIL_DAYS = month_bounds(2024, 4)


class TestMonthHelpers:
    def test_month_bounds_leap_february(self):
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29), 29)

    def test_month_bounds_december(self):
        assert month_bounds(2023, 12) == (date(2023, 12, 1), date(2023, 12, 31), 31)

    def test_month_label_is_czech(self):
        assert month_label(2024, 1) == "leden 2024"
        assert month_label(2024, 7) == "červenec 2024"


class TestComputeProration:
    def test_full_month_is_not_prorated(self):
        result = compute_proration(APRIL_START, APRIL_END, APRIL_DAYS, date(2023, 1, 1))

        assert result.active_days == 30
        assert result.is_prorated is False
        assert result.effective_start == APRIL_START
        assert result.effective_end == APRIL_END

    def test_start_on_third_through_month_end_is_charged_in_full(self):
        """
        Given: Contract starting on the 3rd of a 30-day month, ongoing
        When: Proration is computed
        Then: 28 active days but not prorated
        """
        result = compute_proration(APRIL_START, APRIL_END, APRIL_DAYS, date(2024, 4, 3))

        assert result.active_days == 28
        assert result.is_prorated is False
        assert prorate_amount(Decimal("50000"), APRIL_DAYS, result.active_days, result.is_prorated) == Decimal("50000")

    def test_start_on_fifth_is_still_charged_in_full(self):
        result = compute_proration(APRIL_START, APRIL_END, APRIL_DAYS, date(2024, 4, 5))

        assert result.is_prorated is False

    def test_start_on_sixth_is_prorated(self):
        result = compute_proration(APRIL_START, APRIL_END, APRIL_DAYS, date(2024, 4, 6))

        assert result.active_days == 25
        assert result.is_prorated is True

    def test_start_on_tenth_is_prorated(self):
        """
        Given: Contract starting on the 10th of a 30-day month, ongoing
        When: Proration is computed
        Then: 21 active days, prorated to price / 30 * 21
        """
        result = compute_proration(APRIL_START, APRIL_END, APRIL_DAYS, date(2024, 4, 10))

        assert result.active_days == 21
        assert result.is_prorated is True
        assert result.effective_start == date(2024, 4, 10)
        assert prorate_amount(Decimal("45000"), APRIL_DAYS, 21, True) == Decimal("31500")

    def test_early_start_with_early_end_is_prorated(self):
        """Exception only applies when the contract runs through month end"""
        result = compute_proration(
            APRIL_START, APRIL_END, APRIL_DAYS, date(2024, 4, 2), date(2024, 4, 20)
        )

        assert result.active_days == 19
        assert result.is_prorated is True
        assert result.effective_end == date(2024, 4, 20)

    def test_end_inside_month_from_earlier_start(self):
        result = compute_proration(
            APRIL_START, APRIL_END, APRIL_DAYS, date(2023, 1, 1), date(2024, 4, 15)
        )

        assert result.effective_start == APRIL_START
        assert result.active_days == 15
        assert result.is_prorated is True
        assert prorate_amount(Decimal("30000"), APRIL_DAYS, 15, True) == Decimal("15000")

    def test_full_charge_day_is_configurable(self):
        result = compute_proration(
            APRIL_START, APRIL_END, APRIL_DAYS, date(2024, 4, 3), full_charge_max_start_day=1
        )

        assert result.is_prorated is True


class TestProrateAmount:
    def test_not_prorated_returns_price_unchanged(self):
        assert prorate_amount(Decimal("12345.67"), 31, 10, False) == Decimal("12345.67")

    def test_rounds_to_whole_units(self):
        # 50000 / 31 * 22 = 35483.87...
        assert prorate_amount(Decimal("50000"), 31, 22, True) == Decimal("35484")

    def test_rounds_half_up(self):
        # 15 / 30 * 21 = 10.5
        assert prorate_amount(Decimal("15"), 30, 21, True) == Decimal("11")
