"""Tests for billing period arithmetic."""

from datetime import datetime, timedelta, timezone

import pytest

from membership_service.models import BillingCycle
from membership_service.utils.billing_period import (
    MONTHS_PER_CYCLE,
    add_months,
    monthly_equivalent,
    months_in_cycle,
    parse_billing_cycle,
    period_end,
)

UTC = timezone.utc


class TestParseBillingCycle:
    """Test parse_billing_cycle function."""

    def test_parse_enum_passthrough(self):
        assert parse_billing_cycle(BillingCycle.YEARLY) is BillingCycle.YEARLY

    def test_parse_strings(self):
        assert parse_billing_cycle("monthly") == BillingCycle.MONTHLY
        assert parse_billing_cycle("quarterly") == BillingCycle.QUARTERLY
        assert parse_billing_cycle("yearly") == BillingCycle.YEARLY

    def test_parse_case_insensitive_with_whitespace(self):
        assert parse_billing_cycle(" Monthly ") == BillingCycle.MONTHLY
        assert parse_billing_cycle("YEARLY") == BillingCycle.YEARLY

    def test_parse_unknown_cycle(self):
        with pytest.raises(ValueError, match="Unsupported billing cycle"):
            parse_billing_cycle("weekly")

    def test_parse_empty(self):
        with pytest.raises(ValueError, match="non-empty"):
            parse_billing_cycle("")


class TestMonthsInCycle:
    """Test cycle lengths."""

    def test_cycle_lengths(self):
        assert months_in_cycle(BillingCycle.MONTHLY) == 1
        assert months_in_cycle(BillingCycle.QUARTERLY) == 3
        assert months_in_cycle(BillingCycle.YEARLY) == 12

    def test_every_cycle_has_a_length(self):
        assert set(MONTHS_PER_CYCLE) == set(BillingCycle)


class TestAddMonths:
    """Test calendar-aware month addition with day clamping."""

    def test_simple_month(self):
        start = datetime(2026, 3, 15, 9, 30, tzinfo=UTC)
        assert add_months(start, 1) == datetime(2026, 4, 15, 9, 30, tzinfo=UTC)

    def test_jan_31_clamps_to_feb_28(self):
        start = datetime(2026, 1, 31, 12, 0, tzinfo=UTC)
        assert add_months(start, 1) == datetime(2026, 2, 28, 12, 0, tzinfo=UTC)

    def test_jan_31_clamps_to_feb_29_in_leap_year(self):
        start = datetime(2028, 1, 31, tzinfo=UTC)
        assert add_months(start, 1) == datetime(2028, 2, 29, tzinfo=UTC)

    def test_leap_day_plus_year_clamps_to_feb_28(self):
        start = datetime(2024, 2, 29, tzinfo=UTC)
        assert add_months(start, 12) == datetime(2025, 2, 28, tzinfo=UTC)

    def test_march_31_plus_quarter_clamps_to_june_30(self):
        start = datetime(2026, 3, 31, tzinfo=UTC)
        assert add_months(start, 3) == datetime(2026, 6, 30, tzinfo=UTC)

    def test_crosses_year_boundary(self):
        start = datetime(2026, 11, 30, tzinfo=UTC)
        assert add_months(start, 3) == datetime(2027, 2, 28, tzinfo=UTC)

    def test_preserves_time_and_timezone(self):
        tz = timezone(timedelta(hours=5, minutes=30))
        start = datetime(2026, 5, 10, 23, 59, 58, 123456, tzinfo=tz)
        result = add_months(start, 1)
        assert result.tzinfo == tz
        assert (result.hour, result.minute, result.second, result.microsecond) == (23, 59, 58, 123456)

    def test_zero_months_is_identity(self):
        start = datetime(2026, 1, 31, tzinfo=UTC)
        assert add_months(start, 0) == start

    def test_negative_months_rejected(self):
        with pytest.raises(ValueError):
            add_months(datetime(2026, 1, 1, tzinfo=UTC), -1)


class TestPeriodEnd:
    """Test period_end for each cycle."""

    @pytest.mark.parametrize(
        "cycle,expected",
        [
            (BillingCycle.MONTHLY, datetime(2026, 2, 28, tzinfo=UTC)),
            (BillingCycle.QUARTERLY, datetime(2026, 4, 30, tzinfo=UTC)),
            (BillingCycle.YEARLY, datetime(2027, 1, 31, tzinfo=UTC)),
        ],
    )
    def test_period_end_from_jan_31(self, cycle, expected):
        assert period_end(datetime(2026, 1, 31, tzinfo=UTC), cycle) == expected

    def test_period_end_accepts_string_cycle(self):
        assert period_end(datetime(2026, 6, 1, tzinfo=UTC), "monthly") == datetime(2026, 7, 1, tzinfo=UTC)


class TestMonthlyEquivalent:
    """Test monthly price normalisation."""

    def test_monthly_price_unchanged(self):
        assert monthly_equivalent(10.0, BillingCycle.MONTHLY) == 10.0

    def test_quarterly_and_yearly_spread(self):
        assert monthly_equivalent(27.0, BillingCycle.QUARTERLY) == pytest.approx(9.0)
        assert monthly_equivalent(120.0, BillingCycle.YEARLY) == pytest.approx(10.0)
