"""Unit tests for the pricing calculator."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from academia.pricing import PriceQuote, compute_price, is_agreement_valid
from academia.store import Agreement, DiscountType

NOW = datetime(2025, 3, 10, 12, 0, 0)


def make_agreement(
    discount_type: DiscountType = DiscountType.PERCENTAGE,
    value: str = "15",
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    is_active: bool = True,
) -> Agreement:
    return Agreement(
        id="agr-1",
        name="Partner school",
        agreement_code="AGR-1",
        discount_type=discount_type.value,
        discount_value=Decimal(value),
        start_date=start_date or NOW - timedelta(days=30),
        end_date=end_date,
        is_active=is_active,
    )


@pytest.mark.unit
class TestWithoutDiscount:
    """Base price is returned untouched when no agreement applies."""

    def test_no_agreement(self) -> None:
        quote = compute_price(Decimal("350"), None, now=NOW)

        assert quote == PriceQuote(Decimal("350.00"), Decimal("0.0000"), None)

    def test_inactive_agreement(self) -> None:
        quote = compute_price(Decimal("350"), make_agreement(is_active=False), now=NOW)

        assert quote.final_price == Decimal("350.00")
        assert quote.discount_percentage == 0
        assert quote.agreement_id is None

    def test_expired_agreement_ignores_discount_fields(self) -> None:
        """An agreement that ended yesterday gives no discount."""
        agreement = make_agreement(
            DiscountType.FIXED_AMOUNT, value="100", end_date=NOW - timedelta(days=1)
        )

        quote = compute_price(Decimal("350"), agreement, now=NOW)

        assert quote == PriceQuote(Decimal("350.00"), Decimal("0.0000"), None)

    def test_agreement_not_started(self) -> None:
        agreement = make_agreement(start_date=NOW + timedelta(days=1))

        quote = compute_price(Decimal("350"), agreement, now=NOW)

        assert quote.agreement_id is None
        assert quote.final_price == Decimal("350.00")


@pytest.mark.unit
class TestPercentageDiscount:
    """PERCENTAGE agreements."""

    def test_fifteen_percent_of_350(self) -> None:
        quote = compute_price(Decimal("350"), make_agreement(value="15"), now=NOW)

        assert quote.final_price == Decimal("297.50")
        assert quote.discount_percentage == Decimal("15")
        assert quote.agreement_id == "agr-1"

    @pytest.mark.parametrize(
        ("base", "percentage", "expected"),
        [
            ("100", "0", "100.00"),
            ("100", "100", "0.00"),
            ("199.99", "12.5", "174.99"),
            ("450", "33.33", "300.02"),
        ],
    )
    def test_price_is_base_times_remaining_share(
        self, base: str, percentage: str, expected: str
    ) -> None:
        quote = compute_price(Decimal(base), make_agreement(value=percentage), now=NOW)

        assert quote.final_price == Decimal(expected)
        assert quote.discount_percentage == Decimal(percentage)

    def test_accepts_plain_numbers(self) -> None:
        quote = compute_price(350, make_agreement(value="10"), now=NOW)

        assert quote.final_price == Decimal("315.00")


@pytest.mark.unit
class TestFixedAmountDiscount:
    """FIXED_AMOUNT agreements."""

    def test_fixed_amount_reports_effective_percentage(self) -> None:
        agreement = make_agreement(DiscountType.FIXED_AMOUNT, value="50")

        quote = compute_price(Decimal("350"), agreement, now=NOW)

        assert quote.final_price == Decimal("300.00")
        assert quote.discount_percentage == Decimal("14.2857")

    def test_discount_larger_than_price_clamps_price_only(self) -> None:
        """Price stops at zero while the percentage goes above 100."""
        agreement = make_agreement(DiscountType.FIXED_AMOUNT, value="500")

        quote = compute_price(Decimal("350"), agreement, now=NOW)

        assert quote.final_price == Decimal("0.00")
        assert quote.discount_percentage == Decimal("142.8571")
        assert quote.agreement_id == "agr-1"

    def test_zero_base_price(self) -> None:
        agreement = make_agreement(DiscountType.FIXED_AMOUNT, value="50")

        quote = compute_price(Decimal("0"), agreement, now=NOW)

        assert quote.final_price == Decimal("0.00")
        assert quote.discount_percentage == Decimal("0")


@pytest.mark.unit
class TestAgreementValidity:
    """Tests for is_agreement_valid."""

    def test_none_is_invalid(self) -> None:
        assert is_agreement_valid(None, NOW) is False

    def test_open_ended_agreement_is_valid(self) -> None:
        assert is_agreement_valid(make_agreement(end_date=None), NOW) is True

    def test_bounds_are_inclusive(self) -> None:
        agreement = make_agreement(start_date=NOW, end_date=NOW)

        assert is_agreement_valid(agreement, NOW) is True
        assert is_agreement_valid(agreement, NOW + timedelta(seconds=1)) is False

    def test_aware_now_is_compared_in_utc(self) -> None:
        agreement = make_agreement(start_date=NOW, end_date=NOW + timedelta(hours=1))
        aware = NOW.replace(tzinfo=UTC)

        assert is_agreement_valid(agreement, aware) is True

    def test_defaults_to_current_time(self) -> None:
        agreement = make_agreement(start_date=datetime(2000, 1, 1), end_date=None)

        assert is_agreement_valid(agreement) is True
