"""Pricing calculator - Applies a school agreement to a base price."""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from academia.dates import to_naive_utc, utcnow
from academia.pricing.models import PriceQuote
from academia.store.models import DiscountType

if TYPE_CHECKING:
    from academia.store.models import Agreement

PRICE_QUANTUM = Decimal("0.01")
PERCENTAGE_QUANTUM = Decimal("0.0001")
HUNDRED = Decimal(100)
ZERO = Decimal(0)


def _to_decimal(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _quote(final_price: Decimal, percentage: Decimal, agreement_id: str | None) -> PriceQuote:
    return PriceQuote(
        final_price=final_price.quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP),
        discount_percentage=percentage.quantize(PERCENTAGE_QUANTUM, rounding=ROUND_HALF_UP),
        agreement_id=agreement_id,
    )


def is_agreement_valid(agreement: Agreement | None, now: datetime | None = None) -> bool:
    """Whether an agreement can be applied at ``now``.

    The agreement must be active and ``now`` must fall inside
    ``[start_date, end_date]``; a missing end date never expires.
    """
    if agreement is None or not agreement.is_active:
        return False

    now = utcnow() if now is None else to_naive_utc(now)
    if now < agreement.start_date:
        return False
    return agreement.end_date is None or now <= agreement.end_date


def compute_price(
    base_price: Decimal | int | float | str,
    agreement: Agreement | None,
    now: datetime | None = None,
) -> PriceQuote:
    """Compute the agreed price of an enrollment.

    Args:
        base_price: Level or course base price.
        agreement: The student's school agreement, if any.
        now: Evaluation instant, defaults to the current UTC time.

    Returns:
        PriceQuote with the final price, the effective discount percentage
        and the agreement used. Without a valid agreement the base price is
        returned undiscounted.

        For FIXED_AMOUNT agreements the price never drops below zero, but the
        reported percentage is ``discount / base * 100`` and may exceed 100.
    """
    base = _to_decimal(base_price)

    if agreement is None or not is_agreement_valid(agreement, now):
        return _quote(base, ZERO, None)

    value = _to_decimal(agreement.discount_value)
    discount_type = DiscountType(agreement.discount_type)

    if discount_type is DiscountType.PERCENTAGE:
        final_price = base * (1 - value / HUNDRED)
        return _quote(final_price, value, agreement.id)

    final_price = max(ZERO, base - value)
    percentage = value / base * HUNDRED if base != 0 else ZERO
    return _quote(final_price, percentage, agreement.id)
