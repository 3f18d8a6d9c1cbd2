"""Data models for the pricing module."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class PriceQuote:
    """Price snapshot to store on an enrollment.

    Attributes:
        final_price: Price after discount, 2 decimal places.
        discount_percentage: Effective discount rate, 4 decimal places.
        agreement_id: Agreement that produced the discount, None when no
            valid agreement applied.
    """

    final_price: Decimal
    discount_percentage: Decimal
    agreement_id: str | None = None
