"""Pricing package - Agreement discounts applied to base prices."""

from academia.pricing.calculator import compute_price, is_agreement_valid
from academia.pricing.models import PriceQuote

__all__ = [
    "PriceQuote",
    "compute_price",
    "is_agreement_valid",
]
