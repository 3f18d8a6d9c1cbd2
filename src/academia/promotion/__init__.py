"""Promotion package - Batch intake into a next course and eligibility queries."""

from academia.promotion.eligibility import EligibilityService
from academia.promotion.models import Candidate, PromotionFailure, PromotionResult
from academia.promotion.orchestrator import PromotionOrchestrator

__all__ = [
    "Candidate",
    "EligibilityService",
    "PromotionFailure",
    "PromotionOrchestrator",
    "PromotionResult",
]
