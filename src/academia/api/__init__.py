"""REST API for Academia."""

from academia.api.app import create_app
from academia.api.models import (
    APIResponse,
    EnrollmentCreate,
    EnrollmentResponse,
    PromotionCreate,
    PromotionResponse,
)

__all__ = [
    "APIResponse",
    "EnrollmentCreate",
    "EnrollmentResponse",
    "PromotionCreate",
    "PromotionResponse",
    "create_app",
]
