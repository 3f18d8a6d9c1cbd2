"""Enrollment package - Single student enrollment with credential rotation."""

from academia.enrollment.exceptions import EnrollmentError, GroupFullError
from academia.enrollment.models import EnrollmentResult
from academia.enrollment.orchestrator import (
    EnrollmentOrchestrator,
    add_enrollment,
    reissue_credentials,
)

__all__ = [
    "EnrollmentError",
    "EnrollmentOrchestrator",
    "EnrollmentResult",
    "GroupFullError",
    "add_enrollment",
    "reissue_credentials",
]
