"""Grading package - Grades, report cards and the group grading lifecycle."""

from academia.grading.averages import (
    CORE_COMPETENCY_COUNT,
    PASSING_AVERAGE,
    core_competency_average,
)
from academia.grading.service import GradingService

__all__ = [
    "CORE_COMPETENCY_COUNT",
    "PASSING_AVERAGE",
    "GradingService",
    "core_competency_average",
]
