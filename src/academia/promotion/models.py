"""Data models for the promotion module."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal  # noqa: TC003 - dataclass field type
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from academia.store import Group


@dataclass(frozen=True)
class PromotionFailure:
    """A student the batch could not enroll.

    Attributes:
        student_id: The student's ID as given in the request.
        reason: Error message of the failed enrollment.
    """

    student_id: str
    reason: str


@dataclass
class PromotionResult:
    """Outcome of a promotion batch.

    Attributes:
        new_group: The single group created for the batch.
        promoted_count: Students enrolled in the group.
        skipped_count: Students that failed, equal to ``len(failures)``.
        failures: Per-student failure details.
    """

    new_group: Group
    promoted_count: int = 0
    skipped_count: int = 0
    failures: list[PromotionFailure] = field(default_factory=list)


@dataclass(frozen=True)
class Candidate:
    """A student who passed the core competencies of a course.

    Attributes:
        student_id: The student's ID.
        enrollment_id: Enrollment the average was computed on.
        full_name: Student's full name.
        registration_code: Student's registration code.
        average: Core competency average, 2 decimal places.
    """

    student_id: str
    enrollment_id: str
    full_name: str
    registration_code: str
    average: Decimal
