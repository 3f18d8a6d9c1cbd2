"""Data models for the enrollment module."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from academia.store import Enrollment


@dataclass
class EnrollmentResult:
    """Outcome of a single enrollment.

    Attributes:
        enrollment: Persisted enrollment with student, group, level, course,
            schedules, teacher and agreement loaded.
        username: Username issued to the student.
        password: Plaintext password, shown to the caller once and never stored.
    """

    enrollment: Enrollment
    username: str
    password: str = field(repr=False)
