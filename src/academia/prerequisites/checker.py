"""Prerequisite checker."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select

from academia.store.models import (
    Enrollment,
    Group,
    Level,
    ReportCard,
    ReportCardStatus,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from academia.store.models import Course

logger = logging.getLogger(__name__)


class PrerequisiteChecker:
    """Decides whether a student has cleared a course's previous course.

    Report cards are the only source of truth: a COMPLETED enrollment in the
    previous course does not count unless one of its report cards was
    APPROVED.
    """

    def is_prerequisite_satisfied(self, session: Session, student_id: str, course: Course) -> bool:
        """Check a student against a course's prerequisite.

        Args:
            session: Open session to read through.
            student_id: The student's ID.
            course: Course the student wants to join.

        Returns:
            True when the course has no previous course, or when the student
            holds an APPROVED report card for an enrollment in it.
        """
        if course.previous_course_id is None:
            return True

        stmt = (
            select(ReportCard.id)
            .join(ReportCard.enrollment)
            .join(Enrollment.group)
            .join(Group.level)
            .where(
                Enrollment.student_id == student_id,
                Level.course_id == course.previous_course_id,
                ReportCard.status == ReportCardStatus.APPROVED.value,
            )
            .limit(1)
        )
        satisfied = session.execute(stmt).first() is not None
        logger.debug(
            "Prerequisite %s for student %s on course %s: %s",
            course.previous_course_id,
            student_id,
            course.id,
            "met" if satisfied else "not met",
        )
        return satisfied
