"""Eligibility queries - Who passed a course, who may join one."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from academia.grading import PASSING_AVERAGE, core_competency_average
from academia.prerequisites import PrerequisiteChecker
from academia.promotion.models import Candidate
from academia.store import (
    Enrollment,
    EnrollmentStatus,
    Group,
    Level,
    Student,
    StudentStatus,
    User,
)
from academia.store.store import load_course

if TYPE_CHECKING:
    from academia.store import SchoolStore

logger = logging.getLogger(__name__)

# Enrollments whose grades count towards passing a course
GRADED_STATUSES = (EnrollmentStatus.ACTIVE.value, EnrollmentStatus.COMPLETED.value)

# Enrollments that already place a student in a course
BLOCKING_STATUSES = (
    EnrollmentStatus.ACTIVE.value,
    EnrollmentStatus.COMPLETED.value,
    EnrollmentStatus.PENDING.value,
)


class EligibilityService:
    """Read-only queries behind promotion and enrollment screens."""

    def __init__(self, store: SchoolStore, checker: PrerequisiteChecker | None = None) -> None:
        self.store = store
        self.checker = checker or PrerequisiteChecker()

    def approved_candidates(self, course_id: str) -> list[Candidate]:
        """Students whose core competency average in a course reaches 51.

        Each student appears once, with their best enrollment in the course.

        Raises:
            CourseNotFoundError: If the course doesn't exist.
        """
        with self.store.transaction() as session:
            load_course(session, course_id)
            stmt = (
                select(Enrollment)
                .join(Enrollment.group)
                .join(Group.level)
                .join(Enrollment.student)
                .options(
                    selectinload(Enrollment.grades),
                    selectinload(Enrollment.student).selectinload(Student.user),
                )
                .where(
                    Level.course_id == course_id,
                    Enrollment.status.in_(GRADED_STATUSES),
                    Student.deleted_at.is_(None),
                )
            )
            enrollments = session.execute(stmt).scalars().all()

            best: dict[str, Candidate] = {}
            for enrollment in enrollments:
                average = core_competency_average(enrollment.grades)
                if average < PASSING_AVERAGE:
                    continue
                current = best.get(enrollment.student_id)
                if current is not None and current.average >= average:
                    continue
                student = enrollment.student
                best[student.id] = Candidate(
                    student_id=student.id,
                    enrollment_id=enrollment.id,
                    full_name=student.user.full_name,
                    registration_code=student.registration_code,
                    average=average,
                )

        candidates = sorted(best.values(), key=lambda c: (c.full_name, c.student_id))
        logger.debug("Course %s has %d approved candidates", course_id, len(candidates))
        return candidates

    def eligible_students(self, course_id: str) -> list[Student]:
        """Students who may enroll in a course right now.

        Active, not deleted, prerequisite satisfied, and no ACTIVE, COMPLETED
        or PENDING enrollment in the course already.

        Raises:
            CourseNotFoundError: If the course doesn't exist.
        """
        with self.store.transaction() as session:
            course = load_course(session, course_id)

            already_in_course = (
                select(Enrollment.student_id)
                .join(Enrollment.group)
                .join(Group.level)
                .where(
                    Level.course_id == course_id,
                    Enrollment.status.in_(BLOCKING_STATUSES),
                )
            )
            stmt = (
                select(Student)
                .join(Student.user)
                .options(selectinload(Student.user), selectinload(Student.school))
                .where(
                    Student.deleted_at.is_(None),
                    Student.enrollment_status == StudentStatus.ACTIVE.value,
                    Student.id.not_in(already_in_course),
                )
                .order_by(User.paternal_surname, User.first_name)
            )
            students = [
                student
                for student in session.execute(stmt).scalars().all()
                if self.checker.is_prerequisite_satisfied(session, student.id, course)
            ]

        logger.debug("Course %s has %d eligible students", course_id, len(students))
        return students
