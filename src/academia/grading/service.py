"""Grading service - Records grades, issues report cards, closes groups."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

from sqlalchemy import select, update
from sqlalchemy.orm import selectinload

from academia.dates import utcnow
from academia.exceptions import InvalidRequestError
from academia.grading.averages import PASSING_AVERAGE, core_competency_average
from academia.store import (
    Enrollment,
    EnrollmentNotFoundError,
    EnrollmentStatus,
    EvaluationType,
    Grade,
    GroupStatus,
    ReportCard,
    ReportCardStatus,
)
from academia.store.store import load_group

if TYPE_CHECKING:
    from datetime import datetime

    from sqlalchemy.orm import Session

    from academia.store import Group, SchoolStore

logger = logging.getLogger(__name__)

MIN_GRADE = Decimal(0)
MAX_GRADE = Decimal(100)

GradeValue = Decimal | int | float | str


def _grade_value(kind: EvaluationType, value: GradeValue) -> Decimal:
    try:
        decimal_value = Decimal(str(value))
    except InvalidOperation as e:
        raise InvalidRequestError(f"Invalid grade for {kind.value}: {value!r}") from e
    if not decimal_value.is_finite():
        raise InvalidRequestError(f"Invalid grade for {kind.value}: {value!r}")
    if not MIN_GRADE <= decimal_value <= MAX_GRADE:
        raise InvalidRequestError(
            f"Grade for {kind.value} must be between {MIN_GRADE} and {MAX_GRADE}, got {value}"
        )
    return decimal_value


class GradingService:
    """Grade book operations on enrollments and groups."""

    def __init__(self, store: SchoolStore) -> None:
        self.store = store

    def _load_enrollment(self, session: Session, enrollment_id: str) -> Enrollment:
        stmt = (
            select(Enrollment)
            .options(selectinload(Enrollment.grades), selectinload(Enrollment.report_cards))
            .where(Enrollment.id == enrollment_id)
        )
        enrollment = session.execute(stmt).scalar_one_or_none()
        if enrollment is None:
            raise EnrollmentNotFoundError(f"Enrollment with id '{enrollment_id}' not found")
        return enrollment

    def record_grades(
        self,
        enrollment_id: str,
        grades: Mapping[EvaluationType | str, GradeValue],
        grade_date: datetime | None = None,
    ) -> list[Grade]:
        """Record grades for an enrollment, one per evaluation type.

        An existing grade of the same type is overwritten.

        Args:
            enrollment_id: The enrollment's ID.
            grades: Grade values (0-100) by evaluation type.
            grade_date: Date of the evaluation, defaults to now.

        Returns:
            The enrollment's grades after the update.

        Raises:
            EnrollmentNotFoundError: If the enrollment doesn't exist.
            InvalidRequestError: On unknown evaluation types or out of range values.
        """
        grade_date = grade_date or utcnow()
        with self.store.transaction() as session:
            enrollment = self._load_enrollment(session, enrollment_id)
            by_type = {grade.evaluation_type: grade for grade in enrollment.grades}

            for raw_kind, raw_value in grades.items():
                try:
                    kind = EvaluationType(raw_kind)
                except ValueError as e:
                    raise InvalidRequestError(f"Unknown evaluation type: {raw_kind!r}") from e
                value = _grade_value(kind, raw_value)

                grade = by_type.get(kind.value)
                if grade is None:
                    grade = Grade(
                        evaluation_type=kind.value,
                        grade_value=value,
                        grade_date=grade_date,
                    )
                    enrollment.grades.append(grade)
                    by_type[kind.value] = grade
                else:
                    grade.grade_value = value
                    grade.grade_date = grade_date

            session.flush()
            logger.info("Recorded %d grades for enrollment %s", len(grades), enrollment_id)
            return list(enrollment.grades)

    def issue_report_card(
        self, enrollment_id: str, period: str, approve: bool = True
    ) -> ReportCard:
        """Issue or re-issue the report card of an enrollment for a period.

        The final grade is the core competency average. The card is APPROVED
        only when ``approve`` is set and the average reaches the passing mark.

        Raises:
            EnrollmentNotFoundError: If the enrollment doesn't exist.
            InvalidRequestError: If period is empty.
        """
        if not period or not period.strip():
            raise InvalidRequestError("Missing period")

        with self.store.transaction() as session:
            enrollment = self._load_enrollment(session, enrollment_id)
            average = core_competency_average(enrollment.grades)
            passed = approve and average >= PASSING_AVERAGE

            card = next((c for c in enrollment.report_cards if c.period == period), None)
            if card is None:
                card = ReportCard(period=period, final_grade=average)
                enrollment.report_cards.append(card)

            card.final_grade = average
            card.status = (ReportCardStatus.APPROVED if passed else ReportCardStatus.REJECTED).value
            card.approved_at = utcnow() if passed else None
            session.flush()

            logger.info(
                "Report card %s for enrollment %s: %s (%s)",
                period,
                enrollment_id,
                card.status,
                average,
            )
            return card

    def submit_grades(self, group_id: str) -> Group:
        """Mark a group's grades as submitted.

        Raises:
            GroupNotFoundError: If the group doesn't exist.
            InvalidRequestError: If grades were already submitted or the group
                is completed.
        """
        with self.store.transaction() as session:
            group = load_group(session, group_id)
            if group.group_status in (GroupStatus.GRADES_SUBMITTED, GroupStatus.COMPLETED):
                raise InvalidRequestError(
                    f"Grades of group '{group.code}' already submitted or group completed"
                )
            group.status = GroupStatus.GRADES_SUBMITTED.value
            logger.info("Grades submitted for group %s", group.code)
            return group

    def close_group(self, group_id: str) -> Group:
        """Complete a group and all of its ACTIVE enrollments.

        Raises:
            GroupNotFoundError: If the group doesn't exist.
        """
        with self.store.transaction() as session:
            group = load_group(session, group_id)
            group.status = GroupStatus.COMPLETED.value
            result = session.execute(
                update(Enrollment)
                .where(
                    Enrollment.group_id == group.id,
                    Enrollment.status == EnrollmentStatus.ACTIVE.value,
                )
                .values(status=EnrollmentStatus.COMPLETED.value)
                .execution_options(synchronize_session=False)
            )
            logger.info("Closed group %s (%d enrollments completed)", group.code, result.rowcount)
            return group
