"""Promotion orchestrator - Moves a batch of students into a next course."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import TYPE_CHECKING

from academia.dates import add_months, parse_date
from academia.enrollment import add_enrollment
from academia.exceptions import AcademiaError
from academia.pricing import compute_price
from academia.promotion.models import PromotionFailure, PromotionResult
from academia.store import Group, GroupStatus
from academia.store.store import load_course, load_student
from academia.structure import DEFAULT_LEVEL_PRICE, TeacherSelector, ensure_level
from academia.structure.resolver import random_code

if TYPE_CHECKING:
    from decimal import Decimal

    from academia.api.events import EventManager
    from academia.store import SchoolStore

logger = logging.getLogger(__name__)

PROMOTION_GROUP_CAPACITY = 20
PROMOTION_GROUP_MONTHS = 1
AUTOMATIC_PROMOTION_NOTE = "Automatic Promotion"


class PromotionOrchestrator:
    """Promotes students into a fresh group of the next course.

    The batch group is created and committed first. Each student is then
    enrolled in a transaction of its own, so one failure never undoes the
    others. Credentials are not rotated.
    """

    def __init__(
        self,
        store: SchoolStore,
        event_manager: EventManager | None = None,
        teacher_selector: TeacherSelector | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            store: SchoolStore instance for persistence.
            event_manager: EventManager for promotion_completed events.
            teacher_selector: Policy for the teacher of the batch group.
        """
        self.store = store
        self.event_manager = event_manager
        self.teacher_selector = teacher_selector or TeacherSelector()

    def _create_batch_group(self, next_course_id: str, start: datetime) -> tuple[Group, Decimal]:
        with self.store.transaction() as session:
            course = load_course(session, next_course_id)
            teacher_id = self.teacher_selector.select_teacher_id(session)
            level = ensure_level(session, course, course.duration_weeks, course.total_hours)

            group = Group(
                level=level,
                teacher_id=teacher_id,
                name=f"Auto-generated group - {course.name}",
                code=f"PROMO-{course.code}-{start:%Y%m%d}-{random_code(2)}",
                start_date=start,
                end_date=add_months(start, PROMOTION_GROUP_MONTHS),
                max_capacity=PROMOTION_GROUP_CAPACITY,
                status=GroupStatus.OPEN.value,
                classroom=None,
            )
            session.add(group)
            session.flush()
            logger.info("Created promotion group %s for course %s", group.code, course.code)
            return group, course.base_price or DEFAULT_LEVEL_PRICE

    def _promote_one(
        self,
        student_id: str,
        group_id: str,
        base_price: Decimal,
        actor_id: str | None,
    ) -> None:
        with self.store.transaction() as session:
            student = load_student(session, student_id)
            agreement = student.school.agreement if student.school is not None else None
            add_enrollment(
                session,
                student_id=student.id,
                group_id=group_id,
                quote=compute_price(base_price, agreement),
                notes=AUTOMATIC_PROMOTION_NOTE,
                actor_id=actor_id,
            )

    def promote_students(
        self,
        next_course_id: str,
        start_date: str | date | datetime,
        student_ids: list[str],
        actor_id: str | None = None,
    ) -> PromotionResult:
        """Enroll a batch of students into one new group of a course.

        Args:
            next_course_id: Course the students move into.
            start_date: Intake date of the new group.
            student_ids: Students to enroll, processed in order.
            actor_id: User performing the promotion.

        Returns:
            PromotionResult with the created group, counts and failures.

        Raises:
            InvalidRequestError: If start_date cannot be parsed.
            CourseNotFoundError: If the course doesn't exist.
            NoTeacherAvailableError: If no teacher can take the group.
        """
        start = parse_date(start_date, "start_date")
        group, base_price = self._create_batch_group(next_course_id, start)

        result = PromotionResult(new_group=group)
        for student_id in student_ids:
            try:
                self._promote_one(student_id, group.id, base_price, actor_id)
            except AcademiaError as e:
                logger.warning("Promotion of student %s failed: %s", student_id, e)
                result.failures.append(PromotionFailure(student_id=student_id, reason=str(e)))
                result.skipped_count += 1
                continue
            result.promoted_count += 1

        result.new_group = self.store.get_group(group.id)
        logger.info(
            "Promotion into %s finished: %d promoted, %d skipped",
            group.code,
            result.promoted_count,
            result.skipped_count,
        )
        if self.event_manager is not None:
            self.event_manager.emit_promotion_completed(
                group_id=group.id,
                course_id=next_course_id,
                promoted=result.promoted_count,
                skipped=result.skipped_count,
            )
        return result
