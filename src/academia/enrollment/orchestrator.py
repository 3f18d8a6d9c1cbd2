"""Enrollment orchestrator - Enrolls one student and rotates their login."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update

from academia.credentials import CredentialIssuer
from academia.dates import utcnow
from academia.enrollment.exceptions import GroupFullError
from academia.enrollment.models import EnrollmentResult
from academia.exceptions import InvalidRequestError
from academia.prerequisites import PrerequisiteChecker, PrerequisiteNotMetError
from academia.pricing import compute_price
from academia.store import Enrollment, EnrollmentStatus, Group, User
from academia.store.store import (
    SEAT_HOLDING_STATUSES,
    enrollment_relations,
    load_course,
    load_group,
    load_student,
)
from academia.structure import DEFAULT_LEVEL_PRICE, StructureResolver

if TYPE_CHECKING:
    from datetime import datetime

    from sqlalchemy.orm import Session

    from academia.api.events import EventManager
    from academia.credentials import IssuedCredentials
    from academia.pricing import PriceQuote
    from academia.store import Course, SchoolStore

logger = logging.getLogger(__name__)

REGULAR_ENROLLMENT_NOTE = "Regular enrollment"


def reissue_credentials(session: Session, user_id: str, credentials: IssuedCredentials) -> None:
    """Overwrite a user's username and password hash.

    Always applied, even when the student already holds a login from an
    earlier enrollment. The write is flushed so later statements in the same
    transaction see it.
    """
    user = session.get(User, user_id)
    if user is None:
        raise InvalidRequestError(f"User '{user_id}' has no login to rotate")
    user.username = credentials.username
    user.password_hash = credentials.password_hash
    session.flush()
    logger.info("Reissued credentials for user %s", user_id)


def add_enrollment(
    session: Session,
    student_id: str,
    group_id: str,
    quote: PriceQuote,
    notes: str,
    actor_id: str | None = None,
    now: datetime | None = None,
) -> Enrollment:
    """Claim a seat in the group and insert an ACTIVE enrollment.

    Dates are copied from the group. ACTIVE and PENDING enrollments hold a
    seat. The seat is claimed with one conditional UPDATE on the group row,
    which counts the held seats and sets ``current_enrolled`` while holding
    the database write lock.

    Raises:
        GroupFullError: If the group is at capacity.
    """
    group = session.get(Group, group_id)
    if group is None:
        raise InvalidRequestError(f"Group '{group_id}' vanished during enrollment")

    seats_held = (
        select(func.count(Enrollment.id))
        .where(
            Enrollment.group_id == Group.id,
            Enrollment.status.in_(SEAT_HOLDING_STATUSES),
        )
        .scalar_subquery()
    )
    claimed = session.execute(
        update(Group)
        .where(Group.id == group.id, seats_held < Group.max_capacity)
        .values(current_enrolled=seats_held + 1)
        .execution_options(synchronize_session=False)
    ).rowcount
    if claimed == 0:
        raise GroupFullError(group.code, group.max_capacity)
    session.refresh(group, ["current_enrolled"])

    enrollment = Enrollment(
        student_id=student_id,
        group_id=group.id,
        enrollment_date=now or utcnow(),
        start_date=group.start_date,
        end_date=group.end_date,
        status=EnrollmentStatus.ACTIVE.value,
        agreed_price=quote.final_price,
        discount_percentage=quote.discount_percentage,
        agreement_id=quote.agreement_id,
        enrollment_notes=notes,
        created_by_id=actor_id,
    )
    session.add(enrollment)
    session.flush()
    return enrollment


class EnrollmentOrchestrator:
    """Creates enrollments.

    Validation, pricing and credential generation happen before any write.
    The credential rotation and the enrollment insert then share one
    transaction, so either both are visible afterwards or neither is.
    """

    def __init__(
        self,
        store: SchoolStore,
        event_manager: EventManager | None = None,
        resolver: StructureResolver | None = None,
        checker: PrerequisiteChecker | None = None,
        issuer: CredentialIssuer | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            store: SchoolStore instance for persistence.
            event_manager: EventManager for enrollment_created events.
            resolver: Resolves a course to a group when no group is given.
            checker: Prerequisite policy.
            issuer: Issues the rotated student login.
        """
        self.store = store
        self.event_manager = event_manager
        self.resolver = resolver or StructureResolver(store)
        self.checker = checker or PrerequisiteChecker()
        self.issuer = issuer or CredentialIssuer()

    def _check_prerequisite(self, session: Session, student_id: str, course: Course) -> None:
        if self.checker.is_prerequisite_satisfied(session, student_id, course):
            return
        required = course.previous_course
        if required is None:
            required = load_course(session, course.previous_course_id)
        logger.info(
            "Student %s rejected from course %s: prerequisite %s not approved",
            student_id,
            course.code,
            required.code,
        )
        raise PrerequisiteNotMetError(required.name)

    def create_enrollment(
        self,
        student_id: str,
        group_id: str | None = None,
        course_id: str | None = None,
        actor_id: str | None = None,
    ) -> EnrollmentResult:
        """Enroll a student in a group, or in a course's group.

        Args:
            student_id: The student's ID.
            group_id: Target group. Takes precedence over course_id.
            course_id: Target course, resolved to a group when group_id is None.
            actor_id: User performing the enrollment.

        Returns:
            EnrollmentResult with the enriched enrollment and the one-time login.

        Raises:
            StudentNotFoundError: If the student doesn't exist or was deleted.
            InvalidRequestError: If neither group_id nor course_id is given.
            CourseNotFoundError: If course_id doesn't exist.
            GroupNotFoundError: If group_id doesn't exist.
            PrerequisiteNotMetError: If the previous course was not approved.
            NoTeacherAvailableError: If a group must be created without teachers.
            GroupFullError: If the group is at capacity.
            PersistenceError: If storage fails; nothing was written.
        """
        with self.store.transaction() as session:
            student = load_student(session, student_id)
            if group_id is None and course_id is None:
                raise InvalidRequestError("Either group_id or course_id is required")

            # Reject before the resolver may create structure for the course
            if group_id is None:
                self._check_prerequisite(session, student.id, load_course(session, course_id))

        if group_id is None:
            group_id = self.resolver.resolve_group_for_course(course_id)

        with self.store.transaction() as session:
            group = load_group(session, group_id)
            course = group.level.course
            self._check_prerequisite(session, student.id, course)

        agreement = student.school.agreement if student.school is not None else None
        quote = compute_price(group.level.base_price or DEFAULT_LEVEL_PRICE, agreement)
        credentials = self.issuer.issue_credentials(
            student.user.first_name, student.user.paternal_surname
        )

        with self.store.transaction() as session:
            reissue_credentials(session, student.user_id, credentials)
            created = add_enrollment(
                session,
                student_id=student.id,
                group_id=group.id,
                quote=quote,
                notes=REGULAR_ENROLLMENT_NOTE,
                actor_id=actor_id,
            )
            stmt = (
                select(Enrollment)
                .options(*enrollment_relations())
                .where(Enrollment.id == created.id)
                .execution_options(populate_existing=True)
            )
            enrollment = session.execute(stmt).scalar_one()

        logger.info(
            "Enrolled student %s in group %s (course %s, price %s, discount %s%%)",
            student.id,
            group.code,
            course.code,
            quote.final_price,
            quote.discount_percentage,
        )
        if self.event_manager is not None:
            self.event_manager.emit_enrollment_created(
                enrollment_id=enrollment.id,
                student_id=student.id,
                group_id=group.id,
                course_id=course.id,
                agreed_price=str(enrollment.agreed_price),
            )

        return EnrollmentResult(
            enrollment=enrollment,
            username=credentials.username,
            password=credentials.plain_password,
        )
