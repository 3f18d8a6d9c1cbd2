"""SchoolStore - Main API for persistence operations."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload

from academia.logging import sanitize_for_log
from academia.store.database import Database
from academia.store.exceptions import (
    CourseNotFoundError,
    EnrollmentNotFoundError,
    GroupNotFoundError,
    PersistenceError,
    StudentNotFoundError,
)
from academia.store.models import (
    Agreement,
    Course,
    DiscountType,
    Enrollment,
    EnrollmentStatus,
    Group,
    GroupStatus,
    Level,
    School,
    Student,
    Teacher,
    User,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

# Enrollment statuses that occupy a seat in a group
SEAT_HOLDING_STATUSES = (EnrollmentStatus.ACTIVE.value, EnrollmentStatus.PENDING.value)


def enrollment_relations() -> tuple[Any, ...]:
    """Loader options that enrich an enrollment with everything callers display."""
    return (
        selectinload(Enrollment.student).selectinload(Student.user),
        selectinload(Enrollment.student).selectinload(Student.school),
        selectinload(Enrollment.group).selectinload(Group.level).selectinload(Level.course),
        selectinload(Enrollment.group).selectinload(Group.schedules),
        selectinload(Enrollment.group).selectinload(Group.teacher).selectinload(Teacher.user),
        selectinload(Enrollment.agreement),
        selectinload(Enrollment.created_by),
    )


def load_student(session: Session, student_id: str) -> Student:
    """Load a non-deleted student with user, school and agreement.

    Raises:
        StudentNotFoundError: If the student doesn't exist or was soft deleted.
    """
    stmt = (
        select(Student)
        .options(
            selectinload(Student.user),
            selectinload(Student.school).selectinload(School.agreement),
        )
        .where(Student.id == student_id, Student.deleted_at.is_(None))
        .execution_options(populate_existing=True)
    )
    student = session.execute(stmt).scalar_one_or_none()
    if student is None:
        raise StudentNotFoundError(f"Student with id '{student_id}' not found")
    return student


def load_group(session: Session, group_id: str) -> Group:
    """Load a group with its level and course.

    Raises:
        GroupNotFoundError: If the group doesn't exist.
    """
    stmt = (
        select(Group)
        .options(
            selectinload(Group.level).selectinload(Level.course),
            selectinload(Group.schedules),
        )
        .where(Group.id == group_id)
        .execution_options(populate_existing=True)
    )
    group = session.execute(stmt).scalar_one_or_none()
    if group is None:
        raise GroupNotFoundError(f"Group with id '{group_id}' not found")
    return group


def load_course(session: Session, course_id: str) -> Course:
    """Load a course with its previous course.

    Raises:
        CourseNotFoundError: If the course doesn't exist.
    """
    stmt = (
        select(Course)
        .options(selectinload(Course.previous_course))
        .where(Course.id == course_id)
        .execution_options(populate_existing=True)
    )
    course = session.execute(stmt).scalar_one_or_none()
    if course is None:
        raise CourseNotFoundError(f"Course with id '{course_id}' not found")
    return course


class SchoolStore:
    """Main API for persistence operations.

    Owns the database and hands out transactional sessions. Simple catalog
    writes (agreements, schools, courses, levels, groups) and the enrollment
    read paths live here; business workflows live in their own components.
    """

    def __init__(self, db_path: str = "academia.db") -> None:
        """Initialize the store with a SQLite database.

        Creates database and tables if they don't exist.

        Args:
            db_path: Path to SQLite database file
        """
        self._db = Database(db_path)
        self._db.create_tables()

    @property
    def database(self) -> Database:
        return self._db

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Open a unit of work.

        Commits when the block exits normally. Any exception rolls back every
        write made through the session; storage errors are re-raised as
        PersistenceError with the original error chained.
        """
        session = self._db.get_session()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            message = sanitize_for_log(str(e))
            logger.error("Transaction rolled back: %s", message)
            raise PersistenceError(f"Storage operation failed: {message}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # --- Catalog Operations ---

    def create_agreement(
        self,
        name: str,
        agreement_code: str,
        discount_type: DiscountType,
        discount_value: Decimal | int | float | str,
        start_date: datetime,
        end_date: datetime | None = None,
        is_active: bool = True,
        notes: str | None = None,
    ) -> Agreement:
        """Create a discount agreement."""
        with self.transaction() as session:
            agreement = Agreement(
                name=name,
                agreement_code=agreement_code,
                discount_type=DiscountType(discount_type).value,
                discount_value=Decimal(str(discount_value)),
                start_date=start_date,
                end_date=end_date,
                is_active=is_active,
                notes=notes,
            )
            session.add(agreement)
            session.flush()
            return agreement

    def create_school(self, name: str, code: str, agreement_id: str | None = None) -> School:
        """Create a school, optionally bound to an agreement."""
        with self.transaction() as session:
            school = School(name=name, code=code, agreement_id=agreement_id)
            session.add(school)
            session.flush()
            return school

    def create_course(
        self,
        name: str,
        code: str,
        base_price: Decimal | int | float | str | None = None,
        previous_course_id: str | None = None,
        duration_weeks: int | None = None,
        total_hours: int | None = None,
        description: str | None = None,
    ) -> Course:
        """Create a catalog course.

        Raises:
            CourseNotFoundError: If previous_course_id doesn't exist
        """
        with self.transaction() as session:
            if previous_course_id is not None and session.get(Course, previous_course_id) is None:
                raise CourseNotFoundError(f"Course with id '{previous_course_id}' not found")
            course = Course(
                name=name,
                code=code,
                base_price=Decimal(str(base_price)) if base_price is not None else None,
                previous_course_id=previous_course_id,
                duration_weeks=duration_weeks,
                total_hours=total_hours,
                description=description,
            )
            session.add(course)
            session.flush()
            return course

    def create_level(
        self,
        course_id: str,
        name: str,
        code: str,
        base_price: Decimal | int | float | str,
        order_index: int = 1,
        duration_weeks: int = 4,
        total_hours: int = 20,
    ) -> Level:
        """Create a level of a course.

        Raises:
            CourseNotFoundError: If the course doesn't exist
        """
        with self.transaction() as session:
            if session.get(Course, course_id) is None:
                raise CourseNotFoundError(f"Course with id '{course_id}' not found")
            level = Level(
                course_id=course_id,
                name=name,
                code=code,
                base_price=Decimal(str(base_price)),
                order_index=order_index,
                duration_weeks=duration_weeks,
                total_hours=total_hours,
            )
            session.add(level)
            session.flush()
            return level

    def create_group(
        self,
        level_id: str,
        teacher_id: str,
        name: str,
        code: str,
        start_date: datetime,
        end_date: datetime,
        max_capacity: int = 30,
        status: GroupStatus = GroupStatus.OPEN,
    ) -> Group:
        """Create a group for a level."""
        with self.transaction() as session:
            group = Group(
                level_id=level_id,
                teacher_id=teacher_id,
                name=name,
                code=code,
                start_date=start_date,
                end_date=end_date,
                max_capacity=max_capacity,
                status=GroupStatus(status).value,
            )
            session.add(group)
            session.flush()
            return group

    def get_course(self, course_id: str) -> Course:
        """Get a course by ID.

        Raises:
            CourseNotFoundError: If the course doesn't exist
        """
        with self.transaction() as session:
            return load_course(session, course_id)

    def get_group(self, group_id: str) -> Group:
        """Get a group with its level, course and schedules.

        Raises:
            GroupNotFoundError: If the group doesn't exist
        """
        with self.transaction() as session:
            return load_group(session, group_id)

    def list_groups(self, course_id: str | None = None) -> list[Group]:
        """List groups, newest start date first."""
        with self.transaction() as session:
            stmt = select(Group).options(selectinload(Group.schedules))
            if course_id is not None:
                stmt = stmt.join(Group.level).where(Level.course_id == course_id)
            stmt = stmt.order_by(Group.start_date.desc())
            return list(session.execute(stmt).scalars().all())

    def list_levels(self, course_id: str) -> list[Level]:
        """List the levels of a course by order index."""
        with self.transaction() as session:
            stmt = select(Level).where(Level.course_id == course_id).order_by(Level.order_index)
            return list(session.execute(stmt).scalars().all())

    # --- People Operations ---

    def get_student(self, student_id: str) -> Student:
        """Get a non-deleted student with user, school and agreement.

        Raises:
            StudentNotFoundError: If the student doesn't exist or was deleted
        """
        with self.transaction() as session:
            return load_student(session, student_id)

    def list_students(self, include_deleted: bool = False) -> list[Student]:
        """List students, most recently created first."""
        with self.transaction() as session:
            stmt = select(Student).options(selectinload(Student.user))
            if not include_deleted:
                stmt = stmt.where(Student.deleted_at.is_(None))
            stmt = stmt.order_by(Student.created_at.desc())
            return list(session.execute(stmt).scalars().all())

    # --- Enrollment Read Paths ---

    def get_enrollment(self, enrollment_id: str) -> Enrollment:
        """Get an enrollment enriched with its relations.

        Raises:
            EnrollmentNotFoundError: If the enrollment doesn't exist
        """
        with self.transaction() as session:
            stmt = (
                select(Enrollment)
                .options(*enrollment_relations())
                .where(Enrollment.id == enrollment_id)
            )
            enrollment = session.execute(stmt).scalar_one_or_none()
            if enrollment is None:
                raise EnrollmentNotFoundError(f"Enrollment with id '{enrollment_id}' not found")
            return enrollment

    def list_enrollments(
        self,
        student_id: str | None = None,
        group_id: str | None = None,
        status: EnrollmentStatus | None = None,
    ) -> list[Enrollment]:
        """List enrollments with optional filters, most recent first."""
        with self.transaction() as session:
            stmt = select(Enrollment).options(*enrollment_relations())
            if student_id is not None:
                stmt = stmt.where(Enrollment.student_id == student_id)
            if group_id is not None:
                stmt = stmt.where(Enrollment.group_id == group_id)
            if status is not None:
                stmt = stmt.where(Enrollment.status == EnrollmentStatus(status).value)
            stmt = stmt.order_by(Enrollment.enrollment_date.desc())
            return list(session.execute(stmt).scalars().all())

    def enrollment_report(
        self,
        course_id: str | None = None,
        year: int | None = None,
        academic_period: int | None = None,
        period: str | None = None,
    ) -> list[Enrollment]:
        """Enrollments for reporting, grouped by course name then student surname.

        Args:
            course_id: Only enrollments in groups of this course
            year: Only groups starting in this year
            academic_period: With year, 1 = January-June, 2 = July-December
            period: Free text matched on group code or name, used only when
                neither year nor academic_period is given
        """
        with self.transaction() as session:
            stmt = (
                select(Enrollment)
                .join(Enrollment.group)
                .join(Group.level)
                .join(Level.course)
                .join(Enrollment.student)
                .join(Student.user)
                .options(*enrollment_relations())
            )

            if course_id is not None:
                stmt = stmt.where(Level.course_id == course_id)

            if year is not None:
                window_start = datetime(year, 1, 1)
                window_end = datetime(year + 1, 1, 1)
                if academic_period == 1:
                    window_end = datetime(year, 7, 1)
                elif academic_period == 2:
                    window_start = datetime(year, 7, 1)
                stmt = stmt.where(Group.start_date >= window_start, Group.start_date < window_end)

            if period and year is None and academic_period is None:
                pattern = f"%{period}%"
                stmt = stmt.where(or_(Group.code.like(pattern), Group.name.like(pattern)))

            stmt = stmt.order_by(Course.name.asc(), User.paternal_surname.asc())
            return list(session.execute(stmt).scalars().all())

    def delete_enrollment(self, enrollment_id: str) -> None:
        """Delete an enrollment. Student and group are left untouched.

        Raises:
            EnrollmentNotFoundError: If the enrollment doesn't exist
        """
        with self.transaction() as session:
            enrollment = session.get(Enrollment, enrollment_id)
            if enrollment is None:
                raise EnrollmentNotFoundError(f"Enrollment with id '{enrollment_id}' not found")

            if enrollment.status in SEAT_HOLDING_STATUSES:
                group = session.get(Group, enrollment.group_id)
                if group is not None and group.current_enrolled > 0:
                    group.current_enrolled -= 1

            session.delete(enrollment)
            logger.info("Deleted enrollment %s", enrollment_id)


def is_unique_violation(error: BaseException) -> bool:
    """Whether a PersistenceError (or its cause) is a unique constraint failure."""
    cause = error.__cause__ if isinstance(error, PersistenceError) else error
    return isinstance(cause, IntegrityError) and "UNIQUE" in str(cause).upper()
