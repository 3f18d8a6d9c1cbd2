"""Structure resolver - Find-or-create of the group a course enrollment lands in."""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, time
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import select

from academia.dates import add_months, utcnow
from academia.store import (
    DayOfWeek,
    Group,
    GroupStatus,
    Level,
    PersistenceError,
    Schedule,
)
from academia.store.store import is_unique_violation, load_course
from academia.structure.teachers import TeacherSelector

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from academia.store import Course, SchoolStore

logger = logging.getLogger(__name__)

DEFAULT_LEVEL_NAME = "Single Level"
DEFAULT_LEVEL_WEEKS = 4
DEFAULT_LEVEL_HOURS = 20
DEFAULT_LEVEL_PRICE = Decimal("450.00")

DEFAULT_GROUP_CAPACITY = 30
DEFAULT_GROUP_MONTHS = 6
DEFAULT_SCHEDULE_DAYS = (DayOfWeek.MONDAY, DayOfWeek.WEDNESDAY, DayOfWeek.FRIDAY)
DEFAULT_SCHEDULE_START = time(8, 0)
DEFAULT_SCHEDULE_END = time(12, 0)


def random_code(nbytes: int = 3) -> str:
    """Short random upper-case hex token for generated codes."""
    return secrets.token_hex(nbytes).upper()


def ensure_level(
    session: Session,
    course: Course,
    duration_weeks: int | None = None,
    total_hours: int | None = None,
) -> Level:
    """Return the course's first level, synthesizing a default one if it has none.

    Levels are taken in order_index order. A synthesized level is marked as
    the course's default level; the unique marker makes a concurrent second
    synthesis fail on flush.
    """
    stmt = (
        select(Level)
        .where(Level.course_id == course.id)
        .order_by(Level.order_index, Level.created_at)
        .limit(1)
    )
    level = session.execute(stmt).scalar_one_or_none()
    if level is not None:
        return level

    level = Level(
        course_id=course.id,
        name=DEFAULT_LEVEL_NAME,
        code=f"NIV-{random_code()}",
        order_index=1,
        duration_weeks=duration_weeks or DEFAULT_LEVEL_WEEKS,
        total_hours=total_hours or DEFAULT_LEVEL_HOURS,
        base_price=DEFAULT_LEVEL_PRICE,
        default_for_course_id=course.id,
    )
    session.add(level)
    session.flush()
    logger.info("Created default level %s for course %s", level.code, course.code)
    return level


def create_default_group(
    session: Session,
    level: Level,
    teacher_id: str,
    now: datetime | None = None,
) -> Group:
    """Create an OPEN group for a level with the standard weekly schedule.

    Runs for six months from ``now`` with 30 seats, Monday, Wednesday and
    Friday mornings.
    """
    now = now or utcnow()
    group = Group(
        level_id=level.id,
        teacher_id=teacher_id,
        name=f"Group {now.year}",
        code=f"GRP-{now.year}-{random_code()}",
        start_date=now,
        end_date=add_months(now, DEFAULT_GROUP_MONTHS),
        max_capacity=DEFAULT_GROUP_CAPACITY,
        status=GroupStatus.OPEN.value,
        schedules=[
            Schedule(
                day_of_week=day.value,
                start_time=DEFAULT_SCHEDULE_START,
                end_time=DEFAULT_SCHEDULE_END,
            )
            for day in DEFAULT_SCHEDULE_DAYS
        ],
    )
    session.add(group)
    session.flush()
    logger.info("Created default group %s for level %s", group.code, level.code)
    return group


class StructureResolver:
    """Resolves a course to a group a student can join.

    Used when an enrollment names a course but no group. Prefers the OPEN
    group of the course that started last; otherwise creates the missing
    level and group.
    """

    def __init__(
        self,
        store: SchoolStore,
        teacher_selector: TeacherSelector | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            store: SchoolStore whose transactions the resolver runs in.
            teacher_selector: Policy for the teacher of created groups.
        """
        self.store = store
        self.teacher_selector = teacher_selector or TeacherSelector()

    def find_open_group(self, session: Session, course_id: str) -> Group | None:
        """The OPEN group of a course with the latest start date, if any."""
        stmt = (
            select(Group)
            .join(Group.level)
            .where(Level.course_id == course_id, Group.status == GroupStatus.OPEN.value)
            .order_by(Group.start_date.desc(), Group.created_at.desc())
            .limit(1)
        )
        return session.execute(stmt).scalar_one_or_none()

    def resolve_group_for_course(self, course_id: str) -> str:
        """Get or create the group for a course.

        Find and create run in one transaction. When a concurrent caller wins
        the race and the insert hits a unique constraint, the transaction is
        rolled back and the find is retried once.

        Args:
            course_id: The course's unique ID.

        Returns:
            ID of the found or created group.

        Raises:
            CourseNotFoundError: If the course doesn't exist.
            NoTeacherAvailableError: If a group must be created and no teacher
                can be assigned.
        """
        try:
            return self._find_or_create(course_id)
        except PersistenceError as e:
            if not is_unique_violation(e):
                raise
            logger.warning("Concurrent structure creation for course %s, retrying", course_id)
        return self._find_or_create(course_id)

    def _find_or_create(self, course_id: str) -> str:
        with self.store.transaction() as session:
            course = load_course(session, course_id)

            group = self.find_open_group(session, course.id)
            if group is not None:
                logger.debug("Using open group %s for course %s", group.code, course.code)
                return group.id

            teacher_id = self.teacher_selector.select_teacher_id(session)
            level = ensure_level(session, course)
            group = create_default_group(session, level, teacher_id)
            return group.id
