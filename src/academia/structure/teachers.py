"""Teacher selection for automatically created groups."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select

from academia.store.models import Teacher
from academia.structure.exceptions import NoTeacherAvailableError

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class TeacherSelector:
    """Picks the teacher for groups nobody scheduled by hand.

    With a configured pool teacher that teacher is always used. Otherwise the
    earliest registered active teacher is chosen, so the pick does not depend
    on row order in the database.
    """

    def __init__(self, pool_teacher_id: str | None = None) -> None:
        self.pool_teacher_id = pool_teacher_id

    def select_teacher_id(self, session: Session) -> str:
        """Return the ID of the teacher to assign.

        Raises:
            NoTeacherAvailableError: If the pool teacher is missing or inactive,
                or no active teacher exists at all.
        """
        if self.pool_teacher_id is not None:
            teacher = session.get(Teacher, self.pool_teacher_id)
            if teacher is None or not teacher.is_active or teacher.deleted_at is not None:
                raise NoTeacherAvailableError(
                    f"Pool teacher '{self.pool_teacher_id}' is not available"
                )
            return teacher.id

        stmt = (
            select(Teacher.id)
            .where(Teacher.is_active.is_(True), Teacher.deleted_at.is_(None))
            .order_by(Teacher.created_at, Teacher.id)
            .limit(1)
        )
        teacher_id = session.execute(stmt).scalar_one_or_none()
        if teacher_id is None:
            raise NoTeacherAvailableError(
                "No teacher is registered to take an automatically created group"
            )
        logger.debug("Selected fallback teacher %s", teacher_id)
        return teacher_id
