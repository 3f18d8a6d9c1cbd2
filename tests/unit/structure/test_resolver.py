"""Unit tests for the structure resolver and teacher selection."""

from datetime import datetime, time, timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from academia.dates import utcnow
from academia.store import (
    CourseNotFoundError,
    Group,
    GroupStatus,
    Level,
    PersistenceError,
    SchoolStore,
    Teacher,
)
from academia.structure import NoTeacherAvailableError, StructureResolver, TeacherSelector


@pytest.fixture
def resolver(store: SchoolStore) -> StructureResolver:
    return StructureResolver(store)


def count(store: SchoolStore, model) -> int:
    with store.transaction() as session:
        return session.execute(select(func.count(model.id))).scalar_one()


@pytest.mark.unit
class TestFindExistingGroup:
    """An OPEN group of the course is reused."""

    def test_prefers_latest_start_date(
        self, store: SchoolStore, resolver: StructureResolver, factory
    ) -> None:
        teacher = factory.teacher()
        course = factory.course()
        level = factory.level(course)
        factory.group(level, teacher, start_date=datetime(2025, 1, 1))
        latest = factory.group(level, teacher, start_date=datetime(2025, 6, 1))

        assert resolver.resolve_group_for_course(course.id) == latest.id

    def test_ignores_groups_not_open(
        self, store: SchoolStore, resolver: StructureResolver, factory
    ) -> None:
        teacher = factory.teacher()
        course = factory.course()
        level = factory.level(course)
        open_group = factory.group(level, teacher, start_date=datetime(2025, 1, 1))
        factory.group(level, teacher, GroupStatus.COMPLETED, start_date=datetime(2025, 6, 1))
        factory.group(level, teacher, GroupStatus.IN_PROGRESS, start_date=datetime(2025, 7, 1))

        assert resolver.resolve_group_for_course(course.id) == open_group.id

    def test_ignores_groups_of_other_courses(
        self, store: SchoolStore, resolver: StructureResolver, factory
    ) -> None:
        teacher = factory.teacher()
        course = factory.course()
        factory.group(factory.level(factory.course()), teacher)

        group_id = resolver.resolve_group_for_course(course.id)

        assert count(store, Group) == 2
        assert store.get_group(group_id).level.course_id == course.id


@pytest.mark.unit
class TestCreateDefaults:
    """Missing levels and groups are synthesized."""

    def test_synthesizes_level_and_group(
        self, store: SchoolStore, resolver: StructureResolver, factory
    ) -> None:
        teacher = factory.teacher()
        course = factory.course(name="English A1")
        before = utcnow()

        group = store.get_group(resolver.resolve_group_for_course(course.id))

        level = group.level
        assert level.course_id == course.id
        assert level.name == "Single Level"
        assert level.code.startswith("NIV-")
        assert level.duration_weeks == 4
        assert level.total_hours == 20
        assert level.base_price == Decimal("450.00")
        assert level.default_for_course_id == course.id

        assert group.code.startswith(f"GRP-{before.year}-")
        assert group.name == f"Group {before.year}"
        assert group.status == GroupStatus.OPEN
        assert group.max_capacity == 30
        assert group.teacher_id == teacher.id
        assert group.classroom is None
        assert group.start_date >= before
        assert timedelta(days=180) <= group.end_date - group.start_date <= timedelta(days=184)

        slots = sorted((s.day_of_week, s.start_time, s.end_time) for s in group.schedules)
        assert slots == [
            ("FRIDAY", time(8, 0), time(12, 0)),
            ("MONDAY", time(8, 0), time(12, 0)),
            ("WEDNESDAY", time(8, 0), time(12, 0)),
        ]

    def test_reuses_first_existing_level(
        self, store: SchoolStore, resolver: StructureResolver, factory
    ) -> None:
        factory.teacher()
        course = factory.course()
        factory.level(course, order_index=2)
        first = factory.level(course, order_index=1)

        group = store.get_group(resolver.resolve_group_for_course(course.id))

        assert group.level_id == first.id
        assert count(store, Level) == 2

    def test_twice_in_succession_returns_same_group(
        self, store: SchoolStore, resolver: StructureResolver, factory
    ) -> None:
        factory.teacher()
        course = factory.course()

        first = resolver.resolve_group_for_course(course.id)
        second = resolver.resolve_group_for_course(course.id)

        assert first == second
        assert count(store, Group) == 1
        assert count(store, Level) == 1

    def test_no_teacher_creates_nothing(
        self, store: SchoolStore, resolver: StructureResolver, factory
    ) -> None:
        course = factory.course()

        with pytest.raises(NoTeacherAvailableError):
            resolver.resolve_group_for_course(course.id)

        assert count(store, Level) == 0
        assert count(store, Group) == 0

    def test_course_not_found(self, resolver: StructureResolver) -> None:
        with pytest.raises(CourseNotFoundError):
            resolver.resolve_group_for_course("missing")


@pytest.mark.unit
class TestRetryOnConflict:
    """A unique violation from a concurrent creator triggers one retry."""

    def _unique_violation(self) -> PersistenceError:
        error = PersistenceError("conflict")
        error.__cause__ = IntegrityError(
            "INSERT INTO levels", {}, Exception("UNIQUE constraint failed: levels.code")
        )
        return error

    def test_retries_find_once(self, resolver: StructureResolver) -> None:
        with patch.object(
            resolver, "_find_or_create", side_effect=[self._unique_violation(), "group-1"]
        ) as find_or_create:
            assert resolver.resolve_group_for_course("course-1") == "group-1"

        assert find_or_create.call_count == 2

    def test_second_conflict_propagates(self, resolver: StructureResolver) -> None:
        with (
            patch.object(
                resolver,
                "_find_or_create",
                side_effect=[self._unique_violation(), self._unique_violation()],
            ),
            pytest.raises(PersistenceError),
        ):
            resolver.resolve_group_for_course("course-1")

    def test_other_storage_errors_not_retried(self, resolver: StructureResolver) -> None:
        error = PersistenceError("disk")
        error.__cause__ = OperationalError("SELECT", {}, Exception("disk I/O error"))

        with (
            patch.object(resolver, "_find_or_create", side_effect=[error]) as find_or_create,
            pytest.raises(PersistenceError),
        ):
            resolver.resolve_group_for_course("course-1")

        assert find_or_create.call_count == 1


@pytest.mark.unit
class TestTeacherSelector:
    """Tests for TeacherSelector."""

    def select(self, store: SchoolStore, selector: TeacherSelector) -> str:
        with store.transaction() as session:
            return selector.select_teacher_id(session)

    def test_earliest_active_teacher(self, store: SchoolStore, factory) -> None:
        first = factory.teacher()
        factory.teacher()

        assert self.select(store, TeacherSelector()) == first.id

    def test_skips_inactive_and_deleted(self, store: SchoolStore, factory) -> None:
        inactive = factory.teacher()
        deleted = factory.teacher()
        active = factory.teacher()
        with store.transaction() as session:
            session.get(Teacher, inactive.id).is_active = False
            session.get(Teacher, deleted.id).deleted_at = utcnow()

        assert self.select(store, TeacherSelector()) == active.id

    def test_pool_teacher_wins(self, store: SchoolStore, factory) -> None:
        factory.teacher()
        pool = factory.teacher()

        assert self.select(store, TeacherSelector(pool.id)) == pool.id

    def test_missing_pool_teacher(self, store: SchoolStore, factory) -> None:
        factory.teacher()

        with pytest.raises(NoTeacherAvailableError):
            self.select(store, TeacherSelector("missing"))

    def test_no_teachers(self, store: SchoolStore) -> None:
        with pytest.raises(NoTeacherAvailableError):
            self.select(store, TeacherSelector())
