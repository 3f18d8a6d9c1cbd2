"""Unit tests for EligibilityService."""

from decimal import Decimal

import pytest

from academia.promotion import EligibilityService
from academia.store import (
    CourseNotFoundError,
    EnrollmentStatus,
    SchoolStore,
    Student,
    StudentStatus,
)

PASSING = {
    "SPEAKING": 70,
    "LISTENING": 70,
    "READING": 70,
    "WRITING": 70,
    "VOCABULARY": 70,
    "GRAMMAR": 70,
}


@pytest.fixture
def eligibility(store: SchoolStore) -> EligibilityService:
    return EligibilityService(store)


@pytest.mark.unit
class TestApprovedCandidates:
    """Tests for approved_candidates."""

    def test_lists_passing_students_by_name(self, eligibility, factory) -> None:
        course = factory.course()
        group = factory.group(factory.level(course), factory.teacher())
        zoe = factory.student(first_name="Zoe", paternal_surname="Alba")
        ana = factory.student(first_name="Ana", paternal_surname="Zapata")
        factory.grades(factory.enrollment(zoe, group), PASSING)
        factory.grades(factory.enrollment(ana, group), PASSING)

        candidates = eligibility.approved_candidates(course.id)

        assert [c.student_id for c in candidates] == [ana.id, zoe.id]
        assert candidates[0].full_name == "Ana Zapata"
        assert candidates[0].registration_code == ana.registration_code
        assert candidates[0].average == Decimal("70.00")

    def test_threshold_is_inclusive(self, eligibility, factory) -> None:
        course = factory.course()
        group = factory.group(factory.level(course), factory.teacher())
        at_threshold = factory.student()
        below = factory.student()
        factory.grades(factory.enrollment(at_threshold, group), dict.fromkeys(PASSING, 51))
        factory.grades(
            factory.enrollment(below, group), {**dict.fromkeys(PASSING, 51), "GRAMMAR": 50}
        )

        candidates = eligibility.approved_candidates(course.id)

        assert [c.student_id for c in candidates] == [at_threshold.id]

    def test_missing_competency_counts_as_zero(self, eligibility, factory) -> None:
        course = factory.course()
        group = factory.group(factory.level(course), factory.teacher())
        student = factory.student()
        # 5 x 60 / 6 = 50
        grades = {k: 60 for k in PASSING if k != "GRAMMAR"}
        factory.grades(factory.enrollment(student, group), {**grades, "EXAM": 100})

        assert eligibility.approved_candidates(course.id) == []

    def test_ignores_withdrawn_and_deleted(self, eligibility, onboarding, factory) -> None:
        course = factory.course()
        group = factory.group(factory.level(course), factory.teacher())
        withdrawn = factory.student()
        deleted = factory.student()
        factory.grades(factory.enrollment(withdrawn, group, EnrollmentStatus.WITHDRAWN), PASSING)
        factory.grades(factory.enrollment(deleted, group), PASSING)
        onboarding.soft_delete_student(deleted.id)

        assert eligibility.approved_candidates(course.id) == []

    def test_best_enrollment_per_student(self, eligibility, factory) -> None:
        course = factory.course()
        level = factory.level(course)
        teacher = factory.teacher()
        student = factory.student()
        factory.grades(
            factory.enrollment(student, factory.group(level, teacher), EnrollmentStatus.COMPLETED),
            PASSING,
        )
        best = factory.enrollment(student, factory.group(level, teacher))
        factory.grades(best, dict.fromkeys(PASSING, 90))

        [candidate] = eligibility.approved_candidates(course.id)

        assert candidate.enrollment_id == best.id
        assert candidate.average == Decimal("90.00")

    def test_other_courses_excluded(self, eligibility, factory) -> None:
        course = factory.course()
        other = factory.course()
        group = factory.group(factory.level(other), factory.teacher())
        factory.grades(factory.enrollment(factory.student(), group), PASSING)

        assert eligibility.approved_candidates(course.id) == []

    def test_unknown_course(self, eligibility) -> None:
        with pytest.raises(CourseNotFoundError):
            eligibility.approved_candidates("missing")


@pytest.mark.unit
class TestEligibleStudents:
    """Tests for eligible_students."""

    def test_excludes_students_already_in_course(self, eligibility, factory) -> None:
        course = factory.course()
        teacher = factory.teacher()
        group = factory.group(factory.level(course), teacher)
        free = factory.student(paternal_surname="Zeballos")
        also_free = factory.student(paternal_surname="Arce")
        enrolled = factory.student()
        pending = factory.student()
        withdrawn = factory.student(paternal_surname="Mendez")
        factory.enrollment(enrolled, group)
        factory.enrollment(pending, group, EnrollmentStatus.PENDING)
        factory.enrollment(withdrawn, group, EnrollmentStatus.WITHDRAWN)

        students = eligibility.eligible_students(course.id)

        assert [s.id for s in students] == [also_free.id, withdrawn.id, free.id]

    def test_requires_prerequisite(self, eligibility, factory) -> None:
        basic = factory.course()
        advanced = factory.course(previous=basic)
        teacher = factory.teacher()
        passed = factory.student()
        factory.passed(passed, basic, teacher)
        factory.student()

        students = eligibility.eligible_students(advanced.id)

        assert [s.id for s in students] == [passed.id]

    def test_excludes_inactive_and_deleted(self, eligibility, onboarding, store, factory) -> None:
        course = factory.course()
        active = factory.student()
        inactive = factory.student()
        deleted = factory.student()
        onboarding.soft_delete_student(deleted.id)
        with store.transaction() as session:
            session.get(Student, inactive.id).enrollment_status = StudentStatus.SUSPENDED.value

        students = eligibility.eligible_students(course.id)

        assert [s.id for s in students] == [active.id]

    def test_unknown_course(self, eligibility) -> None:
        with pytest.raises(CourseNotFoundError):
            eligibility.eligible_students("missing")
