"""Shared pytest fixtures and configuration."""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from academia.credentials import CredentialIssuer, PasswordHasher
from academia.dates import add_months, utcnow
from academia.onboarding import OnboardingService, StudentInput, TeacherInput
from academia.store import (
    Agreement,
    Course,
    DiscountType,
    Enrollment,
    EnrollmentStatus,
    Grade,
    Group,
    GroupStatus,
    Level,
    ReportCard,
    ReportCardStatus,
    School,
    SchoolStore,
    Student,
    Teacher,
)

# Lowest bcrypt cost, keeps hashing fast in tests
TEST_BCRYPT_ROUNDS = 4


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


class SchoolFactory:
    """Builds catalog, people and enrollment records for tests."""

    def __init__(self, store: SchoolStore, onboarding: OnboardingService) -> None:
        self.store = store
        self.onboarding = onboarding
        self._seq = itertools.count(1)

    def _n(self) -> int:
        return next(self._seq)

    def agreement(
        self,
        discount_type: DiscountType = DiscountType.PERCENTAGE,
        value: str = "15",
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        open_ended: bool = False,
        is_active: bool = True,
    ) -> Agreement:
        n = self._n()
        now = utcnow()
        if end_date is None and not open_ended:
            end_date = now + timedelta(days=365)
        return self.store.create_agreement(
            name=f"Agreement {n}",
            agreement_code=f"AGR-{n}",
            discount_type=discount_type,
            discount_value=value,
            start_date=start_date or now - timedelta(days=30),
            end_date=end_date,
            is_active=is_active,
        )

    def school(self, agreement: Agreement | None = None) -> School:
        n = self._n()
        return self.store.create_school(
            name=f"School {n}",
            code=f"SCH-{n}",
            agreement_id=agreement.id if agreement is not None else None,
        )

    def teacher(self) -> Teacher:
        n = self._n()
        return self.onboarding.create_teacher(
            TeacherInput(
                email=f"teacher{n}@example.com",
                first_name="Ana",
                paternal_surname="Rojas",
                document_number=f"T{n:05d}",
                hire_date="2020-01-15",
                contract_type="FULL_TIME",
            )
        )

    def student(
        self,
        school: School | None = None,
        first_name: str = "Juan",
        paternal_surname: str = "Perez",
    ) -> Student:
        n = self._n()
        return self.onboarding.create_student(
            StudentInput(
                email=f"student{n}@example.com",
                first_name=first_name,
                paternal_surname=paternal_surname,
                document_number=f"D{n:06d}",
                date_of_birth="2005-04-12",
                school_id=school.id if school is not None else None,
            )
        )

    def course(
        self,
        name: str | None = None,
        base_price: str | None = None,
        previous: Course | None = None,
        duration_weeks: int | None = None,
        total_hours: int | None = None,
    ) -> Course:
        n = self._n()
        return self.store.create_course(
            name=name or f"Course {n}",
            code=f"C{n}",
            base_price=base_price,
            previous_course_id=previous.id if previous is not None else None,
            duration_weeks=duration_weeks,
            total_hours=total_hours,
        )

    def level(self, course: Course, base_price: str = "350", order_index: int = 1) -> Level:
        n = self._n()
        return self.store.create_level(
            course_id=course.id,
            name=f"Level {n}",
            code=f"L{n}",
            base_price=base_price,
            order_index=order_index,
        )

    def group(
        self,
        level: Level,
        teacher: Teacher,
        status: GroupStatus = GroupStatus.OPEN,
        start_date: datetime | None = None,
        max_capacity: int = 30,
    ) -> Group:
        n = self._n()
        start = start_date or utcnow()
        return self.store.create_group(
            level_id=level.id,
            teacher_id=teacher.id,
            name=f"Group {n}",
            code=f"G{n}",
            start_date=start,
            end_date=add_months(start, 3),
            max_capacity=max_capacity,
            status=status,
        )

    def enrollment(
        self,
        student: Student,
        group: Group,
        status: EnrollmentStatus = EnrollmentStatus.ACTIVE,
    ) -> Enrollment:
        """Insert an enrollment directly, without pricing or credentials."""
        with self.store.transaction() as session:
            enrollment = Enrollment(
                student_id=student.id,
                group_id=group.id,
                enrollment_date=utcnow(),
                start_date=group.start_date,
                end_date=group.end_date,
                status=status.value,
                agreed_price=Decimal("350.00"),
                discount_percentage=Decimal(0),
            )
            session.add(enrollment)
            session.flush()
            return enrollment

    def grades(self, enrollment: Enrollment, values: dict[str, int]) -> None:
        with self.store.transaction() as session:
            for kind, value in values.items():
                session.add(
                    Grade(
                        enrollment_id=enrollment.id,
                        evaluation_type=kind,
                        grade_value=Decimal(value),
                        grade_date=utcnow(),
                    )
                )

    def report_card(
        self,
        enrollment: Enrollment,
        status: ReportCardStatus = ReportCardStatus.APPROVED,
        period: str = "2024-1",
    ) -> ReportCard:
        with self.store.transaction() as session:
            card = ReportCard(
                enrollment_id=enrollment.id,
                period=period,
                final_grade=Decimal("75.00"),
                status=status.value,
            )
            session.add(card)
            session.flush()
            return card

    def passed(self, student: Student, course: Course, teacher: Teacher) -> Enrollment:
        """Give a student an APPROVED report card in a course."""
        group = self.group(self.level(course), teacher, status=GroupStatus.COMPLETED)
        enrollment = self.enrollment(student, group, EnrollmentStatus.COMPLETED)
        self.report_card(enrollment)
        return enrollment


# Shared fixtures


@pytest.fixture
def store() -> SchoolStore:
    """Create an in-memory SchoolStore for testing."""
    return SchoolStore(":memory:")


@pytest.fixture
def hasher() -> PasswordHasher:
    """bcrypt hasher with the lowest cost factor."""
    return PasswordHasher(rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def issuer(hasher: PasswordHasher) -> CredentialIssuer:
    """Credential issuer using the fast hasher."""
    return CredentialIssuer(hasher)


@pytest.fixture
def onboarding(store: SchoolStore, hasher: PasswordHasher) -> OnboardingService:
    """Onboarding service on the test store."""
    return OnboardingService(store, hasher)


@pytest.fixture
def factory(store: SchoolStore, onboarding: OnboardingService) -> SchoolFactory:
    """Record builder bound to the test store."""
    return SchoolFactory(store, onboarding)
