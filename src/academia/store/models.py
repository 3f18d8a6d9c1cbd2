"""SQLAlchemy models for the school store."""

from __future__ import annotations

import uuid
from datetime import datetime, time  # noqa: TC003 - used at runtime for SQLAlchemy
from decimal import Decimal  # noqa: TC003 - used at runtime for SQLAlchemy
from enum import StrEnum

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)

from academia.dates import utcnow


class DiscountType(StrEnum):
    """How an agreement discount is applied."""

    PERCENTAGE = "PERCENTAGE"
    FIXED_AMOUNT = "FIXED_AMOUNT"


class StudentStatus(StrEnum):
    """Student lifecycle status."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    GRADUATED = "GRADUATED"
    SUSPENDED = "SUSPENDED"


class GroupStatus(StrEnum):
    """Group lifecycle status."""

    DRAFT = "DRAFT"
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    GRADES_SUBMITTED = "GRADES_SUBMITTED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class EnrollmentStatus(StrEnum):
    """Enrollment lifecycle status."""

    ACTIVE = "ACTIVE"
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    WITHDRAWN = "WITHDRAWN"


class EvaluationType(StrEnum):
    """Kind of evaluation a grade records."""

    SPEAKING = "SPEAKING"
    LISTENING = "LISTENING"
    READING = "READING"
    WRITING = "WRITING"
    VOCABULARY = "VOCABULARY"
    GRAMMAR = "GRAMMAR"
    QUIZ = "QUIZ"
    EXAM = "EXAM"
    PROJECT = "PROJECT"
    PARTICIPATION = "PARTICIPATION"
    HOMEWORK = "HOMEWORK"


CORE_COMPETENCIES: tuple[EvaluationType, ...] = (
    EvaluationType.SPEAKING,
    EvaluationType.LISTENING,
    EvaluationType.READING,
    EvaluationType.WRITING,
    EvaluationType.VOCABULARY,
    EvaluationType.GRAMMAR,
)


class ReportCardStatus(StrEnum):
    """Approval status of a report card."""

    DRAFT = "DRAFT"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class DayOfWeek(StrEnum):
    """Weekday of a schedule slot."""

    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class User(Base):
    """Login identity shared by students and teachers."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    username: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    paternal_surname: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    maternal_surname: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.paternal_surname, self.maternal_surname]
        return " ".join(p for p in parts if p)

    def __repr__(self) -> str:
        return f"<User(id={self.id!r}, email={self.email!r}, username={self.username!r})>"


class Agreement(Base):
    """Discount contract offered to the students of a school."""

    __tablename__ = "agreements"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    agreement_code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    discount_type: Mapped[str] = mapped_column(String(20), nullable=False)
    discount_value: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    schools: Mapped[list[School]] = relationship("School", back_populates="agreement")

    def __repr__(self) -> str:
        return (
            f"<Agreement(id={self.id!r}, code={self.agreement_code!r}, "
            f"type={self.discount_type!r}, value={self.discount_value!r})>"
        )


class School(Base):
    """Institution a student may come from."""

    __tablename__ = "schools"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    agreement_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("agreements.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    agreement: Mapped[Agreement | None] = relationship("Agreement", back_populates="schools")

    def __repr__(self) -> str:
        return f"<School(id={self.id!r}, name={self.name!r})>"


class Student(Base):
    """Student profile, owns one User."""

    __tablename__ = "students"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, unique=True
    )
    registration_code: Mapped[str] = mapped_column(String(20), nullable=False)
    document_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    document_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    date_of_birth: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    school_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("schools.id"), nullable=True
    )
    enrollment_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=StudentStatus.ACTIVE.value
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    user: Mapped[User] = relationship("User")
    school: Mapped[School | None] = relationship("School")
    enrollments: Mapped[list[Enrollment]] = relationship("Enrollment", back_populates="student")

    def __repr__(self) -> str:
        return f"<Student(id={self.id!r}, code={self.registration_code!r})>"


class Teacher(Base):
    """Teacher profile, owns one User."""

    __tablename__ = "teachers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, unique=True
    )
    document_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    specialization: Mapped[str | None] = mapped_column(String(255), nullable=True)
    hire_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    contract_type: Mapped[str | None] = mapped_column(String(30), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    user: Mapped[User] = relationship("User")

    def __repr__(self) -> str:
        return f"<Teacher(id={self.id!r}, user_id={self.user_id!r})>"


class Course(Base):
    """Catalog entry. May require one previous course."""

    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration_weeks: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_hours: Mapped[int | None] = mapped_column(Integer, nullable=True)
    base_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    previous_course_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("courses.id"), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    previous_course: Mapped[Course | None] = relationship("Course", remote_side="Course.id")
    levels: Mapped[list[Level]] = relationship(
        "Level", back_populates="course", order_by="Level.order_index"
    )

    def __repr__(self) -> str:
        return f"<Course(id={self.id!r}, code={self.code!r}, name={self.name!r})>"


class Level(Base):
    """Ordered stage of a course, carries the base price."""

    __tablename__ = "levels"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    course_id: Mapped[str] = mapped_column(String(36), ForeignKey("courses.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    duration_weeks: Mapped[int] = mapped_column(Integer, nullable=False)
    total_hours: Mapped[int] = mapped_column(Integer, nullable=False)
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # Only set on synthesized levels: at most one default level per course
    default_for_course_id: Mapped[str | None] = mapped_column(
        String(36), nullable=True, unique=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    course: Mapped[Course] = relationship("Course", back_populates="levels")
    groups: Mapped[list[Group]] = relationship("Group", back_populates="level")

    def __repr__(self) -> str:
        return f"<Level(id={self.id!r}, code={self.code!r}, course_id={self.course_id!r})>"


class Group(Base):
    """Scheduled offering of one level taught by one teacher."""

    __tablename__ = "groups"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    level_id: Mapped[str] = mapped_column(String(36), ForeignKey("levels.id"), nullable=False)
    teacher_id: Mapped[str] = mapped_column(String(36), ForeignKey("teachers.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(80), nullable=False, unique=True)
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    max_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    min_capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    current_enrolled: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=GroupStatus.DRAFT.value
    )
    classroom: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    level: Mapped[Level] = relationship("Level", back_populates="groups")
    teacher: Mapped[Teacher] = relationship("Teacher")
    schedules: Mapped[list[Schedule]] = relationship(
        "Schedule", back_populates="group", cascade="all, delete-orphan"
    )
    enrollments: Mapped[list[Enrollment]] = relationship("Enrollment", back_populates="group")

    @property
    def group_status(self) -> GroupStatus:
        """Get status as GroupStatus enum."""
        return GroupStatus(self.status)

    def __repr__(self) -> str:
        return f"<Group(id={self.id!r}, code={self.code!r}, status={self.status!r})>"


class Schedule(Base):
    """Weekly time slot of a group."""

    __tablename__ = "schedules"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    group_id: Mapped[str] = mapped_column(String(36), ForeignKey("groups.id"), nullable=False)
    day_of_week: Mapped[str] = mapped_column(String(10), nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    group: Mapped[Group] = relationship("Group", back_populates="schedules")

    def __repr__(self) -> str:
        return (
            f"<Schedule(group_id={self.group_id!r}, day={self.day_of_week!r}, "
            f"{self.start_time}-{self.end_time})>"
        )


class Enrollment(Base):
    """Binding of a student to a group with the price agreed at creation."""

    __tablename__ = "enrollments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    student_id: Mapped[str] = mapped_column(String(36), ForeignKey("students.id"), nullable=False)
    group_id: Mapped[str] = mapped_column(String(36), ForeignKey("groups.id"), nullable=False)
    enrollment_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EnrollmentStatus.ACTIVE.value
    )
    agreed_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    discount_percentage: Mapped[Decimal] = mapped_column(Numeric(10, 4), nullable=False)
    agreement_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("agreements.id"), nullable=True
    )
    enrollment_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    student: Mapped[Student] = relationship("Student", back_populates="enrollments")
    group: Mapped[Group] = relationship("Group", back_populates="enrollments")
    agreement: Mapped[Agreement | None] = relationship("Agreement")
    created_by: Mapped[User | None] = relationship("User")
    grades: Mapped[list[Grade]] = relationship(
        "Grade", back_populates="enrollment", cascade="all, delete-orphan"
    )
    report_cards: Mapped[list[ReportCard]] = relationship(
        "ReportCard", back_populates="enrollment", cascade="all, delete-orphan"
    )

    @property
    def enrollment_status(self) -> EnrollmentStatus:
        """Get status as EnrollmentStatus enum."""
        return EnrollmentStatus(self.status)

    def __repr__(self) -> str:
        return (
            f"<Enrollment(id={self.id!r}, student_id={self.student_id!r}, "
            f"group_id={self.group_id!r}, status={self.status!r})>"
        )


class Grade(Base):
    """One evaluation result of an enrollment."""

    __tablename__ = "grades"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    enrollment_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("enrollments.id"), nullable=False
    )
    evaluation_type: Mapped[str] = mapped_column(String(20), nullable=False)
    grade_value: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    weight: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=1)
    grade_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)

    enrollment: Mapped[Enrollment] = relationship("Enrollment", back_populates="grades")

    def __repr__(self) -> str:
        return (
            f"<Grade(enrollment_id={self.enrollment_id!r}, "
            f"type={self.evaluation_type!r}, value={self.grade_value!r})>"
        )


class ReportCard(Base):
    """Finalized period summary of an enrollment."""

    __tablename__ = "report_cards"
    __table_args__ = (UniqueConstraint("enrollment_id", "period"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    enrollment_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("enrollments.id"), nullable=False
    )
    period: Mapped[str] = mapped_column(String(50), nullable=False)
    final_grade: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ReportCardStatus.DRAFT.value
    )
    approved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    enrollment: Mapped[Enrollment] = relationship("Enrollment", back_populates="report_cards")

    def __repr__(self) -> str:
        return (
            f"<ReportCard(enrollment_id={self.enrollment_id!r}, period={self.period!r}, "
            f"status={self.status!r})>"
        )
