"""School Store - Persistent storage for students, catalog and enrollments."""

from academia.store.exceptions import (
    CourseNotFoundError,
    DuplicateUserError,
    EnrollmentNotFoundError,
    GroupNotFoundError,
    LevelNotFoundError,
    NotFoundError,
    PersistenceError,
    SchoolNotFoundError,
    StoreError,
    StudentNotFoundError,
    TeacherNotFoundError,
)
from academia.store.models import (
    CORE_COMPETENCIES,
    Agreement,
    Course,
    DayOfWeek,
    DiscountType,
    Enrollment,
    EnrollmentStatus,
    EvaluationType,
    Grade,
    Group,
    GroupStatus,
    Level,
    ReportCard,
    ReportCardStatus,
    Schedule,
    School,
    Student,
    StudentStatus,
    Teacher,
    User,
)
from academia.store.store import SchoolStore

__all__ = [
    "CORE_COMPETENCIES",
    "Agreement",
    "Course",
    "CourseNotFoundError",
    "DayOfWeek",
    "DiscountType",
    "DuplicateUserError",
    "Enrollment",
    "EnrollmentNotFoundError",
    "EnrollmentStatus",
    "EvaluationType",
    "Grade",
    "Group",
    "GroupNotFoundError",
    "GroupStatus",
    "Level",
    "LevelNotFoundError",
    "NotFoundError",
    "PersistenceError",
    "ReportCard",
    "ReportCardStatus",
    "Schedule",
    "School",
    "SchoolNotFoundError",
    "SchoolStore",
    "StoreError",
    "Student",
    "StudentNotFoundError",
    "StudentStatus",
    "Teacher",
    "TeacherNotFoundError",
    "User",
]
