"""Custom exceptions for the school store."""

from academia.exceptions import AcademiaError


class StoreError(AcademiaError):
    """Base exception for store errors."""


class NotFoundError(StoreError):
    """Identifier does not resolve to a stored record."""


class StudentNotFoundError(NotFoundError):
    """Student with given ID does not exist (or was deleted)."""


class TeacherNotFoundError(NotFoundError):
    """Teacher with given ID does not exist (or was deleted)."""


class SchoolNotFoundError(NotFoundError):
    """School with given ID does not exist."""


class CourseNotFoundError(NotFoundError):
    """Course with given ID does not exist."""


class LevelNotFoundError(NotFoundError):
    """Level with given ID does not exist."""


class GroupNotFoundError(NotFoundError):
    """Group with given ID does not exist."""


class EnrollmentNotFoundError(NotFoundError):
    """Enrollment with given ID does not exist."""


class DuplicateUserError(StoreError):
    """A user with the given email already exists."""


class PersistenceError(StoreError):
    """Storage failure inside a transaction. The transaction was rolled back."""
