"""Exceptions for the enrollment module."""

from academia.exceptions import AcademiaError


class EnrollmentError(AcademiaError):
    """Base exception for enrollment errors."""


class GroupFullError(EnrollmentError):
    """The group has no free seat left."""

    def __init__(self, group_code: str, max_capacity: int) -> None:
        self.group_code = group_code
        self.max_capacity = max_capacity
        super().__init__(f"Group '{group_code}' is full ({max_capacity} seats)")
