"""Exceptions for the prerequisites module."""

from academia.exceptions import AcademiaError


class PrerequisiteNotMetError(AcademiaError):
    """Student lacks an approved report card for the required previous course."""

    def __init__(self, course_name: str, message: str | None = None) -> None:
        self.course_name = course_name
        super().__init__(message or f"Student must pass '{course_name}' before enrolling")
