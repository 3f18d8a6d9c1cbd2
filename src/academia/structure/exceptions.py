"""Exceptions for the structure module."""

from academia.exceptions import AcademiaError


class StructureError(AcademiaError):
    """Base exception for structure resolution errors."""


class NoTeacherAvailableError(StructureError):
    """A group must be created automatically but no teacher can be assigned."""
