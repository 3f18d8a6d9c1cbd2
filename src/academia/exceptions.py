"""Base exceptions shared by all Academia components."""


class AcademiaError(Exception):
    """Base exception for Academia errors."""


class InvalidRequestError(AcademiaError):
    """Request is missing required data or carries malformed values."""
