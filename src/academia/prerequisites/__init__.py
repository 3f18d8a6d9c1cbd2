"""Prerequisites package - Course-to-course clearance checks."""

from academia.prerequisites.checker import PrerequisiteChecker
from academia.prerequisites.exceptions import PrerequisiteNotMetError

__all__ = [
    "PrerequisiteChecker",
    "PrerequisiteNotMetError",
]
