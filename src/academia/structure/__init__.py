"""Structure package - Finds or creates levels and groups for a course."""

from academia.structure.exceptions import NoTeacherAvailableError, StructureError
from academia.structure.resolver import (
    DEFAULT_LEVEL_PRICE,
    StructureResolver,
    create_default_group,
    ensure_level,
)
from academia.structure.teachers import TeacherSelector

__all__ = [
    "DEFAULT_LEVEL_PRICE",
    "NoTeacherAvailableError",
    "StructureError",
    "StructureResolver",
    "TeacherSelector",
    "create_default_group",
    "ensure_level",
]
