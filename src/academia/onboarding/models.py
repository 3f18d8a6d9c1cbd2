"""Input models for onboarding."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime  # noqa: TC003 - dataclass field types


@dataclass
class StudentInput:
    """Data needed to register a student.

    The password defaults to the document number when not given.
    """

    email: str
    first_name: str
    paternal_surname: str
    maternal_surname: str | None = None
    phone: str | None = None
    document_type: str | None = None
    document_number: str | None = None
    date_of_birth: str | date | datetime | None = None
    school_id: str | None = None
    password: str | None = field(default=None, repr=False)


@dataclass
class TeacherInput:
    """Data needed to register a teacher."""

    email: str
    first_name: str
    paternal_surname: str
    document_number: str
    hire_date: str | date | datetime
    contract_type: str
    maternal_surname: str | None = None
    phone: str | None = None
    specialization: str | None = None
    password: str | None = field(default=None, repr=False)
