"""Onboarding service - Creates and soft deletes people."""

from __future__ import annotations

import logging
import secrets
from typing import TYPE_CHECKING

from sqlalchemy import select

from academia.credentials import PasswordHasher, generate_username
from academia.dates import parse_date, utcnow
from academia.exceptions import InvalidRequestError
from academia.store import (
    DuplicateUserError,
    School,
    SchoolNotFoundError,
    Student,
    StudentStatus,
    Teacher,
    User,
)
from academia.store.store import load_student

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from academia.onboarding.models import StudentInput, TeacherInput
    from academia.store import SchoolStore

logger = logging.getLogger(__name__)


def generate_registration_code(year: int | None = None) -> str:
    """Student registration code ``ST<year><4 digits>``."""
    year = year or utcnow().year
    return f"ST{year}{1000 + secrets.randbelow(9000)}"


def _require(value: str | None, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidRequestError(f"Missing {field_name}")
    return str(value).strip()


def _upper(value: str | None) -> str | None:
    return value.upper() if value else value


class OnboardingService:
    """Registers students and teachers with their user accounts."""

    def __init__(self, store: SchoolStore, hasher: PasswordHasher | None = None) -> None:
        self.store = store
        self.hasher = hasher or PasswordHasher()

    def _ensure_email_free(self, session: Session, email: str) -> None:
        existing = session.execute(select(User.id).where(User.email == email)).first()
        if existing is not None:
            raise DuplicateUserError(f"User with email '{email}' already exists")

    def create_student(self, data: StudentInput) -> Student:
        """Register a student.

        Raises:
            InvalidRequestError: If required fields are missing or the birth
                date cannot be parsed.
            DuplicateUserError: If the email is already registered.
            SchoolNotFoundError: If school_id doesn't exist.
        """
        email = _require(data.email, "email").lower()
        first_name = _require(data.first_name, "first_name")
        paternal_surname = _require(data.paternal_surname, "paternal_surname")
        password = data.password or data.document_number
        if not password:
            raise InvalidRequestError("Missing password or document_number")
        date_of_birth = (
            parse_date(data.date_of_birth, "date_of_birth") if data.date_of_birth else None
        )

        with self.store.transaction() as session:
            self._ensure_email_free(session, email)
            if data.school_id is not None and session.get(School, data.school_id) is None:
                raise SchoolNotFoundError(f"School with id '{data.school_id}' not found")

            user = User(
                email=email,
                password_hash=self.hasher.hash(password),
                first_name=first_name,
                paternal_surname=paternal_surname,
                maternal_surname=data.maternal_surname,
                phone=data.phone,
            )
            student = Student(
                user=user,
                registration_code=generate_registration_code(),
                document_type=data.document_type,
                document_number=data.document_number,
                date_of_birth=date_of_birth,
                school_id=data.school_id,
                enrollment_status=StudentStatus.ACTIVE.value,
            )
            session.add(student)
            session.flush()
            logger.info("Registered student %s (%s)", student.id, student.registration_code)
            return load_student(session, student.id)

    def create_teacher(self, data: TeacherInput) -> Teacher:
        """Register a teacher. Names are stored upper-cased.

        Raises:
            InvalidRequestError: If required fields are missing or the hire
                date cannot be parsed.
            DuplicateUserError: If the email is already registered.
        """
        email = _require(data.email, "email").lower()
        first_name = _require(data.first_name, "first_name")
        paternal_surname = _require(data.paternal_surname, "paternal_surname")
        document_number = _require(data.document_number, "document_number")
        contract_type = _require(data.contract_type, "contract_type")
        hire_date = parse_date(data.hire_date, "hire_date")

        with self.store.transaction() as session:
            self._ensure_email_free(session, email)
            user = User(
                email=email,
                username=generate_username(first_name, paternal_surname),
                password_hash=self.hasher.hash(data.password or document_number),
                first_name=first_name.upper(),
                paternal_surname=paternal_surname.upper(),
                maternal_surname=_upper(data.maternal_surname),
                phone=data.phone,
            )
            teacher = Teacher(
                user=user,
                document_number=document_number,
                specialization=_upper(data.specialization),
                hire_date=hire_date,
                contract_type=contract_type,
            )
            session.add(teacher)
            session.flush()
            logger.info("Registered teacher %s (%s)", teacher.id, user.username)
            return teacher

    def soft_delete_student(self, student_id: str) -> None:
        """Mark a student deleted and deactivate their login.

        Enrollments are kept and stay queryable.

        Raises:
            StudentNotFoundError: If the student doesn't exist or was already deleted.
        """
        with self.store.transaction() as session:
            student = load_student(session, student_id)
            student.deleted_at = utcnow()
            student.enrollment_status = StudentStatus.INACTIVE.value
            student.user.is_active = False
            logger.info("Soft deleted student %s", student_id)
