"""Pydantic models for REST API."""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


# Enrollment models


class EnrollmentCreate(BaseModel):
    """Request model for creating an enrollment.

    Either group_id or course_id must be given; group_id wins when both are.
    """

    student_id: str = Field(..., min_length=1)
    group_id: str | None = None
    course_id: str | None = None
    actor_id: str | None = None


class UserSummary(BaseModel):
    """Public fields of a user. Never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    username: str | None
    first_name: str
    paternal_surname: str
    maternal_surname: str | None


class StudentSummary(BaseModel):
    """Response model for a student."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    registration_code: str
    enrollment_status: str
    school_id: str | None
    user: UserSummary


class CourseSummary(BaseModel):
    """Response model for a course."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    code: str
    previous_course_id: str | None


class LevelSummary(BaseModel):
    """Response model for a level."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    code: str
    order_index: int
    base_price: Decimal
    course: CourseSummary | None = None


class ScheduleResponse(BaseModel):
    """Response model for a schedule slot."""

    model_config = ConfigDict(from_attributes=True)

    day_of_week: str
    start_time: time
    end_time: time


class GroupResponse(BaseModel):
    """Response model for a group."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    code: str
    status: str
    start_date: datetime
    end_date: datetime
    max_capacity: int
    current_enrolled: int
    classroom: str | None
    teacher_id: str
    level: LevelSummary | None = None
    schedules: list[ScheduleResponse] = Field(default_factory=list)


class EnrollmentResponse(BaseModel):
    """Response model for an enrollment."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    group_id: str
    status: str
    enrollment_date: datetime
    start_date: datetime
    end_date: datetime
    agreed_price: Decimal
    discount_percentage: Decimal
    agreement_id: str | None
    enrollment_notes: str | None
    created_by_id: str | None
    student: StudentSummary | None = None
    group: GroupResponse | None = None


def enrollment_to_response(enrollment: Any) -> EnrollmentResponse:
    """Convert an Enrollment model to EnrollmentResponse."""
    return EnrollmentResponse.model_validate(enrollment)


def group_to_response(group: Any) -> GroupResponse:
    """Convert a Group model to GroupResponse."""
    return GroupResponse.model_validate(group)


def student_to_response(student: Any) -> StudentSummary:
    """Convert a Student model to StudentSummary."""
    return StudentSummary.model_validate(student)


class CredentialsResponse(BaseModel):
    """One-time login shown after an enrollment."""

    username: str
    password: str


class EnrollmentCreatedResponse(BaseModel):
    """Response model for a created enrollment."""

    enrollment: EnrollmentResponse
    credentials: CredentialsResponse


# Promotion models


class PromotionCreate(BaseModel):
    """Request model for promoting students into a course."""

    next_course_id: str = Field(..., min_length=1)
    start_date: date
    student_ids: list[str] = Field(..., min_length=1)
    actor_id: str | None = None


class PromotionFailureResponse(BaseModel):
    """Response model for a student the batch could not enroll."""

    model_config = ConfigDict(from_attributes=True)

    student_id: str
    reason: str


class PromotionResponse(BaseModel):
    """Response model for a promotion batch."""

    model_config = ConfigDict(from_attributes=True)

    new_group: GroupResponse
    promoted_count: int
    skipped_count: int
    failures: list[PromotionFailureResponse]


def promotion_to_response(result: Any) -> PromotionResponse:
    """Convert a PromotionResult to PromotionResponse."""
    return PromotionResponse.model_validate(result)


class CandidateResponse(BaseModel):
    """Response model for an approved candidate."""

    model_config = ConfigDict(from_attributes=True)

    student_id: str
    enrollment_id: str
    full_name: str
    registration_code: str
    average: Decimal


def candidate_to_response(candidate: Any) -> CandidateResponse:
    """Convert a Candidate to CandidateResponse."""
    return CandidateResponse.model_validate(candidate)
