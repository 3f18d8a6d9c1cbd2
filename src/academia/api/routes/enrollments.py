"""Enrollment endpoints."""

from fastapi import APIRouter, Query, status

from academia.api.dependencies import (
    EligibilityServiceDep,
    EnrollmentOrchestratorDep,
    EventManagerDep,
    StoreDep,
)
from academia.api.models import (
    APIResponse,
    CredentialsResponse,
    EnrollmentCreate,
    EnrollmentCreatedResponse,
    EnrollmentResponse,
    StudentSummary,
    enrollment_to_response,
    student_to_response,
)
from academia.store import EnrollmentStatus

router = APIRouter(prefix="/enrollments", tags=["enrollments"])


@router.post(
    "",
    response_model=APIResponse[EnrollmentCreatedResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_enrollment(
    request: EnrollmentCreate, orchestrator: EnrollmentOrchestratorDep
) -> APIResponse[EnrollmentCreatedResponse]:
    """Enroll a student. The returned password is shown only once."""
    result = orchestrator.create_enrollment(
        student_id=request.student_id,
        group_id=request.group_id,
        course_id=request.course_id,
        actor_id=request.actor_id,
    )
    return APIResponse(
        data=EnrollmentCreatedResponse(
            enrollment=enrollment_to_response(result.enrollment),
            credentials=CredentialsResponse(username=result.username, password=result.password),
        )
    )


@router.get("", response_model=APIResponse[list[EnrollmentResponse]])
def list_enrollments(
    store: StoreDep,
    student_id: str | None = Query(default=None, description="Filter by student ID"),
    group_id: str | None = Query(default=None, description="Filter by group ID"),
    status: str | None = Query(default=None, description="Filter by status"),
) -> APIResponse[list[EnrollmentResponse]]:
    """List enrollments with optional filters."""
    enrollment_status = EnrollmentStatus(status) if status else None
    enrollments = store.list_enrollments(
        student_id=student_id, group_id=group_id, status=enrollment_status
    )
    return APIResponse(data=[enrollment_to_response(e) for e in enrollments])


@router.get("/report", response_model=APIResponse[list[EnrollmentResponse]])
def enrollment_report(
    store: StoreDep,
    course_id: str | None = Query(default=None, description="Filter by course ID"),
    year: int | None = Query(default=None, ge=1900, le=9999, description="Group start year"),
    academic_period: int | None = Query(
        default=None, ge=1, le=2, description="1 = January-June, 2 = July-December"
    ),
    period: str | None = Query(default=None, description="Matched on group code or name"),
) -> APIResponse[list[EnrollmentResponse]]:
    """Enrollments ordered by course name then student surname."""
    enrollments = store.enrollment_report(
        course_id=course_id, year=year, academic_period=academic_period, period=period
    )
    return APIResponse(data=[enrollment_to_response(e) for e in enrollments])


@router.get("/eligible-students", response_model=APIResponse[list[StudentSummary]])
def eligible_students(
    eligibility: EligibilityServiceDep,
    course_id: str = Query(..., description="Target course ID"),
) -> APIResponse[list[StudentSummary]]:
    """Students who may enroll in a course."""
    students = eligibility.eligible_students(course_id)
    return APIResponse(data=[student_to_response(s) for s in students])


@router.get("/{enrollment_id}", response_model=APIResponse[EnrollmentResponse])
def get_enrollment(enrollment_id: str, store: StoreDep) -> APIResponse[EnrollmentResponse]:
    """Get an enrollment by ID."""
    enrollment = store.get_enrollment(enrollment_id)
    return APIResponse(data=enrollment_to_response(enrollment))


@router.delete("/{enrollment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_enrollment(
    enrollment_id: str, store: StoreDep, event_manager: EventManagerDep
) -> None:
    """Delete an enrollment. Student and group are kept."""
    store.delete_enrollment(enrollment_id)
    event_manager.emit_enrollment_deleted(enrollment_id)
