"""Promotion endpoints."""

from fastapi import APIRouter, Query, status

from academia.api.dependencies import EligibilityServiceDep, PromotionOrchestratorDep
from academia.api.models import (
    APIResponse,
    CandidateResponse,
    PromotionCreate,
    PromotionResponse,
    candidate_to_response,
    promotion_to_response,
)

router = APIRouter(prefix="/promotions", tags=["promotions"])


@router.post(
    "",
    response_model=APIResponse[PromotionResponse],
    status_code=status.HTTP_201_CREATED,
)
def promote_students(
    request: PromotionCreate, orchestrator: PromotionOrchestratorDep
) -> APIResponse[PromotionResponse]:
    """Promote a batch of students into a new group of a course."""
    result = orchestrator.promote_students(
        next_course_id=request.next_course_id,
        start_date=request.start_date,
        student_ids=request.student_ids,
        actor_id=request.actor_id,
    )
    return APIResponse(data=promotion_to_response(result))


@router.get("/candidates", response_model=APIResponse[list[CandidateResponse]])
def approved_candidates(
    eligibility: EligibilityServiceDep,
    course_id: str = Query(..., description="Course the candidates passed"),
) -> APIResponse[list[CandidateResponse]]:
    """Students whose core competency average in a course is at least 51."""
    candidates = eligibility.approved_candidates(course_id)
    return APIResponse(data=[candidate_to_response(c) for c in candidates])
