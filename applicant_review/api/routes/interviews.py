"""Interviews - oral interview sessions driven by their reviewer.

Invariants:
    - Every mutation carries the acting reviewer_id; the engine enforces ownership
    - A finalized or evicted session answers 404 SESSION_NOT_FOUND
    - Completion (automatic or explicit) returns {score, total, pass} once
"""

from fastapi import APIRouter, Depends, status

from applicant_review.api.deps import get_services, render_outcome
from applicant_review.schemas.review import (
    InterviewAnswer, InterviewStart, PageMove, ReviewerAction,
)
from applicant_review.services.review_services import ReviewServices

router = APIRouter(prefix="/api/v1/interviews", tags=["interviews"])


@router.post("")
async def start_interview(
    body: InterviewStart, services: ReviewServices = Depends(get_services),
):
    outcome = await services.coordinator.start_interview(
        body.target_applicant_id, body.reviewer_id, body.session_id,
    )
    return await render_outcome(
        outcome, services, success_status=status.HTTP_201_CREATED,
    )


@router.get("/{session_id}")
async def get_interview(
    session_id: str, services: ReviewServices = Depends(get_services),
):
    """Current session view (questions, answers, page slice)."""
    session = services.engine.get_session(session_id)
    return {"ok": True, "data": {"session": session.to_view()}}


@router.post("/{session_id}/answers")
async def answer(
    session_id: str, body: InterviewAnswer,
    services: ReviewServices = Depends(get_services),
):
    outcome = await services.coordinator.answer_interview(
        session_id, body.reviewer_id, body.question_index, body.value,
    )
    return await render_outcome(outcome, services)


@router.post("/{session_id}/page")
async def change_page(
    session_id: str, body: PageMove,
    services: ReviewServices = Depends(get_services),
):
    outcome = await services.coordinator.change_page(
        session_id, body.reviewer_id, body.delta,
    )
    return await render_outcome(outcome, services)


@router.post("/{session_id}/finalize")
async def finalize(
    session_id: str, body: ReviewerAction,
    services: ReviewServices = Depends(get_services),
):
    outcome = await services.coordinator.finalize_interview(session_id, body.reviewer_id)
    return await render_outcome(outcome, services)
