"""Submissions - faction choice, form posting and form-review decisions.

Invariants:
    - POST /applicants/{id}/faction stores the pending faction for the next form
    - POST /submissions upserts by (applicant_id, submission_ref); resubmission merges
    - GET /submissions/{applicant_id}/{submission_ref} reads the ledger snapshot (404 if absent)
    - POST /submissions/{applicant_id}/{submission_ref}/decision is stage "form"
    - POST /grants/{applicant_id} is the manual grant command (ledger untouched)
"""

from fastapi import APIRouter, Depends, status

from applicant_review.api.deps import get_services, render_outcome
from applicant_review.core.errors import ResourceNotFoundError
from applicant_review.schemas.review import (
    DecisionCreate, FactionChoice, ReviewerAction, SubmissionCreate,
)
from applicant_review.services.review_services import ReviewServices

router = APIRouter(prefix="/api/v1", tags=["submissions"])


@router.post("/applicants/{applicant_id}/faction")
async def choose_faction(
    applicant_id: str, body: FactionChoice,
    services: ReviewServices = Depends(get_services),
):
    outcome = await services.coordinator.choose_faction(applicant_id, body.faction)
    return await render_outcome(outcome, services)


@router.post("/submissions")
async def submit_application(
    body: SubmissionCreate, services: ReviewServices = Depends(get_services),
):
    outcome = await services.coordinator.submit_application(
        body.applicant_id, body.submission_ref, body.to_fields(),
    )
    return await render_outcome(
        outcome, services, success_status=status.HTTP_201_CREATED,
    )


@router.get("/submissions/{applicant_id}/{submission_ref}")
async def get_submission(
    applicant_id: str, submission_ref: str,
    services: ReviewServices = Depends(get_services),
):
    record = await services.ledger.get(applicant_id, submission_ref)
    if record is None:
        raise ResourceNotFoundError("Submission", f"{applicant_id}/{submission_ref}")
    return {"ok": True, "data": {"record": record.to_dict()}}


@router.post("/submissions/{applicant_id}/{submission_ref}/decision")
async def decide(
    applicant_id: str, submission_ref: str, body: DecisionCreate,
    services: ReviewServices = Depends(get_services),
):
    outcome = await services.coordinator.decide(
        applicant_id, submission_ref, body.reviewer_id,
        accept=body.decision == "accepted",
    )
    return await render_outcome(outcome, services)


@router.post("/grants/{applicant_id}")
async def grant_directly(
    applicant_id: str, body: ReviewerAction,
    services: ReviewServices = Depends(get_services),
):
    outcome = await services.coordinator.grant_directly(applicant_id, body.reviewer_id)
    return await render_outcome(outcome, services)
