"""Events - generic envelope for platform adapters forwarding raw review events.

Invariants:
    - The event name is routed by ReviewCoordinator.dispatch (explicit mapping)
    - execute_side_effects=False returns effects without performing them
"""

from fastapi import APIRouter, Depends

from applicant_review.api.deps import get_services, render_outcome
from applicant_review.schemas.review import ReviewEvent
from applicant_review.services.review_services import ReviewServices

router = APIRouter(prefix="/api/v1/events", tags=["events"])


@router.post("")
async def handle_event(
    body: ReviewEvent, services: ReviewServices = Depends(get_services),
):
    outcome = await services.coordinator.dispatch(body.event, body.payload)
    return await render_outcome(
        outcome, services, execute_side_effects=body.execute_side_effects,
    )
