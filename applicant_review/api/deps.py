"""API Dependencies - access to the process-wide ReviewServices and outcome rendering.

Invariants:
    - ReviewServices lives on app.state (set by the lifespan), never a module global
    - Side effects carried by an outcome are executed before the response is sent,
      including a failed outcome that still owes a grant
    - Failed outcomes are rendered with the error envelope and their HTTP status
"""

from fastapi import Request
from fastapi.responses import JSONResponse

from applicant_review.services.review_coordinator import ReviewOutcome
from applicant_review.services.review_services import ReviewServices


def get_services(request: Request) -> ReviewServices:
    """FastAPI dependency for the wired review services."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise RuntimeError("Review services not initialized")
    return services


async def render_outcome(
    outcome: ReviewOutcome,
    services: ReviewServices,
    execute_side_effects: bool = True,
    success_status: int = 200,
) -> JSONResponse:
    """Run side effects (when asked) and serialize the outcome."""
    body = outcome.to_dict()
    if execute_side_effects and outcome.side_effects:
        reports = await services.runner.run(outcome.side_effects)
        body["effects"] = [r.to_dict() for r in reports]
    if not outcome.ok:
        body["error"] = {"code": outcome.reason, "message": outcome.message}
        return JSONResponse(status_code=outcome.http_status, content=body)
    return JSONResponse(status_code=success_status, content=body)
