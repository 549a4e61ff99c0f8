"""Recaps - daily faction summary, weekly reviewer leaderboard, reviewer counters."""

from datetime import date

from fastapi import APIRouter, Depends, Query

from applicant_review.api.deps import get_services, render_outcome
from applicant_review.services.review_services import ReviewServices

router = APIRouter(prefix="/api/v1/recaps", tags=["recaps"])


@router.get("/daily")
async def daily_recap(
    day: date | None = Query(None, alias="date"),
    services: ReviewServices = Depends(get_services),
):
    outcome = await services.coordinator.daily_recap(day)
    return await render_outcome(outcome, services)


@router.get("/weekly")
async def weekly_recap(services: ReviewServices = Depends(get_services)):
    outcome = await services.coordinator.weekly_recap()
    return await render_outcome(outcome, services)


@router.get("/reviewers/{reviewer_id}")
async def reviewer_stats(
    reviewer_id: str,
    stage: str | None = Query(None),
    services: ReviewServices = Depends(get_services),
):
    outcome = await services.coordinator.reviewer_stats(reviewer_id, stage)
    return await render_outcome(outcome, services)
