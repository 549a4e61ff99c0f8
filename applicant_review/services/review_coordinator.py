"""Review Coordinator - translates inbound review events into ledger/engine calls.

Invariants:
    - Never raises: every call returns a ReviewOutcome; failures carry a stable reason code
    - ReviewError -> its code; anything else -> INTERNAL_ERROR (logged with traceback)
    - Performs no side effect itself: grants and notifications are returned as data
    - An interview pass is recorded in the ledger before the GrantRole is emitted;
      the engine removes the session first, so a pass is reported exactly once
    - If recording a pass fails, the outcome is not ok but still carries the result
      and the GrantRole: the session is gone and cannot be finalized again

Design Decisions:
    - Explicit dispatch dict (event name -> method) for the presentation layer's
      generic event endpoint: every mapping visible in one place
    - Engine, ledger and faction registry are injected, never module globals
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Mapping

from applicant_review.core.domain_types import (
    Clock, DecisionStage, GrantTarget, NotificationKind, SubmissionStatus,
    UNSPECIFIED_FACTION, utc_now,
)
from applicant_review.core.errors import (
    InvalidInputError, ReviewError, StorageFailureError,
)
from applicant_review.core.faction_choices import FactionChoices
from applicant_review.core.interview_engine import InterviewEngine
from applicant_review.core.interview_scoring import InterviewResult
from applicant_review.core.side_effects import GrantRole, Notify, SideEffect
from applicant_review.services.ledger_store import LedgerStore

logger = logging.getLogger(__name__)


@dataclass
class ReviewOutcome:
    """Result of one inbound event."""
    ok: bool
    reason: str | None = None
    message: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    side_effects: list[SideEffect] = field(default_factory=list)
    http_status: int = 200

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "reason": self.reason,
            "message": self.message,
            "data": self.data,
            "side_effects": [e.to_dict() for e in self.side_effects],
        }


def _success(data: dict | None = None, side_effects: list | None = None) -> ReviewOutcome:
    return ReviewOutcome(ok=True, data=data or {}, side_effects=side_effects or [])


class ReviewCoordinator:
    """Stateless glue between the presentation layer and the review core."""

    def __init__(
        self,
        ledger: LedgerStore,
        engine: InterviewEngine,
        factions: FactionChoices,
        clock: Clock = utc_now,
    ):
        self._ledger = ledger
        self._engine = engine
        self._factions = factions
        self._clock = clock
        self._handlers: dict[str, Callable[..., Awaitable[ReviewOutcome]]] = {
            "choose_faction": self.choose_faction,
            "submit_application": self.submit_application,
            "accept": self._accept,
            "reject": self._reject,
            "start_interview": self.start_interview,
            "interview_answer": self.answer_interview,
            "interview_page": self.change_page,
            "finalize": self.finalize_interview,
            "grant": self.grant_directly,
            "daily_recap": self.daily_recap,
            "weekly_recap": self.weekly_recap,
        }

    async def dispatch(self, event: str, payload: Mapping[str, Any]) -> ReviewOutcome:
        """Route a named event to its handler. Unknown events fail with UNKNOWN_EVENT."""
        handler = self._handlers.get(event)
        if handler is None:
            return ReviewOutcome(
                ok=False, reason="UNKNOWN_EVENT",
                message=f"Event '{event}' is not supported", http_status=400,
            )
        try:
            return await handler(**payload)
        except TypeError as e:
            return ReviewOutcome(
                ok=False, reason="INVALID_PAYLOAD", message=str(e), http_status=400,
            )

    async def _guard(
        self, operation: str, call: Callable[[], Awaitable[ReviewOutcome]],
    ) -> ReviewOutcome:
        """Run one operation and map every failure to a reason code."""
        try:
            return await call()
        except ReviewError as e:
            logger.warning(
                f"{operation} failed: {e.message}",
                extra={"error_code": e.code},
            )
            return ReviewOutcome(
                ok=False, reason=e.to_reason(), message=e.message,
                http_status=e.http_status,
            )
        except Exception as e:
            logger.error(f"{operation} crashed: {e}", exc_info=True)
            return ReviewOutcome(
                ok=False, reason="INTERNAL_ERROR",
                message="An unexpected error occurred", http_status=500,
            )

    # --- Submission ------------------------------------------------------------

    async def choose_faction(self, applicant_id: str, faction: str) -> ReviewOutcome:
        async def run() -> ReviewOutcome:
            self._factions.choose(applicant_id, faction)
            return _success({"applicant_id": applicant_id, "faction": faction.strip()})
        return await self._guard("choose_faction", run)

    async def submit_application(
        self,
        applicant_id: str,
        submission_ref: str,
        fields: Mapping[str, Any] | None = None,
    ) -> ReviewOutcome:
        """Record a posted form, consuming the applicant's pending faction choice."""
        async def run() -> ReviewOutcome:
            entry: dict[str, Any] = dict(fields or {})
            entry.update(
                applicant_id=applicant_id,
                submission_ref=submission_ref,
                submitted_at=self._clock(),
            )
            entry["faction"] = (
                entry.get("faction")
                or self._factions.peek(applicant_id)
                or UNSPECIFIED_FACTION
            )
            record = await self._ledger.upsert(entry)
            self._factions.consume(applicant_id)
            logger.info(
                f"Application submitted (faction={record.faction})",
                extra={"applicant_id": applicant_id, "submission_ref": submission_ref},
            )
            return _success(
                {"record": record.to_dict()},
                [Notify(
                    NotificationKind.SUBMISSION_RECEIVED, applicant_id,
                    details={"submission_ref": submission_ref, "faction": record.faction},
                )],
            )
        return await self._guard("submit_application", run)

    # --- Form decision ---------------------------------------------------------

    async def decide(
        self,
        applicant_id: str,
        submission_ref: str,
        reviewer_id: str,
        accept: bool,
    ) -> ReviewOutcome:
        """Form review verdict. Acceptance unlocks the oral interview role."""
        async def run() -> ReviewOutcome:
            status = SubmissionStatus.ACCEPTED if accept else SubmissionStatus.REJECTED
            record = await self._ledger.mark_decision(
                applicant_id, submission_ref, status, reviewer_id, DecisionStage.FORM,
            )
            logger.info(
                f"Form {status.value}",
                extra={
                    "applicant_id": applicant_id, "submission_ref": submission_ref,
                    "reviewer_id": reviewer_id, "stage": DecisionStage.FORM.value,
                },
            )
            if not accept:
                return _success(
                    {"record": record.to_dict()},
                    [Notify(NotificationKind.FORM_REJECTED, applicant_id, reviewer_id)],
                )
            accepted_today = await self._ledger.count_accepted_today_by_reviewer(
                reviewer_id, DecisionStage.FORM,
            )
            return _success(
                {"record": record.to_dict(), "accepted_today": accepted_today},
                [
                    GrantRole(applicant_id, GrantTarget.INTERVIEW),
                    Notify(
                        NotificationKind.FORM_ACCEPTED, applicant_id, reviewer_id,
                        details={"accepted_today": accepted_today},
                    ),
                ],
            )
        return await self._guard("decide", run)

    async def _accept(self, applicant_id: str, submission_ref: str, reviewer_id: str) -> ReviewOutcome:
        return await self.decide(applicant_id, submission_ref, reviewer_id, accept=True)

    async def _reject(self, applicant_id: str, submission_ref: str, reviewer_id: str) -> ReviewOutcome:
        return await self.decide(applicant_id, submission_ref, reviewer_id, accept=False)

    # --- Interview -------------------------------------------------------------

    async def start_interview(
        self,
        target_applicant_id: str,
        reviewer_id: str,
        session_id: str | None = None,
    ) -> ReviewOutcome:
        async def run() -> ReviewOutcome:
            session = self._engine.create_session(
                target_applicant_id, reviewer_id, session_id,
            )
            return _success(
                {"session": session.to_view()},
                [Notify(
                    NotificationKind.INTERVIEW_STARTED, target_applicant_id, reviewer_id,
                    details={"session_id": session.session_id},
                )],
            )
        return await self._guard("start_interview", run)

    async def answer_interview(
        self,
        session_id: str,
        reviewer_id: str,
        question_index: int,
        value: bool,
    ) -> ReviewOutcome:
        """Apply one answer; completes the interview when every question is answered."""
        async def run() -> ReviewOutcome:
            result = self._engine.answer(session_id, reviewer_id, question_index, value)
            if result is None:
                return _success({
                    "completed": False,
                    "session": self._engine.get_session(session_id).to_view(),
                })
            return await self._conclude(result)
        return await self._guard("answer_interview", run)

    async def change_page(self, session_id: str, reviewer_id: str, delta: int) -> ReviewOutcome:
        async def run() -> ReviewOutcome:
            session = self._engine.set_page(session_id, reviewer_id, delta)
            return _success({"session": session.to_view()})
        return await self._guard("change_page", run)

    async def finalize_interview(self, session_id: str, reviewer_id: str) -> ReviewOutcome:
        """Explicit submit: score whatever has been answered against the full total."""
        async def run() -> ReviewOutcome:
            result = self._engine.finalize(session_id, reviewer_id)
            return await self._conclude(result)
        return await self._guard("finalize_interview", run)

    async def _conclude(self, result: InterviewResult) -> ReviewOutcome:
        data = {"completed": True, "result": result.to_dict()}
        if not result.passed:
            return _success(data, [Notify(
                NotificationKind.INTERVIEW_FAILED, result.target_applicant_id,
                result.reviewer_id, details={"score": result.score, "total": result.total},
            )])
        effects: list[SideEffect] = [
            GrantRole(result.target_applicant_id, GrantTarget.WHITELIST),
            Notify(
                NotificationKind.INTERVIEW_PASSED, result.target_applicant_id,
                result.reviewer_id, details={"score": result.score, "total": result.total},
            ),
        ]
        try:
            record = await self._ledger.mark_grant_final(
                result.target_applicant_id, result.reviewer_id,
            )
        except StorageFailureError as e:
            # Session is already gone: report the pass and grant anyway
            logger.error(
                f"Interview pass not recorded in ledger: {e.message}",
                extra={
                    "error_code": e.code, "session_id": result.session_id,
                    "applicant_id": result.target_applicant_id,
                    "reviewer_id": result.reviewer_id,
                },
            )
            return ReviewOutcome(
                ok=False, reason=e.to_reason(), message=e.message, data=data,
                side_effects=effects, http_status=e.http_status,
            )
        data["record"] = record.to_dict()
        return _success(data, effects)

    # --- Manual grant and recaps -----------------------------------------------

    async def grant_directly(self, applicant_id: str, reviewer_id: str) -> ReviewOutcome:
        """Staff command: confer the final role without an interview. Ledger untouched."""
        async def run() -> ReviewOutcome:
            if not isinstance(applicant_id, str) or not applicant_id.strip():
                raise InvalidInputError(
                    "Grant requires a non-empty 'applicant_id'", "MISSING_KEY",
                    field="applicant_id",
                )
            logger.info(
                "Manual grant requested",
                extra={"applicant_id": applicant_id, "reviewer_id": reviewer_id},
            )
            return _success({"applicant_id": applicant_id}, [
                GrantRole(applicant_id, GrantTarget.WHITELIST),
                Notify(NotificationKind.MANUAL_GRANT, applicant_id, reviewer_id),
            ])
        return await self._guard("grant_directly", run)

    async def daily_recap(
        self, reference_date: date | datetime | str | None = None,
    ) -> ReviewOutcome:
        async def run() -> ReviewOutcome:
            return _success(await self._ledger.summarize_daily_by_faction(reference_date))
        return await self._guard("daily_recap", run)

    async def weekly_recap(self) -> ReviewOutcome:
        async def run() -> ReviewOutcome:
            per_reviewer = await self._ledger.summarize_weekly_by_reviewer()
            return _success({
                "per_reviewer": per_reviewer,
                "total": sum(per_reviewer.values()),
            })
        return await self._guard("weekly_recap", run)

    async def reviewer_stats(
        self, reviewer_id: str, stage: DecisionStage | str | None = None,
    ) -> ReviewOutcome:
        async def run() -> ReviewOutcome:
            parsed = None
            if stage is not None:
                try:
                    parsed = DecisionStage(stage)
                except ValueError:
                    raise InvalidInputError(
                        f"Unknown stage: {stage!r}", "INVALID_STAGE", field="stage",
                    )
            count = await self._ledger.count_accepted_today_by_reviewer(reviewer_id, parsed)
            return _success({
                "reviewer_id": reviewer_id,
                "stage": parsed.value if parsed else None,
                "accepted_today": count,
            })
        return await self._guard("reviewer_stats", run)
