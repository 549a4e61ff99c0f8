"""Interview Engine - owned registry of active interview sessions and their transitions.

Invariants:
    - One InterviewSession per handle; created by create_session, removed exactly once
      (finalization or idle eviction)
    - Every event for a removed handle fails with SessionNotFoundError
    - Only the session's reviewer may answer, paginate or finalize (else Unauthorized,
      with no mutation)
    - Answering the last unanswered question finalizes automatically
    - Events on the same session apply atomically in arrival order (per-session lock);
      different sessions never contend beyond the registry lookup

Design Decisions:
    - Explicit registry object created at startup and passed to the coordinator,
      not a module-level dict
    - Engine is IO-free: ledger writes and grants happen in the coordinator using
      the InterviewResult it returns
    - threading locks: methods are synchronous and hold no lock across an await
"""

import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import timedelta
from typing import Iterator

from applicant_review.core.domain_types import Clock, MAX_QUESTIONS, utc_now
from applicant_review.core.errors import (
    InvalidInputError, SessionNotFoundError, UnauthorizedReviewerError,
)
from applicant_review.core.interview_scoring import (
    InterviewResult, evaluate_interview, next_page, validate_answer_value,
    validate_question_index,
)
from applicant_review.core.interview_session import InterviewSession
from applicant_review.core.repository_protocols import QuestionSetProvider

logger = logging.getLogger(__name__)


def _require_id(value: object, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(
            f"'{name}' must be a non-empty string", "MISSING_KEY", field=name,
        )
    return value


class InterviewEngine:
    """Tracks active interviews and applies reviewer events to them."""

    def __init__(self, questions: QuestionSetProvider, clock: Clock = utc_now):
        self._questions = questions
        self._clock = clock
        self._sessions: dict[str, InterviewSession] = {}
        self._registry_lock = threading.Lock()

    @property
    def active_count(self) -> int:
        return len(self._sessions)

    def question_set(self) -> list[str]:
        """Current prompts, truncated to MAX_QUESTIONS."""
        return list(self._questions.get_questions())[:MAX_QUESTIONS]

    # --- Lifecycle -------------------------------------------------------------

    def create_session(
        self,
        target_applicant_id: str,
        reviewer_id: str,
        session_id: str | None = None,
    ) -> InterviewSession:
        """Open an interview: empty responses, page 0."""
        _require_id(target_applicant_id, "target_applicant_id")
        _require_id(reviewer_id, "reviewer_id")
        questions = self.question_set()
        if not questions:
            raise InvalidInputError(
                "No interview questions are configured", "NO_QUESTIONS",
            )
        handle = _require_id(session_id, "session_id") if session_id is not None else uuid.uuid4().hex
        now = self._clock()
        session = InterviewSession(
            session_id=handle,
            target_applicant_id=target_applicant_id,
            reviewer_id=reviewer_id,
            questions=questions,
            created_at=now,
            last_activity_at=now,
        )
        with self._registry_lock:
            if handle in self._sessions:
                raise InvalidInputError(
                    f"Interview session '{handle}' already exists",
                    "DUPLICATE_SESSION", field="session_id",
                )
            self._sessions[handle] = session
        logger.info(
            "Interview started",
            extra={
                "session_id": handle, "applicant_id": target_applicant_id,
                "reviewer_id": reviewer_id,
            },
        )
        return session

    def get_session(self, session_id: str) -> InterviewSession:
        with self._registry_lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    @contextmanager
    def _locked(self, session_id: str, reviewer_id: str) -> Iterator[InterviewSession]:
        """Hold the session's lock after checking it is still active and owned."""
        session = self.get_session(session_id)
        with session.lock:
            with self._registry_lock:
                if self._sessions.get(session_id) is not session:
                    raise SessionNotFoundError(session_id)
            if reviewer_id != session.reviewer_id:
                logger.warning(
                    "Rejected interview event from another reviewer",
                    extra={"session_id": session_id, "reviewer_id": reviewer_id},
                )
                raise UnauthorizedReviewerError(session_id, reviewer_id)
            yield session
            session.last_activity_at = self._clock()

    def _complete(self, session: InterviewSession) -> InterviewResult:
        """Remove the session and score it. Caller holds session.lock."""
        with self._registry_lock:
            removed = self._sessions.pop(session.session_id, None)
        if removed is not session:
            raise SessionNotFoundError(session.session_id)
        result = evaluate_interview(session)
        logger.info(
            f"Interview finished {result.score}/{result.total} "
            f"({'pass' if result.passed else 'fail'})",
            extra={
                "session_id": session.session_id,
                "applicant_id": session.target_applicant_id,
                "reviewer_id": session.reviewer_id,
            },
        )
        return result

    # --- Transitions -----------------------------------------------------------

    def answer(
        self,
        session_id: str,
        reviewer_id: str,
        question_index: int,
        value: bool,
    ) -> InterviewResult | None:
        """Record one answer. Returns the result when this completed the interview."""
        with self._locked(session_id, reviewer_id) as session:
            validate_question_index(session, question_index)
            session.responses[question_index] = validate_answer_value(value)
            if session.is_complete:
                return self._complete(session)
        return None

    def set_page(self, session_id: str, reviewer_id: str, delta: int) -> InterviewSession:
        """Move the pagination cursor by -1/+1, clamped."""
        with self._locked(session_id, reviewer_id) as session:
            session.page = next_page(session, delta)
        return session

    def finalize(self, session_id: str, reviewer_id: str) -> InterviewResult:
        """Explicit submit with whatever has been answered so far."""
        with self._locked(session_id, reviewer_id) as session:
            return self._complete(session)

    def page_bounds(self, session_id: str) -> tuple[int, int]:
        return self.get_session(session_id).page_bounds

    # --- Eviction --------------------------------------------------------------

    def evict_idle(self, max_idle: timedelta) -> list[str]:
        """Drop sessions with no activity for longer than max_idle."""
        cutoff = self._clock() - max_idle
        with self._registry_lock:
            stale = [
                sid for sid, s in self._sessions.items()
                if s.last_activity_at < cutoff
            ]
            for sid in stale:
                del self._sessions[sid]
        for sid in stale:
            logger.info("Evicted idle interview session", extra={"session_id": sid})
        return stale
