"""Interview Scoring - pure pass/fail evaluation and pagination arithmetic.

Invariants:
    - evaluate_interview is PURE: returns InterviewResult, does NOT mutate state
    - PASS_THRESHOLD (10) is absolute: pass iff more than 10 true answers,
      whatever the configured question count
    - total is min(15, question count) even when fewer questions were answered

Design Decisions:
    - Separated from the engine: scoring rules change independently of session
      lifecycle and are checked without building a registry
"""

from dataclasses import dataclass

from applicant_review.core.domain_types import PASS_THRESHOLD
from applicant_review.core.errors import InvalidInputError
from applicant_review.core.interview_session import InterviewSession


@dataclass(frozen=True)
class InterviewResult:
    """Final outcome reported exactly once per session."""
    session_id: str
    target_applicant_id: str
    reviewer_id: str
    score: int
    total: int
    passed: bool
    answered: int

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "target_applicant_id": self.target_applicant_id,
            "reviewer_id": self.reviewer_id,
            "score": self.score,
            "total": self.total,
            "pass": self.passed,
            "answered": self.answered,
        }


def is_passing(score: int) -> bool:
    return score > PASS_THRESHOLD


def evaluate_interview(session: InterviewSession) -> InterviewResult:
    """Score a session with whatever responses it holds. Pure."""
    score = session.score
    return InterviewResult(
        session_id=session.session_id,
        target_applicant_id=session.target_applicant_id,
        reviewer_id=session.reviewer_id,
        score=score,
        total=session.total,
        passed=is_passing(score),
        answered=session.answered,
    )


def validate_question_index(session: InterviewSession, question_index: int) -> None:
    if (
        isinstance(question_index, bool)
        or not isinstance(question_index, int)
        or not 0 <= question_index < session.total
    ):
        raise InvalidInputError(
            f"Question index {question_index!r} outside [0, {session.total})",
            "INVALID_QUESTION_INDEX", field="question_index",
        )


def next_page(session: InterviewSession, delta: int) -> int:
    """Clamp page + delta into [0, max_page]. delta must be -1 or +1."""
    if isinstance(delta, bool) or delta not in (-1, 1):
        raise InvalidInputError(
            f"Page delta must be -1 or +1, got {delta!r}",
            "INVALID_PAGE_DELTA", field="delta",
        )
    return min(session.max_page, max(0, session.page + delta))


def validate_answer_value(value: object) -> bool:
    """Answers are strict booleans; truthy strings or numbers are refused."""
    if not isinstance(value, bool):
        raise InvalidInputError(
            f"Answer value must be true or false, got {value!r}",
            "INVALID_ANSWER_VALUE", field="value",
        )
    return value
