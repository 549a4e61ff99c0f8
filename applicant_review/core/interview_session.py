"""Interview Session - per-interview ephemeral scoring state.

Invariants:
    - questions is a snapshot taken at creation, at most MAX_QUESTIONS long
    - responses only grows or overwrites; keys are within [0, total)
    - page stays within [0, max_page]
    - Only reviewer_id may mutate the session (enforced by the engine)

Design Decisions:
    - Dataclass with computed properties: deterministic, testable without mocks
    - lock lives on the session so different handles never contend
"""

import math
import threading
from dataclasses import dataclass, field
from datetime import datetime

from applicant_review.core.domain_types import MAX_QUESTIONS, PAGE_SIZE


@dataclass
class InterviewSession:
    """One in-flight oral interview."""

    session_id: str
    target_applicant_id: str
    reviewer_id: str
    questions: list[str]
    created_at: datetime
    last_activity_at: datetime

    responses: dict[int, bool] = field(default_factory=dict)
    page: int = 0

    lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False,
    )

    @property
    def total(self) -> int:
        """Score denominator: min(15, question count)."""
        return min(MAX_QUESTIONS, len(self.questions))

    @property
    def score(self) -> int:
        return sum(1 for v in self.responses.values() if v)

    @property
    def answered(self) -> int:
        return len(self.responses)

    @property
    def is_complete(self) -> bool:
        return self.answered >= self.total

    @property
    def max_page(self) -> int:
        return max(0, math.ceil(len(self.questions) / PAGE_SIZE) - 1)

    @property
    def page_bounds(self) -> tuple[int, int]:
        """Half-open slice [start, end) of questions shown on the current page."""
        start = self.page * PAGE_SIZE
        return start, min(start + PAGE_SIZE, len(self.questions))

    def to_view(self) -> dict:
        """Read-only view for the presentation layer."""
        start, end = self.page_bounds
        return {
            "session_id": self.session_id,
            "target_applicant_id": self.target_applicant_id,
            "reviewer_id": self.reviewer_id,
            "questions": list(self.questions),
            "responses": {str(k): v for k, v in sorted(self.responses.items())},
            "page": self.page,
            "max_page": self.max_page,
            "page_start": start,
            "page_end": end,
            "answered": self.answered,
            "total": self.total,
            "score": self.score,
        }
