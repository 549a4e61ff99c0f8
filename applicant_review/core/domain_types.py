"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - All valid states encoded as Enums - no raw string matching
    - MAX_QUESTIONS, PAGE_SIZE, PASS_THRESHOLD are the single source of truth

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Callable


# ─── Clock ───────────────────────────────────────────────────────

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ─── Interview constants ─────────────────────────────────────────

MAX_QUESTIONS: int = 15
PAGE_SIZE: int = 4
PASS_THRESHOLD: int = 10  # pass iff strictly more true answers

OTHER_FACTION: str = "Other"
UNSPECIFIED_FACTION: str = "Unspecified"
UNKNOWN_REVIEWER: str = "unknown"


# ─── Enums ───────────────────────────────────────────────────────

class SubmissionStatus(str, Enum):
    """Ledger status. Pending is the absence of a status (None)."""
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    ACCEPTED_FINAL = "accepted_final"


class DecisionStage(str, Enum):
    """Which review phase produced a decision."""
    FORM = "form"
    VOCAL = "vocal"


class LedgerOperation(str, Enum):
    """Mutations recorded in the append-only audit log."""
    UPSERT = "upsert"
    DECISION = "decision"
    GRANT_FINAL = "grant_final"


class GrantTarget(str, Enum):
    """Which configured role a GrantRole side effect refers to."""
    INTERVIEW = "interview"
    WHITELIST = "whitelist"


class NotificationKind(str, Enum):
    """Notifications the presentation layer renders."""
    SUBMISSION_RECEIVED = "submission_received"
    FORM_ACCEPTED = "form_accepted"
    FORM_REJECTED = "form_rejected"
    INTERVIEW_STARTED = "interview_started"
    INTERVIEW_PASSED = "interview_passed"
    INTERVIEW_FAILED = "interview_failed"
    MANUAL_GRANT = "manual_grant"
