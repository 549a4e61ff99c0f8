"""Ledger Mutations - pure transitions over a submission record list.

Invariants:
    - Input lists are never mutated: every function returns a new list
    - At most one record per (applicant_id, submission_ref) after any transition
    - Records are never removed; positions of existing records never change
    - mark_decision / mark_grant_final create a minimal record when none matches
      and report it via MutationResult.created

Design Decisions:
    - Pure (records in, records out): LedgerStore swaps its snapshot only after
      the new list is durably saved, so a failed write leaves memory untouched
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Mapping, Sequence

from applicant_review.core.domain_types import DecisionStage, SubmissionStatus
from applicant_review.core.errors import InvalidInputError
from applicant_review.core.ledger_queries import find_record_index, latest_record_index
from applicant_review.core.submission_record import SubmissionRecord, validate_key

DECISION_STATUSES = frozenset({SubmissionStatus.ACCEPTED, SubmissionStatus.REJECTED})


@dataclass(frozen=True)
class MutationResult:
    """Outcome of one transition: the new list and the touched record."""
    records: list[SubmissionRecord]
    record: SubmissionRecord
    created: bool


def _replace_at(
    records: Sequence[SubmissionRecord], index: int, record: SubmissionRecord,
) -> list[SubmissionRecord]:
    updated = list(records)
    updated[index] = record
    return updated


def apply_upsert(
    records: Sequence[SubmissionRecord], entry: Mapping[str, Any],
) -> MutationResult:
    """Insert or merge by natural key. Entry wins on conflicts."""
    applicant_id, submission_ref = validate_key(entry)
    index = find_record_index(records, applicant_id, submission_ref)
    if index is None:
        record = SubmissionRecord.from_dict(entry)
        return MutationResult([*records, record], record, created=True)
    record = records[index].merged_with(entry)
    return MutationResult(_replace_at(records, index, record), record, created=False)


def parse_decision_status(status: SubmissionStatus | str) -> SubmissionStatus:
    try:
        parsed = SubmissionStatus(status)
    except ValueError:
        parsed = None
    if parsed not in DECISION_STATUSES:
        raise InvalidInputError(
            f"Decision must be 'accepted' or 'rejected', got {status!r}",
            "INVALID_DECISION", field="status",
        )
    return parsed


def apply_decision(
    records: Sequence[SubmissionRecord],
    applicant_id: str,
    submission_ref: str,
    status: SubmissionStatus | str,
    reviewer_id: str,
    now: datetime,
    stage: DecisionStage | None = None,
) -> MutationResult:
    """Record an accept/reject verdict; creates a minimal record if absent."""
    validate_key({"applicant_id": applicant_id, "submission_ref": submission_ref})
    decision = parse_decision_status(status)
    index = find_record_index(records, applicant_id, submission_ref)
    if index is None:
        record = SubmissionRecord(
            applicant_id=applicant_id, submission_ref=submission_ref,
            status=decision, decided_at=now, reviewer_id=reviewer_id, stage=stage,
        )
        return MutationResult([*records, record], record, created=True)
    current = records[index]
    record = replace(
        current, status=decision, decided_at=now, reviewer_id=reviewer_id,
        stage=stage if stage is not None else current.stage,
    )
    return MutationResult(_replace_at(records, index, record), record, created=False)


def apply_grant_final(
    records: Sequence[SubmissionRecord],
    applicant_id: str,
    reviewer_id: str,
    now: datetime,
) -> MutationResult:
    """Mark the applicant's latest record as finally granted (stage always vocal)."""
    if not isinstance(applicant_id, str) or not applicant_id.strip():
        raise InvalidInputError(
            "Grant requires a non-empty 'applicant_id'", "MISSING_KEY",
            field="applicant_id",
        )
    index = latest_record_index(records, applicant_id)
    if index is None:
        record = SubmissionRecord(
            applicant_id=applicant_id, status=SubmissionStatus.ACCEPTED_FINAL,
            granted_at=now, granted_by=reviewer_id, stage=DecisionStage.VOCAL,
        )
        return MutationResult([*records, record], record, created=True)
    record = replace(
        records[index], status=SubmissionStatus.ACCEPTED_FINAL,
        granted_at=now, granted_by=reviewer_id, stage=DecisionStage.VOCAL,
    )
    return MutationResult(_replace_at(records, index, record), record, created=False)
