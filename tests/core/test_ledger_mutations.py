"""Ledger Mutations - tests for pure ledger transitions.

Tests cover:
    - apply_upsert: insert, merge, idempotence, input list untouched
    - apply_decision: create-if-absent, stage retention, status validation
    - apply_grant_final: latest-record targeting, create-if-absent, vocal stage
"""

from datetime import datetime, timezone

import pytest

from applicant_review.core.domain_types import DecisionStage, SubmissionStatus
from applicant_review.core.errors import InvalidInputError
from applicant_review.core.ledger_mutations import (
    apply_decision, apply_grant_final, apply_upsert,
)
from applicant_review.core.submission_record import SubmissionRecord

T0 = datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)
T1 = datetime(2024, 1, 10, 10, 0, tzinfo=timezone.utc)
T2 = datetime(2024, 1, 10, 11, 0, tzinfo=timezone.utc)


def _entry(**overrides) -> dict:
    entry = {"applicant_id": "u1", "submission_ref": "m1", "faction": "Konoha",
             "submitted_at": T0}
    entry.update(overrides)
    return entry


# ─── Upsert ──────────────────────────────────────────────────────

def test_upsert_inserts_new_record():
    result = apply_upsert([], _entry())
    assert result.created
    assert len(result.records) == 1
    assert result.record.faction == "Konoha"


def test_upsert_same_key_merges_in_place():
    first = apply_upsert([], _entry())
    second = apply_upsert(first.records, _entry(faction="Suna"))
    assert not second.created
    assert len(second.records) == 1
    assert second.records[0].faction == "Suna"


def test_upsert_is_idempotent():
    once = apply_upsert([], _entry()).records
    twice = apply_upsert(once, _entry()).records
    assert twice == once


def test_upsert_different_ref_appends():
    first = apply_upsert([], _entry())
    second = apply_upsert(first.records, _entry(submission_ref="m2"))
    assert [r.submission_ref for r in second.records] == ["m1", "m2"]


def test_upsert_does_not_mutate_input():
    records = apply_upsert([], _entry()).records
    apply_upsert(records, _entry(faction="Suna"))
    assert records[0].faction == "Konoha"


def test_upsert_missing_key_rejected():
    with pytest.raises(InvalidInputError) as exc:
        apply_upsert([], {"applicant_id": "u1"})
    assert exc.value.code == "MISSING_KEY"


# ─── Decision ────────────────────────────────────────────────────

def test_decision_updates_existing_record():
    records = apply_upsert([], _entry()).records
    result = apply_decision(
        records, "u1", "m1", "accepted", "r1", T1, DecisionStage.FORM,
    )
    assert not result.created
    record = result.records[0]
    assert record.status == SubmissionStatus.ACCEPTED
    assert record.decided_at == T1
    assert record.reviewer_id == "r1"
    assert record.stage == DecisionStage.FORM
    assert record.faction == "Konoha"


def test_decision_on_unknown_key_creates_minimal_record():
    result = apply_decision([], "u9", "m9", SubmissionStatus.REJECTED, "r1", T1)
    assert result.created
    assert result.record.submitted_at is None
    assert result.record.status == SubmissionStatus.REJECTED


def test_decision_without_stage_keeps_previous_stage():
    records = apply_decision([], "u1", "m1", "accepted", "r1", T1, DecisionStage.FORM).records
    result = apply_decision(records, "u1", "m1", "rejected", "r2", T2)
    assert result.record.stage == DecisionStage.FORM
    assert result.record.reviewer_id == "r2"


@pytest.mark.parametrize("status", ["accepted_final", "maybe", ""])
def test_decision_rejects_non_verdict_status(status):
    with pytest.raises(InvalidInputError) as exc:
        apply_decision([], "u1", "m1", status, "r1", T1)
    assert exc.value.code == "INVALID_DECISION"


# ─── Final grant ─────────────────────────────────────────────────

def test_grant_final_marks_latest_record():
    records = [
        SubmissionRecord(applicant_id="u1", submission_ref="old", submitted_at=T0),
        SubmissionRecord(applicant_id="u1", submission_ref="new", submitted_at=T1),
    ]
    result = apply_grant_final(records, "u1", "r1", T2)
    assert not result.created
    assert result.records[1].status == SubmissionStatus.ACCEPTED_FINAL
    assert result.records[1].granted_by == "r1"
    assert result.records[1].granted_at == T2
    assert result.records[1].stage == DecisionStage.VOCAL
    assert result.records[0].status is None


def test_grant_final_without_record_creates_one():
    result = apply_grant_final([], "u1", "r1", T2)
    assert result.created
    assert result.record.submission_ref is None
    assert result.record.status == SubmissionStatus.ACCEPTED_FINAL


def test_grant_final_requires_applicant():
    with pytest.raises(InvalidInputError) as exc:
        apply_grant_final([], "", "r1", T2)
    assert exc.value.code == "MISSING_KEY"
