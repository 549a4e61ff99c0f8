"""Ledger Queries - tests for lookups and time-windowed aggregates.

Tests cover:
    - Daily partition at the UTC midnight boundary
    - Faction buckets (configured, Other, seeded zeros)
    - Weekly window starting Monday 00:00 UTC
    - Accepted-today counts with and without a stage filter
    - latest_record_index tie-break rules
"""

from datetime import date, datetime, timezone

from applicant_review.core.domain_types import DecisionStage, SubmissionStatus
from applicant_review.core.ledger_queries import (
    count_accepted_today_by_reviewer, latest_record_index,
    summarize_daily_by_faction, summarize_weekly_by_reviewer, utc_day, week_start,
)
from applicant_review.core.submission_record import SubmissionRecord

FACTIONS = ["Konoha", "Suna"]


def _at(text: str) -> datetime:
    return datetime.fromisoformat(text).replace(tzinfo=timezone.utc)


def _record(ref: str, **kwargs) -> SubmissionRecord:
    kwargs.setdefault("applicant_id", "u1")
    return SubmissionRecord(submission_ref=ref, **kwargs)


# ─── Daily summary ───────────────────────────────────────────────

def test_daily_summary_partitions_at_utc_midnight():
    records = [
        _record("m1", submitted_at=_at("2024-01-10T23:59:00"), faction="Konoha"),
        _record("m2", submitted_at=_at("2024-01-11T00:00:01"), faction="Konoha"),
    ]
    day1 = summarize_daily_by_faction(records, date(2024, 1, 10), FACTIONS)
    day2 = summarize_daily_by_faction(records, date(2024, 1, 11), FACTIONS)
    assert day1["total"] == 1
    assert day2["total"] == 1
    assert day1["date"] == "2024-01-10"


def test_daily_summary_seeds_every_faction_and_other():
    summary = summarize_daily_by_faction([], date(2024, 1, 10), FACTIONS)
    assert summary["by_faction"] == {"Konoha": 0, "Suna": 0, "Other": 0}
    assert summary["total"] == summary["treated"] == summary["pending"] == 0


def test_daily_summary_unknown_faction_counts_as_other():
    records = [
        _record("m1", submitted_at=_at("2024-01-10T08:00:00"), faction="Kiri"),
        _record("m2", submitted_at=_at("2024-01-10T09:00:00"), faction=None),
        _record("m3", submitted_at=_at("2024-01-10T10:00:00"), faction="Suna"),
    ]
    summary = summarize_daily_by_faction(records, date(2024, 1, 10), FACTIONS)
    assert summary["by_faction"] == {"Konoha": 0, "Suna": 1, "Other": 2}


def test_daily_summary_splits_treated_and_pending():
    records = [
        _record("m1", submitted_at=_at("2024-01-10T08:00:00")),
        _record("m2", submitted_at=_at("2024-01-10T09:00:00"),
                status=SubmissionStatus.ACCEPTED),
        _record("m3", submitted_at=_at("2024-01-10T10:00:00"),
                status=SubmissionStatus.REJECTED),
    ]
    summary = summarize_daily_by_faction(records, date(2024, 1, 10), FACTIONS)
    assert summary["total"] == 3
    assert summary["treated"] == 2
    assert summary["pending"] == 1


def test_daily_summary_ignores_records_without_submitted_at():
    records = [_record("m1", decided_at=_at("2024-01-10T08:00:00"),
                       status=SubmissionStatus.ACCEPTED)]
    summary = summarize_daily_by_faction(records, date(2024, 1, 10), FACTIONS)
    assert summary["total"] == 0


def test_utc_day_accepts_strings_dates_and_offsets():
    now = _at("2024-01-10T12:00:00")
    assert utc_day(None, now) == date(2024, 1, 10)
    assert utc_day("2024-01-09", now) == date(2024, 1, 9)
    assert utc_day(date(2024, 1, 8), now) == date(2024, 1, 8)
    assert utc_day(datetime.fromisoformat("2024-01-11T02:00:00+05:00"), now) == date(2024, 1, 10)


# ─── Weekly summary ──────────────────────────────────────────────

def test_week_start_is_monday_midnight():
    assert week_start(_at("2024-01-14T23:00:00")) == _at("2024-01-08T00:00:00")
    assert week_start(_at("2024-01-08T00:00:00")) == _at("2024-01-08T00:00:00")
    assert week_start(_at("2024-01-10T12:00:00")) == _at("2024-01-08T00:00:00")


def test_weekly_summary_boundary_at_monday():
    now = _at("2024-01-14T23:00:00")
    records = [
        _record("m1", decided_at=_at("2024-01-07T23:59:59"), reviewer_id="r1"),
        _record("m2", decided_at=_at("2024-01-08T00:00:00"), reviewer_id="r1"),
        _record("m3", decided_at=_at("2024-01-12T10:00:00"), reviewer_id="r2"),
    ]
    assert summarize_weekly_by_reviewer(records, now) == {"r1": 1, "r2": 1}


def test_weekly_summary_missing_reviewer_is_unknown():
    now = _at("2024-01-10T12:00:00")
    records = [_record("m1", decided_at=_at("2024-01-09T10:00:00"))]
    assert summarize_weekly_by_reviewer(records, now) == {"unknown": 1}


def test_weekly_summary_skips_undecided():
    now = _at("2024-01-10T12:00:00")
    records = [_record("m1", submitted_at=_at("2024-01-09T10:00:00"))]
    assert summarize_weekly_by_reviewer(records, now) == {}


# ─── Accepted today ──────────────────────────────────────────────

def test_accepted_today_counts_only_accepted_decisions():
    now = _at("2024-01-10T12:00:00")
    records = [
        _record("m1", status=SubmissionStatus.ACCEPTED, reviewer_id="r1",
                decided_at=_at("2024-01-10T01:00:00")),
        _record("m2", status=SubmissionStatus.REJECTED, reviewer_id="r1",
                decided_at=_at("2024-01-10T02:00:00")),
        _record("m3", status=SubmissionStatus.ACCEPTED, reviewer_id="r1",
                decided_at=_at("2024-01-09T23:00:00")),
        _record("m4", status=SubmissionStatus.ACCEPTED, reviewer_id="r2",
                decided_at=_at("2024-01-10T03:00:00")),
    ]
    assert count_accepted_today_by_reviewer(records, "r1", now) == 1


def test_accepted_today_with_stage_matches_stage_and_day():
    now = _at("2024-01-10T12:00:00")
    records = [
        _record("m1", status=SubmissionStatus.ACCEPTED, reviewer_id="r1",
                stage=DecisionStage.FORM, decided_at=_at("2024-01-10T01:00:00")),
        _record("m2", status=SubmissionStatus.ACCEPTED, reviewer_id="r1",
                stage=DecisionStage.VOCAL, decided_at=_at("2024-01-10T02:00:00")),
    ]
    assert count_accepted_today_by_reviewer(records, "r1", now, DecisionStage.FORM) == 1


def test_accepted_today_with_stage_falls_back_to_granted_at():
    now = _at("2024-01-10T12:00:00")
    records = [
        _record("m1", status=SubmissionStatus.ACCEPTED_FINAL, reviewer_id="r1",
                stage=DecisionStage.VOCAL, granted_at=_at("2024-01-10T05:00:00")),
    ]
    assert count_accepted_today_by_reviewer(records, "r1", now, DecisionStage.VOCAL) == 1
    assert count_accepted_today_by_reviewer(records, "r1", now) == 0


# ─── Latest record ───────────────────────────────────────────────

def test_latest_record_prefers_newest_submission():
    records = [
        _record("m2", submitted_at=_at("2024-01-10T10:00:00")),
        _record("m1", submitted_at=_at("2024-01-09T10:00:00")),
    ]
    assert latest_record_index(records, "u1") == 0


def test_latest_record_tie_resolves_to_later_position():
    same = _at("2024-01-10T10:00:00")
    records = [
        _record("m1", submitted_at=same),
        _record("m2", submitted_at=same),
    ]
    assert latest_record_index(records, "u1") == 1


def test_latest_record_tie_prefers_later_decision():
    same = _at("2024-01-10T10:00:00")
    records = [
        _record("m1", submitted_at=same, decided_at=_at("2024-01-10T11:00:00")),
        _record("m2", submitted_at=same),
    ]
    assert latest_record_index(records, "u1") == 0


def test_latest_record_none_for_unknown_applicant():
    assert latest_record_index([_record("m1")], "u2") is None
