"""Ledger Queries - pure lookups and time-windowed aggregates over submission records.

Invariants:
    - All inputs are record lists plus an explicit "now" (no IO, no clock reads)
    - Day boundaries are UTC calendar days; weeks start Monday 00:00 UTC
    - Records without the governing timestamp never match a time window
    - latest_record_index is deterministic: ranks by timestamps, then ledger position

Design Decisions:
    - Pure functions, not LedgerStore methods: testable with hand-built records
    - Daily summary seeds every configured faction at 0 so recaps show empty buckets
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Sequence

from applicant_review.core.domain_types import (
    DecisionStage, SubmissionStatus, OTHER_FACTION, UNKNOWN_REVIEWER,
)
from applicant_review.core.errors import InvalidInputError
from applicant_review.core.submission_record import SubmissionRecord, parse_timestamp

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


# ─── Lookups ─────────────────────────────────────────────────────

def find_record_index(
    records: Sequence[SubmissionRecord], applicant_id: str, submission_ref: str,
) -> int | None:
    """Position of the record with this natural key, or None."""
    for i, record in enumerate(records):
        if record.applicant_id == applicant_id and record.submission_ref == submission_ref:
            return i
    return None


def latest_record_index(
    records: Sequence[SubmissionRecord], applicant_id: str,
) -> int | None:
    """Position of the applicant's most recently submitted-or-decided record.

    Rank: (submitted_at or decided_at or granted_at, decided_at or granted_at,
    position). Equal timestamps resolve to the record written last.
    """
    best: int | None = None
    best_rank: tuple | None = None
    for i, record in enumerate(records):
        if record.applicant_id != applicant_id:
            continue
        rank = (
            record.activity_at or _EPOCH,
            record.decided_at or record.granted_at or _EPOCH,
            i,
        )
        if best_rank is None or rank > best_rank:
            best, best_rank = i, rank
    return best


# ─── Time windows ────────────────────────────────────────────────

def utc_day(reference: date | datetime | str | None, now: datetime) -> date:
    """UTC calendar day of reference (default: now)."""
    if reference is None:
        return now.astimezone(timezone.utc).date()
    if isinstance(reference, datetime):
        return reference.astimezone(timezone.utc).date() if reference.tzinfo else reference.date()
    if isinstance(reference, date):
        return reference
    if isinstance(reference, str):
        try:
            return date.fromisoformat(reference)
        except ValueError:
            parsed = parse_timestamp(reference)
            return parsed.date()
    raise InvalidInputError(
        f"Invalid reference date: {reference!r}", "INVALID_DATE",
    )


def week_start(now: datetime) -> datetime:
    """Most recent Monday 00:00 UTC (Sunday maps to the Monday six days before)."""
    today = now.astimezone(timezone.utc).date()
    monday = today - timedelta(days=today.weekday())
    return datetime.combine(monday, time.min, tzinfo=timezone.utc)


def _on_day(ts: datetime | None, day: date) -> bool:
    return ts is not None and ts.astimezone(timezone.utc).date() == day


# ─── Aggregates ──────────────────────────────────────────────────

def summarize_daily_by_faction(
    records: Iterable[SubmissionRecord], day: date, factions: Sequence[str],
) -> dict:
    """Submissions of one UTC day: totals, treated/pending split, per-faction counts."""
    todays = [r for r in records if _on_day(r.submitted_at, day)]
    by_faction = {name: 0 for name in factions}
    by_faction.setdefault(OTHER_FACTION, 0)
    for record in todays:
        bucket = record.faction if record.faction in by_faction else OTHER_FACTION
        by_faction[bucket] += 1
    return {
        "date": day.isoformat(),
        "total": len(todays),
        "treated": sum(1 for r in todays if r.is_treated),
        "pending": sum(1 for r in todays if r.is_pending),
        "by_faction": by_faction,
    }


def summarize_weekly_by_reviewer(
    records: Iterable[SubmissionRecord], now: datetime,
) -> dict[str, int]:
    """Decision count per reviewer since Monday 00:00 UTC."""
    start = week_start(now)
    per_reviewer: dict[str, int] = {}
    for record in records:
        if record.decided_at is None or record.decided_at < start:
            continue
        reviewer = record.reviewer_id or UNKNOWN_REVIEWER
        per_reviewer[reviewer] = per_reviewer.get(reviewer, 0) + 1
    return per_reviewer


def count_accepted_today_by_reviewer(
    records: Iterable[SubmissionRecord],
    reviewer_id: str,
    now: datetime,
    stage: DecisionStage | None = None,
) -> int:
    """Today's acceptances by a reviewer.

    Without stage: status accepted, decided today. With stage: stage matches
    and decided_at (else granted_at) is today, whatever the status.
    """
    today = now.astimezone(timezone.utc).date()
    if stage is None:
        return sum(
            1 for r in records
            if r.status == SubmissionStatus.ACCEPTED
            and r.reviewer_id == reviewer_id
            and _on_day(r.decided_at, today)
        )
    return sum(
        1 for r in records
        if r.reviewer_id == reviewer_id
        and r.stage == stage
        and _on_day(r.decided_at or r.granted_at, today)
    )
