"""Ledger Store - durable submission ledger with single-writer serialization.

Invariants:
    - All mutations run under one asyncio.Lock: read snapshot -> pure transition ->
      durable save -> swap snapshot. No lost updates.
    - The in-memory snapshot only changes after the storage write succeeded
    - Reads are served from the snapshot; a read after a write observes it
    - Writes are retried with bounded exponential backoff; each attempt has a timeout.
      Exhaustion raises StorageTimeoutError / StorageFailureError, never hangs
    - First load: no stored document -> empty ledger. A failing read is surfaced.
    - Creating a record from a decision or grant logs a WARNING

Design Decisions:
    - Transitions live in core/ledger_mutations.py (pure); this class adds IO and locking
    - Backoff follows the API client pattern: 2^attempt * base delay with ±25% jitter
"""

import asyncio
import logging
import random
from datetime import date, datetime
from typing import Any, Callable, Mapping, Sequence

from applicant_review.core.domain_types import (
    Clock, DecisionStage, LedgerOperation, SubmissionStatus, utc_now,
)
from applicant_review.core.errors import StorageFailureError, StorageTimeoutError
from applicant_review.core.ledger_mutations import (
    MutationResult, apply_decision, apply_grant_final, apply_upsert,
)
from applicant_review.core.ledger_queries import (
    count_accepted_today_by_reviewer, find_record_index,
    summarize_daily_by_faction, summarize_weekly_by_reviewer, utc_day,
)
from applicant_review.core.repository_protocols import LedgerStorage
from applicant_review.core.submission_record import SubmissionRecord

logger = logging.getLogger(__name__)


class LedgerStore:
    """Owns the submission collection for the process lifetime."""

    def __init__(
        self,
        storage: LedgerStorage,
        clock: Clock = utc_now,
        factions: Sequence[str] = (),
        write_retries: int = 3,
        write_timeout_seconds: float = 5.0,
        retry_base_delay_ms: int = 200,
        max_retry_delay_ms: int = 5_000,
    ):
        self._storage = storage
        self._clock = clock
        self._factions = list(factions)
        self._write_retries = write_retries
        self._write_timeout = write_timeout_seconds
        self._base_delay_ms = retry_base_delay_ms
        self._max_delay_ms = max_retry_delay_ms
        self._records: list[SubmissionRecord] = []
        self._loaded = False
        self._write_lock = asyncio.Lock()

    # --- Loading ---------------------------------------------------------------

    async def open(self) -> None:
        """Load the stored collection (idempotent)."""
        if self._loaded:
            return
        async with self._write_lock:
            if self._loaded:
                return
            raw = await self._storage.load()
            if raw is None:
                logger.info("No stored ledger found, starting empty")
                self._records = []
            else:
                self._records = [SubmissionRecord.from_dict(item) for item in raw]
                logger.info(f"Ledger loaded with {len(self._records)} record(s)")
            self._loaded = True

    # --- Mutations -------------------------------------------------------------

    async def upsert(self, entry: Mapping[str, Any]) -> SubmissionRecord:
        """Insert or merge a submission by (applicant_id, submission_ref)."""
        result = await self._commit(
            lambda records: apply_upsert(records, entry),
            LedgerOperation.UPSERT,
        )
        return result.record

    async def mark_decision(
        self,
        applicant_id: str,
        submission_ref: str,
        status: SubmissionStatus | str,
        reviewer_id: str,
        stage: DecisionStage | None = None,
    ) -> SubmissionRecord:
        """Record an accept/reject verdict (creates a minimal record if absent)."""
        result = await self._commit(
            lambda records: apply_decision(
                records, applicant_id, submission_ref, status, reviewer_id,
                self._clock(), stage,
            ),
            LedgerOperation.DECISION,
            reviewer_id=reviewer_id,
        )
        if result.created:
            logger.warning(
                "Decision recorded for a submission missing from the ledger",
                extra={
                    "applicant_id": applicant_id, "submission_ref": submission_ref,
                    "reviewer_id": reviewer_id,
                },
            )
        return result.record

    async def mark_grant_final(self, applicant_id: str, reviewer_id: str) -> SubmissionRecord:
        """Mark the applicant's latest record accepted_final (stage vocal)."""
        result = await self._commit(
            lambda records: apply_grant_final(
                records, applicant_id, reviewer_id, self._clock(),
            ),
            LedgerOperation.GRANT_FINAL,
            reviewer_id=reviewer_id,
        )
        if result.created:
            logger.warning(
                "Final grant recorded for an applicant with no ledger record",
                extra={"applicant_id": applicant_id, "reviewer_id": reviewer_id},
            )
        return result.record

    async def _commit(
        self,
        transition: Callable[[list[SubmissionRecord]], MutationResult],
        operation: LedgerOperation,
        reviewer_id: str | None = None,
    ) -> MutationResult:
        await self.open()
        async with self._write_lock:
            result = transition(self._records)
            event = {
                "operation": operation.value,
                "applicant_id": result.record.applicant_id,
                "submission_ref": result.record.submission_ref,
                "reviewer_id": reviewer_id,
                "status": result.record.status.value if result.record.status else None,
                "created": result.created,
            }
            await self._persist([r.to_dict() for r in result.records], event)
            self._records = result.records
            return result

    async def _persist(self, payload: list[dict], event: dict) -> None:
        """Durable save with per-attempt timeout and bounded retries."""
        timed_out = False
        for attempt in range(self._write_retries + 1):
            try:
                await asyncio.wait_for(
                    self._storage.save(payload, event), self._write_timeout,
                )
                return
            except asyncio.TimeoutError:
                timed_out = True
                logger.warning(
                    f"Ledger write timed out after {self._write_timeout}s",
                    extra={"attempt": attempt + 1},
                )
            except StorageFailureError as e:
                timed_out = False
                logger.warning(
                    e.message,
                    extra={"attempt": attempt + 1, "error_code": e.code},
                )
            if attempt < self._write_retries:
                await asyncio.sleep(self._backoff(attempt) / 1000)
        attempts = self._write_retries + 1
        logger.error(
            f"Ledger write abandoned after {attempts} attempt(s)",
            extra={"applicant_id": event.get("applicant_id")},
        )
        if timed_out:
            raise StorageTimeoutError("write", attempts)
        raise StorageFailureError(f"gave up after {attempts} attempt(s)", "write")

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self._max_delay_ms, (2 ** attempt) * self._base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    # --- Reads -----------------------------------------------------------------

    async def records(self) -> list[SubmissionRecord]:
        await self.open()
        return list(self._records)

    async def get(self, applicant_id: str, submission_ref: str) -> SubmissionRecord | None:
        await self.open()
        records = self._records
        index = find_record_index(records, applicant_id, submission_ref)
        return records[index] if index is not None else None

    async def summarize_daily_by_faction(
        self, reference_date: date | datetime | str | None = None,
    ) -> dict:
        await self.open()
        day = utc_day(reference_date, self._clock())
        return summarize_daily_by_faction(self._records, day, self._factions)

    async def summarize_weekly_by_reviewer(self) -> dict[str, int]:
        await self.open()
        return summarize_weekly_by_reviewer(self._records, self._clock())

    async def count_accepted_today_by_reviewer(
        self, reviewer_id: str, stage: DecisionStage | None = None,
    ) -> int:
        await self.open()
        return count_accepted_today_by_reviewer(
            self._records, reviewer_id, self._clock(), stage,
        )
