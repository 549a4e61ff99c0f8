"""SQL Ledger Storage - LedgerStorage backed by one JSON document row per ledger name.

Invariants:
    - load() returns None only when no document row exists (first-ever startup)
    - save() replaces the document and appends one LedgerEvent in a single transaction
    - Every SQLAlchemy failure surfaces as StorageFailureError (via DatabaseSessionManager)

Design Decisions:
    - Whole-collection document instead of a row per record: matches the
      whole-store read-modify-write the LedgerStore serializes
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import func, select

from applicant_review.infrastructure.database import DatabaseSessionManager
from applicant_review.models.ledger_document import LedgerDocument
from applicant_review.models.ledger_event import LedgerEvent

logger = logging.getLogger(__name__)


class SqlLedgerStorage:
    """Durable storage for the submission collection under a fixed logical name."""

    def __init__(self, db: DatabaseSessionManager, name: str = "wl-log"):
        self._db = db
        self.name = name

    async def load(self) -> list[dict] | None:
        async with self._db.session() as session:
            doc = await session.get(LedgerDocument, self.name)
            if doc is None:
                return None
            return list(doc.payload or [])

    async def save(self, records: list[dict], event: dict) -> None:
        now = datetime.now(timezone.utc)
        async with self._db.session() as session:
            doc = await session.get(LedgerDocument, self.name)
            if doc is None:
                doc = LedgerDocument(name=self.name, payload=[], revision=0)
                session.add(doc)
            doc.payload = records
            doc.revision = (doc.revision or 0) + 1
            doc.updated_at = now
            session.add(LedgerEvent(
                ledger_name=self.name,
                revision=doc.revision,
                operation=event["operation"],
                applicant_id=event["applicant_id"],
                submission_ref=event.get("submission_ref"),
                reviewer_id=event.get("reviewer_id"),
                status=event.get("status"),
                created_record=bool(event.get("created")),
                recorded_at=now,
            ))
            await session.commit()

    async def event_count(self) -> int:
        """Number of audit entries for this ledger."""
        async with self._db.session() as session:
            result = await session.execute(
                select(func.count(LedgerEvent.id)).where(
                    LedgerEvent.ledger_name == self.name,
                ),
            )
            return int(result.scalar_one())
