"""LedgerDocument ORM - the whole submission collection stored under a logical name.

Invariants:
    - name is the primary key (one row per ledger, e.g. "wl-log")
    - payload is the full list of serialized SubmissionRecords
    - revision increments on every successful save

Design Decisions:
    - JSON column for the collection: whole-document read-modify-write,
      serialized by the LedgerStore writer lock
"""

from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from applicant_review.db.base import Base


class LedgerDocument(Base):
    """Current state of one ledger."""
    __tablename__ = "ledger_documents"

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    payload: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    revision: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
