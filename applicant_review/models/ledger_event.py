"""LedgerEvent ORM - append-only audit log of ledger mutations.

Invariants:
    - One row per successful mutation, written in the same transaction as the document
    - Rows are never updated or deleted
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from applicant_review.db.base import Base


class LedgerEvent(Base):
    """Audit entry for an upsert, decision or final grant."""
    __tablename__ = "ledger_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ledger_name: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    revision: Mapped[int] = mapped_column(Integer, nullable=False)
    operation: Mapped[str] = mapped_column(String(20), nullable=False)
    applicant_id: Mapped[str] = mapped_column(String(128), nullable=False)
    submission_ref: Mapped[str | None] = mapped_column(String(128), nullable=True)
    reviewer_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    created_record: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
