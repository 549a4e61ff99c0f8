"""ORM Models - SQLAlchemy declarative models for ledger persistence.

Invariants:
    - All models inherit from Base (db/base.py)
    - ledger_documents holds the current collection; ledger_events is append-only

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all
"""

from applicant_review.models.ledger_document import LedgerDocument  # noqa: F401
from applicant_review.models.ledger_event import LedgerEvent  # noqa: F401
