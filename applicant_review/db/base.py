"""SQLAlchemy Declarative Base - metadata shared by the ledger tables.

Invariants:
    - LedgerDocument and LedgerEvent inherit from Base
    - Base.metadata is what create_schema() and Alembic autogenerate see
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for the ledger ORM models."""
