"""Initial schema - ledger_documents, ledger_events.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "ledger_documents",
        sa.Column("name", sa.String(64), primary_key=True),
        sa.Column("payload", sa.JSON, nullable=False),
        sa.Column("revision", sa.Integer, nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "ledger_events",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("ledger_name", sa.String(64), nullable=False),
        sa.Column("revision", sa.Integer, nullable=False),
        sa.Column("operation", sa.String(20), nullable=False),
        sa.Column("applicant_id", sa.String(128), nullable=False),
        sa.Column("submission_ref", sa.String(128), nullable=True),
        sa.Column("reviewer_id", sa.String(128), nullable=True),
        sa.Column("status", sa.String(20), nullable=True),
        sa.Column("created_record", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_ledger_events_ledger_name", "ledger_events", ["ledger_name"])


def downgrade() -> None:
    op.drop_index("ix_ledger_events_ledger_name", table_name="ledger_events")
    op.drop_table("ledger_events")
    op.drop_table("ledger_documents")
