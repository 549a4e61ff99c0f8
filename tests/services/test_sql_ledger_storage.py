"""SQL Ledger Storage - tests against a file-backed SQLite database.

Tests cover:
    - load() is None before the first save
    - Durability: a fresh LedgerStore over the same database sees prior writes
    - Every save appends one audit event
    - Logical ledger names are isolated
"""

import pytest

from applicant_review.core.domain_types import DecisionStage, SubmissionStatus
from applicant_review.infrastructure.database import DatabaseSessionManager
from applicant_review.infrastructure.ledger_storage import SqlLedgerStorage


@pytest.fixture
async def db_manager(tmp_path):
    manager = DatabaseSessionManager(f"sqlite+aiosqlite:///{tmp_path}/ledger.db")
    await manager.create_schema()
    yield manager
    await manager.dispose()


async def test_load_before_first_save_is_none(db_manager):
    assert await SqlLedgerStorage(db_manager).load() is None


async def test_writes_survive_a_new_store(db_manager, make_ledger):
    first = make_ledger(SqlLedgerStorage(db_manager))
    await first.upsert({"applicant_id": "u1", "submission_ref": "m1", "faction": "Suna"})
    await first.mark_decision("u1", "m1", "accepted", "r1", DecisionStage.FORM)

    reopened = make_ledger(SqlLedgerStorage(db_manager))
    record = await reopened.get("u1", "m1")
    assert record.faction == "Suna"
    assert record.status == SubmissionStatus.ACCEPTED
    assert record.stage == DecisionStage.FORM


async def test_each_save_appends_an_event(db_manager, make_ledger):
    storage = SqlLedgerStorage(db_manager)
    ledger = make_ledger(storage)
    await ledger.upsert({"applicant_id": "u1", "submission_ref": "m1"})
    await ledger.mark_grant_final("u1", "r1")
    assert await storage.event_count() == 2


async def test_ledger_names_are_isolated(db_manager, make_ledger):
    await make_ledger(SqlLedgerStorage(db_manager, "wl-log")).upsert(
        {"applicant_id": "u1", "submission_ref": "m1"},
    )
    other = SqlLedgerStorage(db_manager, "other-log")
    assert await other.load() is None


async def test_health_check(db_manager):
    assert await db_manager.health_check() is True
