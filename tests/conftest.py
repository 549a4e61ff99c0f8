"""Root conftest - shared fakes and fixtures for core and service tests.

Invariants:
    - Time is controlled by FakeClock (starts Wednesday 2024-01-10 12:00 UTC)
    - MemoryStorage stands in for SQL storage; failures and hangs are injected per call
    - Retry delays and write timeouts are shrunk so failure tests stay fast
"""

import asyncio
import copy
from datetime import datetime, timedelta, timezone

import pytest

from applicant_review.core.errors import StorageFailureError
from applicant_review.core.faction_choices import FactionChoices
from applicant_review.core.interview_engine import InterviewEngine
from applicant_review.services.ledger_store import LedgerStore
from applicant_review.services.review_coordinator import ReviewCoordinator

START = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)
QUESTIONS = [f"Question {i + 1}?" for i in range(15)]


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class StaticQuestions:
    def __init__(self, questions: list[str]):
        self.questions = list(questions)

    def get_questions(self) -> list[str]:
        return list(self.questions)


class MemoryStorage:
    """LedgerStorage fake. Set fail_next / hang_next to break the next saves."""

    def __init__(self, document: list[dict] | None = None):
        self.document = document
        self.events: list[dict] = []
        self.save_calls = 0
        self.fail_next = 0
        self.hang_next = 0
        self.load_error: Exception | None = None

    async def load(self) -> list[dict] | None:
        if self.load_error is not None:
            raise self.load_error
        return copy.deepcopy(self.document)

    async def save(self, records: list[dict], event: dict) -> None:
        self.save_calls += 1
        await asyncio.sleep(0)
        if self.hang_next:
            self.hang_next -= 1
            await asyncio.sleep(3600)
        if self.fail_next:
            self.fail_next -= 1
            raise StorageFailureError("disk unavailable", "write")
        self.document = copy.deepcopy(records)
        self.events.append(dict(event))


class RecordingSink:
    """GrantSink fake. Returns `result` (or raises `error`) and records every call."""

    def __init__(self, result: bool = True, error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    async def grant(self, applicant_id: str, role_id: str) -> bool:
        self.calls.append((applicant_id, role_id))
        if self.error is not None:
            raise self.error
        return self.result

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def questions():
    return StaticQuestions(QUESTIONS)


@pytest.fixture
def make_questions():
    return StaticQuestions


@pytest.fixture
def engine(questions, clock):
    return InterviewEngine(questions, clock=clock)


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def make_storage():
    return MemoryStorage


@pytest.fixture
def make_ledger(clock):
    """Factory: LedgerStore over the given storage with fast retries."""
    def _make(storage, **overrides) -> LedgerStore:
        options = {
            "clock": clock,
            "factions": ["Konoha", "Suna"],
            "write_retries": 2,
            "write_timeout_seconds": 0.05,
            "retry_base_delay_ms": 1,
        }
        options.update(overrides)
        return LedgerStore(storage, **options)
    return _make


@pytest.fixture
def ledger(make_ledger, memory_storage):
    return make_ledger(memory_storage)


@pytest.fixture
def factions():
    return FactionChoices()


@pytest.fixture
def coordinator(ledger, engine, factions, clock):
    return ReviewCoordinator(ledger, engine, factions, clock=clock)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def make_sink():
    return RecordingSink
