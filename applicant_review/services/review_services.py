"""Review Services - builds the process-wide object graph from settings.

Invariants:
    - One LedgerStore, InterviewEngine and FactionChoices per process, created here
    - The grant sink is HttpGrantSink when grant_endpoint_url is set, else LoggingGrantSink
    - The same clock is shared by ledger, engine and coordinator
"""

from dataclasses import dataclass

from applicant_review.config import Settings
from applicant_review.core.domain_types import Clock, GrantTarget, utc_now
from applicant_review.core.faction_choices import FactionChoices
from applicant_review.core.interview_engine import InterviewEngine
from applicant_review.core.repository_protocols import (
    GrantSink, LedgerStorage, QuestionSetProvider,
)
from applicant_review.infrastructure.grant_sink import HttpGrantSink, LoggingGrantSink
from applicant_review.infrastructure.question_set import SettingsQuestionProvider
from applicant_review.services.ledger_store import LedgerStore
from applicant_review.services.review_coordinator import ReviewCoordinator
from applicant_review.services.side_effect_runner import SideEffectRunner


@dataclass
class ReviewServices:
    """Everything the API layer needs, wired once at startup."""
    ledger: LedgerStore
    engine: InterviewEngine
    factions: FactionChoices
    coordinator: ReviewCoordinator
    runner: SideEffectRunner
    sink: GrantSink


def build_grant_sink(settings: Settings) -> GrantSink:
    if settings.grant_endpoint_url:
        return HttpGrantSink(settings.grant_endpoint_url, settings.grant_timeout_seconds)
    return LoggingGrantSink()


def build_review_services(
    settings: Settings,
    storage: LedgerStorage,
    sink: GrantSink | None = None,
    questions: QuestionSetProvider | None = None,
    clock: Clock = utc_now,
) -> ReviewServices:
    ledger = LedgerStore(
        storage,
        clock=clock,
        factions=settings.factions,
        write_retries=settings.ledger_write_retries,
        write_timeout_seconds=settings.ledger_write_timeout_seconds,
        retry_base_delay_ms=settings.ledger_retry_base_delay_ms,
    )
    engine = InterviewEngine(questions or SettingsQuestionProvider(settings), clock=clock)
    factions = FactionChoices()
    grant_sink = sink or build_grant_sink(settings)
    runner = SideEffectRunner(grant_sink, {
        GrantTarget.INTERVIEW: settings.interview_role_id,
        GrantTarget.WHITELIST: settings.whitelist_role_id,
    })
    return ReviewServices(
        ledger=ledger,
        engine=engine,
        factions=factions,
        coordinator=ReviewCoordinator(ledger, engine, factions, clock=clock),
        runner=runner,
        sink=grant_sink,
    )
