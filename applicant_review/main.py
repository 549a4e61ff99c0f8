"""Applicant Review API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ReviewError -> structured JSON responses
    - The ledger is loaded once at startup; a load failure aborts startup
    - The idle-session sweeper runs only while the app is up

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - create_app() factory so tests can inject storage settings and a grant sink
"""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from datetime import timedelta

from fastapi import FastAPI

from applicant_review.api.error_handlers import register_error_handlers
from applicant_review.api.routes import events, health, interviews, recaps, submissions
from applicant_review.config import Settings, get_settings
from applicant_review.core.repository_protocols import GrantSink
from applicant_review.infrastructure.database import DatabaseSessionManager
from applicant_review.infrastructure.ledger_storage import SqlLedgerStorage
from applicant_review.infrastructure.observability import setup_logging
from applicant_review.services.review_services import build_review_services
from applicant_review.services.session_sweeper import sweep_idle_sessions

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None, sink: GrantSink | None = None,
) -> FastAPI:
    """Build the FastAPI app. Settings default to the environment."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level, settings.log_format)
        db_manager = DatabaseSessionManager(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )
        await db_manager.create_schema()
        storage = SqlLedgerStorage(db_manager, settings.ledger_name)
        services = build_review_services(settings, storage, sink=sink)
        await services.ledger.open()
        app.state.db_manager = db_manager
        app.state.services = services

        sweeper = None
        if settings.session_idle_timeout_seconds > 0:
            sweeper = asyncio.create_task(sweep_idle_sessions(
                services.engine,
                timedelta(seconds=settings.session_idle_timeout_seconds),
                settings.session_sweep_interval_seconds,
            ))
        logger.info("Applicant Review API started")
        yield
        logger.info("Applicant Review API shutting down")
        if sweeper is not None:
            sweeper.cancel()
            with suppress(asyncio.CancelledError):
                await sweeper
        await services.sink.aclose()
        await db_manager.dispose()

    app = FastAPI(
        title="Applicant Review API", version="1.0.0", lifespan=lifespan,
    )

    # Routes: explicit registration
    app.include_router(health.router)
    app.include_router(submissions.router)
    app.include_router(interviews.router)
    app.include_router(recaps.router)
    app.include_router(events.router)

    register_error_handlers(app)
    return app


app = create_app()
