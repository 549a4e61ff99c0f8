"""Session Sweeper - background eviction of abandoned interview sessions.

Invariants:
    - Runs only while the app is up; cancelled cleanly on shutdown
    - A sweep failure is logged and the loop continues
"""

import asyncio
import logging
from datetime import timedelta

from applicant_review.core.interview_engine import InterviewEngine

logger = logging.getLogger(__name__)


async def sweep_idle_sessions(
    engine: InterviewEngine, max_idle: timedelta, interval_seconds: float,
) -> None:
    """Evict idle sessions every interval_seconds until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            evicted = engine.evict_idle(max_idle)
        except Exception as e:
            logger.error(f"Idle session sweep failed: {e}", exc_info=True)
            continue
        if evicted:
            logger.info(f"Evicted {len(evicted)} idle interview session(s)")
