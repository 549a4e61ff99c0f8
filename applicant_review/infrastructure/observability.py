"""Structured Logging - JSON and text formatters carrying review context.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Review fields (applicant_id, reviewer_id, session_id, error_code, ...) surfaced when present
    - setup_logging is idempotent: re-running it replaces its own handler, never stacks

Design Decisions:
    - Formatters on stdlib logging: no extra dependency
    - Text format appends the same review fields as key=value pairs so local
      runs show who did what without switching to JSON
"""

import json
import logging
from datetime import datetime, timezone

REVIEW_FIELDS = (
    "applicant_id", "submission_ref", "reviewer_id", "session_id",
    "error_code", "stage", "role_id", "attempt", "kind", "path",
)

_HANDLER_NAME = "applicant_review"


def review_context(record: logging.LogRecord) -> dict:
    """Review fields attached to a record via `extra=`."""
    context = {}
    for key in REVIEW_FIELDS:
        val = record.__dict__.get(key)
        if val is not None:
            context[key] = val
    return context


class JSONFormatter(logging.Formatter):
    """One JSON object per line for log shipping."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **review_context(record),
        }
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


class ReviewTextFormatter(logging.Formatter):
    """Human-readable line followed by key=value review context."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s - %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = review_context(record)
        if not context:
            return line
        pairs = " ".join(f"{k}={v}" for k, v in context.items())
        head, sep, tail = line.partition("\n")
        return f"{head} [{pairs}]{sep}{tail}"


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install the application handler on the root logger."""
    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)
    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(JSONFormatter() if fmt == "json" else ReviewTextFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
