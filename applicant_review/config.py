"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - All deployment-specific values come from environment variables or .env
    - get_settings() is cached (lru_cache) - single instance per process
    - interview_questions is the raw list; truncation to 15 happens in the engine

Design Decisions:
    - Defaults work out-of-the-box with a local SQLite file
    - Role ids are opaque strings handed to the grant sink untouched
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/review.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_sqlite_url(cls, v: str) -> str:
        """Plain sqlite:// URLs need the aiosqlite driver for the async engine."""
        if isinstance(v, str) and v.startswith("sqlite://"):
            return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v

    database_pool_size: int = 5
    database_max_overflow: int = 5

    # Ledger
    ledger_name: str = "wl-log"
    ledger_write_retries: int = 3
    ledger_write_timeout_seconds: float = 5.0
    ledger_retry_base_delay_ms: int = 200

    # Review workflow
    factions: list[str] = ["Konoha", "Suna"]
    interview_questions: list[str] = []
    interview_role_id: str | None = None
    whitelist_role_id: str | None = None

    # Grant sink
    grant_endpoint_url: str | None = None
    grant_timeout_seconds: float = 10.0

    # Interview session eviction (0 disables the sweep)
    session_idle_timeout_seconds: int = 3600
    session_sweep_interval_seconds: int = 300

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
