"""
Application configuration using Pydantic Settings.

Environment-based behaviour (scheduler on/off, log verbosity) is controlled
by the ENVIRONMENT variable.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "test"] = "local"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Database
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./taskcycle.db"
    # SQLite busy timeout; concurrent counter increments wait on the write lock
    DATABASE_TIMEOUT_SECONDS: float = 30.0

    # ===========================================
    # Recurrence
    # ===========================================
    # Target number of incomplete future instances per chain
    RECURRENCE_WINDOW_SIZE: int = 3
    # How far in the past a recurring task's due date may be
    PAST_DUE_TOLERANCE_HOURS: int = 24

    # Counter used to allocate task_id values
    TASK_COUNTER_NAME: str = "tasks"

    # ===========================================
    # Maintenance (orphan sweep + window reconciliation)
    # ===========================================
    MAINTENANCE_ENABLED: bool = True
    MAINTENANCE_CRON_HOUR: int = 2
    MAINTENANCE_CRON_MINUTE: int = 0

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.ENVIRONMENT == "test"

    @property
    def is_local(self) -> bool:
        """Check if running in local environment."""
        return self.ENVIRONMENT == "local"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
