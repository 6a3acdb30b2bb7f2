"""Environment driven settings for the site audit API."""

from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables.

    Attributes:
        audit_jobs_queue_url: Destination queue for audit trigger messages.
        log_level: Root log level name.
        log_json: Render log lines as JSON (False switches to console output).
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    audit_jobs_queue_url: str = "local://audit-jobs"
    log_level: str = "INFO"
    log_json: bool = True

    @field_validator("audit_jobs_queue_url")
    @classmethod
    def validate_queue_url(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("AUDIT_JOBS_QUEUE_URL must not be empty")
        return value.strip()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        return value.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings()
