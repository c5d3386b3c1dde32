"""
Configuration settings for the mistake-tracker service.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    storage_backend: Literal["memory", "sql"] = Field(
        default="memory",
        description="Record store: volatile in-memory maps or a SQLAlchemy database",
    )
    database_url: str = Field(
        default="sqlite:///mistake_tracker.db",
        description="SQLAlchemy connection string (used when storage_backend=sql)",
    )

    # ========================================
    # Scheduling & Mastery
    # ========================================
    remediation_interval_days: int = Field(
        default=1,
        ge=1,
        description="Days until the follow-up retest after an incorrect result",
    )
    mastery_streak: int = Field(
        default=3,
        ge=1,
        description="Most recent completed retests that must all be correct for mastery",
    )

    # ========================================
    # Statistics & Quiz
    # ========================================
    stats_timezone: str = Field(
        default="UTC",
        description="IANA timezone used for week boundaries and calendar days",
    )
    quiz_question_limit: int = Field(
        default=10,
        ge=1,
        description="Maximum questions in a generated quiz",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file path (rotated by loguru)",
    )

    # ========================================
    # API Server
    # ========================================
    api_host: str = Field(
        default="127.0.0.1",
        description="API server host",
    )
    api_port: int = Field(
        default=8100,
        description="API server port",
    )
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware",
    )

    @field_validator("stats_timezone")
    @classmethod
    def validate_stats_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown IANA timezone: {value!r}") from e
        return value

    def uses_sql_storage(self) -> bool:
        """Check whether records are persisted through SQLAlchemy."""
        return self.storage_backend == "sql"

    def get_scheduling_config(self) -> dict[str, Any]:
        """Get scheduling and mastery configuration as a dictionary."""
        return {
            "remediation_interval_days": self.remediation_interval_days,
            "mastery_streak": self.mastery_streak,
        }

    def get_stats_config(self) -> dict[str, Any]:
        """Get statistics and quiz configuration as a dictionary."""
        return {
            "timezone": self.stats_timezone,
            "quiz_question_limit": self.quiz_question_limit,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
