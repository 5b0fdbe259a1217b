"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    STORAGE_DIR: str = Field(default="data/sessions")
    STORAGE_KEY: str = "interview_session"
    BACKUP_KEY: str = "interview_backup"

    ROLE_DEFAULT: str = "Frontend React Developer (Mid–Senior)"
    DURATION_MINUTES: int = Field(default=20, ge=1)
    FOLLOW_UP_SECONDS: int = Field(default=180, ge=1)
    MAX_QUESTIONS: int = Field(default=5, ge=1)

    LLM_BASE_URL: str = "https://api.openai.com/v1"
    LLM_ENDPOINT: str = "/chat/completions"
    LLM_MODEL: str = "gpt-4o-mini"
    LLM_API_KEY_ENV: str = "OPENAI_API_KEY"
    LLM_TIMEOUT_S: float = Field(default=20.0, ge=0.1)

    RETRY_MAX: int = Field(default=3, ge=0)
    RETRY_BASE_DELAY_S: float = Field(default=1.0, ge=0.0)
    RETRY_MAX_DELAY_S: float = Field(default=10.0, ge=0.0)
    RATE_LIMIT_PER_MINUTE: int = Field(default=10, ge=1)

    AUTOSAVE_DEBOUNCE_S: float = 1.0
    AUTOSAVE_INTERVAL_S: float = 30.0
    TICK_INTERVAL_S: float = Field(default=1.0, gt=0.0)

    HEURISTICS_CONFIG: str = "config/heuristics.yaml"
    DYNAMIC_QUESTION_PROBABILITY: float = Field(default=0.7, ge=0.0, le=1.0)

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
