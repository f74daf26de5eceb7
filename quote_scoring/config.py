"""Application configuration with comprehensive validation."""
from typing import Literal
from functools import lru_cache
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Scoring engine settings with production-grade validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Quote Scoring Engine"
    APP_VERSION: str = "1.0.0"
    APP_ENV: Literal["development", "staging", "production"] = "development"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"

    # Task executor defaults
    EXECUTOR_MAX_CONCURRENCY: int = Field(default=5, ge=1, le=100)
    EXECUTOR_TIMEOUT_MS: int = Field(default=30_000, ge=1)
    EXECUTOR_RETRIES: int = Field(default=1, ge=0, le=10)
    EXECUTOR_BACKOFF_BASE_MS: int = Field(default=1_000, ge=0)
    EXECUTOR_BACKOFF_CAP_MS: int = Field(default=10_000, ge=0)
    EXECUTOR_BATCH_SIZE: int = Field(default=5, ge=1, le=1000)
    EXECUTOR_CANCEL_ON_TIMEOUT: bool = False

    # Scoring scale
    SCORE_MIN: float = 0.0
    SCORE_MAX: float = 1000.0

    # Project size buckets (total amount, exclusive lower bounds)
    SIZE_MEDIUM_THRESHOLD: float = Field(default=30_000.0, ge=0)
    SIZE_LARGE_THRESHOLD: float = Field(default=100_000.0, ge=0)

    # Share of the adjusted prediction blended into the baseline (max 30%)
    ALTERNATE_MODEL_WEIGHT: float = Field(default=0.3, ge=0.0, le=1.0)

    # Experiments
    SIGNIFICANCE_ALPHA: float = Field(default=0.05, gt=0.0, lt=1.0)
    RECOMMENDATION_THRESHOLD_PCT: float = Field(default=5.0, ge=0.0, le=100.0)

    @model_validator(mode="after")
    def validate_backoff_window(self):
        """Backoff base must not exceed its cap."""
        if self.EXECUTOR_BACKOFF_BASE_MS > self.EXECUTOR_BACKOFF_CAP_MS:
            raise ValueError(
                f"EXECUTOR_BACKOFF_BASE_MS ({self.EXECUTOR_BACKOFF_BASE_MS}) must be "
                f"<= EXECUTOR_BACKOFF_CAP_MS ({self.EXECUTOR_BACKOFF_CAP_MS})"
            )
        return self

    @model_validator(mode="after")
    def validate_size_thresholds(self):
        """Size buckets must be ordered small < medium < large."""
        if self.SIZE_MEDIUM_THRESHOLD >= self.SIZE_LARGE_THRESHOLD:
            raise ValueError("SIZE_MEDIUM_THRESHOLD must be below SIZE_LARGE_THRESHOLD")
        return self

    @model_validator(mode="after")
    def validate_score_range(self):
        if self.SCORE_MIN >= self.SCORE_MAX:
            raise ValueError("SCORE_MIN must be below SCORE_MAX")
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
