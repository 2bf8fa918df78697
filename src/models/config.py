"""Application configuration model using pydantic-settings."""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = "INFO"
    bulk_batch_size: int | None = None
    bulk_batch_delay_ms: int = 0
    bulk_max_concurrency: int | None = 5
    bulk_max_retries: int = 0
    bulk_retry_delay_ms: int = 0
    http_timeout_seconds: float = 30.0

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Log level must be a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            msg = f"log_level must be one of {', '.join(sorted(valid_levels))}"
            raise ValueError(msg)
        return upper_value

    @field_validator("bulk_batch_size", "bulk_max_concurrency")
    @classmethod
    def validate_optional_positive(cls, value: int | None) -> int | None:
        """Batch size and concurrency, when set, must be at least 1."""
        if value is not None and value < 1:
            msg = "bulk_batch_size and bulk_max_concurrency must be >= 1"
            raise ValueError(msg)
        return value

    @field_validator("bulk_batch_delay_ms", "bulk_retry_delay_ms")
    @classmethod
    def validate_delay(cls, value: int) -> int:
        """Delays must not be negative."""
        if value < 0:
            msg = "delays must be >= 0 milliseconds"
            raise ValueError(msg)
        return value

    @field_validator("bulk_max_retries")
    @classmethod
    def validate_max_retries(cls, value: int) -> int:
        """Max retries must be between 0 and 10."""
        if value < 0 or value > 10:
            msg = "bulk_max_retries must be between 0 and 10"
            raise ValueError(msg)
        return value

    @field_validator("http_timeout_seconds")
    @classmethod
    def validate_http_timeout(cls, value: float) -> float:
        """HTTP timeout must be positive."""
        if value <= 0:
            msg = "http_timeout_seconds must be > 0"
            raise ValueError(msg)
        return value
