"""Application configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings

from pubmed_scout.constants import (
    DEFAULT_EMAIL,
    DEFAULT_TIMEOUT,
    DEFAULT_TOOL,
    RATE_LIMIT_DELAY_MS,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # NCBI identification, sent with every E-utilities request
    ncbi_tool: str = DEFAULT_TOOL
    ncbi_email: str = DEFAULT_EMAIL

    # Outbound request pacing
    rate_limit_delay_ms: int = RATE_LIMIT_DELAY_MS
    timeout_seconds: float = DEFAULT_TIMEOUT

    # App Settings
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        frozen = True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
