"""Application configuration via pydantic-settings."""

from functools import lru_cache

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Settings
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS - comma-separated origins (env var: CORS_ORIGINS)
    cors_origins: str = "http://localhost:5173,http://127.0.0.1:5173"

    @computed_field
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # Stats service base URL; empty means the in-memory store is used
    stats_api_url: str = ""
    stats_api_timeout: float = 10.0

    # Playback / editing tunables (seconds)
    poll_interval_seconds: float = 0.1  # Position publish interval while playing
    duration_retry_seconds: float = 0.1  # Backoff while the player has no duration yet
    retime_tolerance_seconds: float = 2.0  # Candidate/clock divergence before re-seeking
    review_lead_in_seconds: float = 5.0  # How far before a stat a review seek lands


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
