"""Application configuration using Pydantic Settings.

Loads configuration from environment variables and .env file.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, RedisDsn, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ============ Application Settings ============
    APP_NAME: str = "TripWeaver"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # ============ Server Settings ============
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # ============ Geocoding Providers ============
    MAPBOX_ACCESS_TOKEN: str = Field(
        default="",
        description="Mapbox access token (primary geocoder)",
    )
    MAPBOX_BASE_URL: str = Field(
        default="https://api.mapbox.com/geocoding/v5/mapbox.places",
        description="Mapbox geocoding base URL",
    )
    GOOGLE_PLACES_API_KEY: str = Field(
        default="",
        description="Google Places API key (secondary geocoder and venue photos)",
    )

    # ============ Photo Providers ============
    UNSPLASH_ACCESS_KEY: str = Field(
        default="",
        description="Unsplash API access key (stock photos)",
    )
    PEXELS_API_KEY: str = Field(
        default="",
        description="Pexels API key (stock photos, second tier)",
    )
    PLACEHOLDER_BASE_URL: str = Field(
        default="https://picsum.photos/seed",
        description="Seeded placeholder image service",
    )

    # ============ Provider Call Policy ============
    PROVIDER_TIMEOUT_SECONDS: float = Field(
        default=5.0,
        gt=0,
        description="Upper bound for a single external provider call",
    )
    PROVIDER_MAX_RETRIES: int = Field(
        default=1,
        ge=1,
        description="Attempts per provider request on 5xx/transport errors",
    )
    PROVIDER_FAILURE_THRESHOLD: int = Field(
        default=5,
        ge=1,
        description="Consecutive failures before a provider tier is skipped",
    )

    # ============ Enrichment Cache ============
    ENRICHMENT_CACHE_CAPACITY: int = Field(
        default=2000,
        ge=1,
        description="Maximum entries held by the in-process enrichment cache",
    )
    ENRICHMENT_CACHE_TTL: int = Field(
        default=0,
        ge=0,
        description="Entry lifetime in seconds (0 keeps entries for the process lifetime)",
    )

    # ============ Redis Settings (optional persistent photo store) ============
    PHOTO_CACHE_REDIS_ENABLED: bool = False
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: str | None = None
    REDIS_DB: int = 0
    REDIS_MAX_CONNECTIONS: int = 10
    REDIS_DEFAULT_TTL: int = 7 * 24 * 3600  # 1 week

    @computed_field  # type: ignore[misc]
    @property
    def REDIS_URL(self) -> RedisDsn:
        """Construct Redis connection URL."""
        if self.REDIS_PASSWORD:
            return RedisDsn.build(
                scheme="redis",
                password=self.REDIS_PASSWORD,
                host=self.REDIS_HOST,
                port=self.REDIS_PORT,
                path=str(self.REDIS_DB),
            )
        return RedisDsn.build(
            scheme="redis",
            host=self.REDIS_HOST,
            port=self.REDIS_PORT,
            path=str(self.REDIS_DB),
        )

    # ============ Logging Settings ============
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["text", "json"] = "text"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
