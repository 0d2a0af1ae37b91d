from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .news.models.article import RegionCode


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=[".env", ".env.local"],  # .env.local takes precedence over .env
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_host: str = Field(default="localhost", description="API host")
    api_port: int = Field(default=8000, description="API port")
    debug: bool = Field(default=False, description="Debug mode")

    allowed_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        description="Allowed CORS origins",
        validation_alias=AliasChoices("CORS_ALLOWED_ORIGINS", "ALLOWED_ORIGINS"),
    )

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format (json or text)")

    # Upstream news provider
    news_api_url: str = Field(
        default="https://newsapi.org/v2/top-headlines",
        description="Top headlines endpoint of the upstream news provider"
    )
    news_api_key: Optional[str] = Field(default=None, description="API key for the upstream news provider")
    news_request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for a single page fetch; expiry surfaces as a network error"
    )

    # Pagination
    news_page_size: int = Field(default=12, gt=0, description="Articles per page")
    news_total_pages: int = Field(default=5, gt=0, description="Fixed page ceiling for every feed")
    news_default_region: RegionCode = Field(default=RegionCode.US, description="Region used when the reader has no preference")

    # Refresh timing
    news_auto_refresh_interval_seconds: float = Field(
        default=300,
        gt=0,
        description="Background page-1 refresh interval (5 minutes)"
    )
    news_auto_refresh_max_backoff_seconds: float = Field(
        default=1800,
        gt=0,
        description="Upper bound for the background refresh delay after repeated failures"
    )
    news_refresh_cooldown_seconds: float = Field(
        default=30,
        ge=0,
        description="Minimum time between manual refreshes"
    )

    # History cache bounds
    news_history_max_entries: Optional[int] = Field(
        default=32,
        gt=0,
        description="Maximum archived categories kept in the history cache (None = unbounded)"
    )
    news_history_max_age_seconds: Optional[float] = Field(
        default=86400,
        gt=0,
        description="Maximum age of an archived page (None = unbounded)"
    )

    news_notice_buffer_size: int = Field(default=20, gt=0, description="Recent notices kept per feed session")

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_allowed_origins(cls, value):
        if value is None:
            return value
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("news_default_region", mode="before")
    @classmethod
    def normalize_region(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


@lru_cache()
def get_settings() -> Settings:
    return Settings()
